"""
Bearer token authentication for upload endpoints
"""
import logging
import secrets
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from mealboard.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


async def verify_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    """Require `Authorization: Bearer <BEARER_TOKEN>`"""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if credentials is None or credentials.scheme.lower() != "bearer":
        raise credentials_exception

    if not secrets.compare_digest(credentials.credentials, settings.BEARER_TOKEN):
        logger.warning("Rejected upload with invalid bearer token")
        raise credentials_exception

    return credentials.credentials
