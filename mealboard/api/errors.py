"""
JSON error bodies shared by the routers
"""
from fastapi import Request
from fastapi.responses import JSONResponse

from mealboard.services.menu_errors import MenuIngestionError


def error_response(status_code: int, message: str, code: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message, "code": code},
    )


async def menu_error_handler(request: Request, exc: MenuIngestionError) -> JSONResponse:
    return error_response(exc.status_code, exc.message, exc.code)
