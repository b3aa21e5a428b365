"""
Menu board image endpoints
"""
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from mealboard.api.auth import verify_token
from mealboard.database import get_db
from mealboard.services.image_service import ImageService

router = APIRouter()


class ImageUploadRequest(BaseModel):
    image_name: str


class ImageInfoResponse(BaseModel):
    success: bool
    restaurant_code: str
    image_name: str
    image_date: str


@router.post("/upload", response_model=ImageInfoResponse)
async def upload_image_name(
    data: ImageUploadRequest,
    restaurant: str = Query(..., description="Restaurant type or printed name"),
    db: AsyncSession = Depends(get_db),
    token: str = Depends(verify_token),
):
    """Record the image currently shown for a restaurant."""
    return await ImageService(db).set_current_image(restaurant, data.image_name)


@router.get("/current", response_model=ImageInfoResponse)
async def get_current_image_name(
    restaurant: str = Query(..., description="Restaurant type or printed name"),
    db: AsyncSession = Depends(get_db),
):
    return await ImageService(db).get_current_image(restaurant)
