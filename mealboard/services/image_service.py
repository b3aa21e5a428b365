"""
Current menu board image per restaurant.

Only the image's name is stored; the file itself is served elsewhere.
"""
import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from mealboard.models.restaurant import Restaurant
from mealboard.services.menu_errors import FieldMissing, RestaurantNotFound
from mealboard.services.menu_repository import MenuRepository

logger = logging.getLogger(__name__)

IMAGE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _image_info(restaurant: Restaurant) -> dict:
    image_at = restaurant.current_image_at
    return {
        "success": True,
        "restaurant_code": restaurant.code,
        "image_name": restaurant.current_image_name or "",
        "image_date": image_at.strftime(IMAGE_DATE_FORMAT) if image_at else "",
    }


class ImageService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.repo = MenuRepository(db)

    async def _restaurant(self, label: str) -> Restaurant:
        restaurant = await self.repo.find_restaurant(label)
        if restaurant is None:
            raise RestaurantNotFound(f"Restaurant not found: {label}")
        return restaurant

    async def set_current_image(self, label: str, image_name: str) -> dict:
        image_name = (image_name or "").strip()
        if not image_name:
            raise FieldMissing("image_name is required")

        restaurant = await self._restaurant(label)
        restaurant.current_image_name = image_name
        restaurant.current_image_at = datetime.now().replace(microsecond=0)
        await self.db.commit()

        logger.info(f"Current image for {restaurant.code} set to {image_name}")
        return _image_info(restaurant)

    async def get_current_image(self, label: str) -> dict:
        return _image_info(await self._restaurant(label))
