"""
Restaurant model (RESTAURANT_1 weekday cafeteria, RESTAURANT_2 seven-day cafeteria)
"""
from enum import Enum

from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.orm import relationship
from mealboard.database import Base


class RestaurantType(str, Enum):
    RESTAURANT_1 = "RESTAURANT_1"
    RESTAURANT_2 = "RESTAURANT_2"

    @property
    def day_count(self) -> int:
        """Number of served days per week (Mon-Fri or Mon-Sun)."""
        return 5 if self is RestaurantType.RESTAURANT_1 else 7


# Reference rows seeded at startup; the ingestion pipeline never creates restaurants
DEFAULT_RESTAURANTS = [
    {"code": RestaurantType.RESTAURANT_1.value, "name": "제1학생식당", "name_en": "Student Cafeteria 1"},
    {"code": RestaurantType.RESTAURANT_2.value, "name": "제2학생식당", "name_en": "Student Cafeteria 2"},
]


class Restaurant(Base):
    __tablename__ = "restaurants"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String, unique=True, nullable=False)  # "RESTAURANT_1", "RESTAURANT_2"
    name = Column(String, unique=True, nullable=False)  # as printed in the menu sheet header
    name_en = Column(String, nullable=True)

    # Menu board image currently shown for this restaurant
    current_image_name = Column(String, nullable=True)
    current_image_at = Column(DateTime, nullable=True)

    weeks = relationship("Week", back_populates="restaurant")

    @property
    def restaurant_type(self) -> RestaurantType:
        return RestaurantType(self.code)
