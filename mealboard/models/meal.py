"""
Meal model - one meal slot served on a date within a week
"""
from enum import Enum

from sqlalchemy import Column, Integer, String, Date, DateTime, ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import relationship
from mealboard.database import Base


class MealType(str, Enum):
    """Meal slots, declared in serving order."""
    BREAKFAST = "Breakfast"
    LUNCH_1 = "Lunch_1"
    LUNCH_2 = "Lunch_2"
    DINNER = "Dinner"

    @property
    def order(self) -> int:
        return list(MealType).index(self) + 1


# Sort key used by read queries (CASE meal_type WHEN ... THEN n)
MEAL_TYPE_ORDER = {mt.value: mt.order for mt in MealType}


class Meal(Base):
    __tablename__ = "meals"

    id = Column(Integer, primary_key=True, index=True)
    week_id = Column(Integer, ForeignKey("weeks.id"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    day_of_week = Column(String, nullable=False)  # label as printed: "Mon", "월요일"
    meal_type = Column(String, nullable=False)    # MealType value
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    week = relationship("Week", back_populates="meals")
    menu_items = relationship(
        "MenuItem",
        back_populates="meal",
        order_by="[MenuItem.position, MenuItem.id]",
    )

    __table_args__ = (
        UniqueConstraint("week_id", "date", "meal_type", name="uq_meal_week_date_type"),
    )
