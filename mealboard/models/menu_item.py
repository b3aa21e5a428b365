"""
Menu item model - one categorized dish inside a meal
"""
from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import relationship
from mealboard.database import Base


class MenuItem(Base):
    __tablename__ = "menu_items"

    id = Column(Integer, primary_key=True, index=True)
    meal_id = Column(Integer, ForeignKey("meals.id"), nullable=False, index=True)
    category = Column(String, nullable=False)  # "밥", "국", "메인메뉴", "반찬", "기타", ...
    name = Column(String, nullable=False)
    name_en = Column(String, nullable=True)    # filled by the translation pass
    price = Column(Float, nullable=False, default=0)
    position = Column(Integer, nullable=False, default=0)  # ordinal within the meal, native pass
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    meal = relationship("Meal", back_populates="menu_items")

    __table_args__ = (
        UniqueConstraint("meal_id", "category", "name", name="uq_menu_item_meal_category_name"),
    )
