"""
Week model - one menu cycle of a restaurant, anchored by its start date
"""
from sqlalchemy import Column, Integer, Date, DateTime, ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import relationship
from mealboard.database import Base


class Week(Base):
    __tablename__ = "weeks"

    id = Column(Integer, primary_key=True, index=True)
    start_date = Column(Date, nullable=False)
    restaurant_id = Column(Integer, ForeignKey("restaurants.id"), nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    restaurant = relationship("Restaurant", back_populates="weeks")
    meals = relationship("Meal", back_populates="week")

    __table_args__ = (
        UniqueConstraint("restaurant_id", "start_date", name="uq_week_restaurant_start"),
    )
