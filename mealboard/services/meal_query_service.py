"""
Read path: a restaurant's week of meals, grouped by day.
"""
import logging
from datetime import date, timedelta

from sqlalchemy import case, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from mealboard.models.meal import MEAL_TYPE_ORDER, Meal
from mealboard.services.menu_errors import RestaurantNotFound, WeekNotFound
from mealboard.services.menu_repository import MenuRepository
from mealboard.services.menu_summary import summarize_days

logger = logging.getLogger(__name__)

meal_type_order = case(MEAL_TYPE_ORDER, value=Meal.meal_type, else_=len(MEAL_TYPE_ORDER) + 1)


def _menu_item_dict(item) -> dict:
    return {
        "id": item.id,
        "category": item.category,
        "name": item.name,
        "name_en": item.name_en,
        "price": item.price,
    }


async def get_restaurant_week_meals(db: AsyncSession, restaurant_name: str, on_date: date) -> dict:
    """
    Return the week containing on_date for the named restaurant.

    The restaurant may be given by type ("RESTAURANT_1") or printed name.
    Raises RestaurantNotFound / WeekNotFound.
    """
    repo = MenuRepository(db)
    restaurant = await repo.find_restaurant(restaurant_name)
    if restaurant is None:
        raise RestaurantNotFound(f"Restaurant not found: {restaurant_name}")

    week = await repo.find_week_containing(restaurant.id, on_date)
    if week is None:
        raise WeekNotFound("No meal data found for the specified week")

    result = await db.execute(
        select(Meal)
        .options(selectinload(Meal.menu_items))
        .where(Meal.week_id == week.id)
        .order_by(Meal.date, meal_type_order)
        .execution_options(populate_existing=True)
    )
    meals = result.scalars().all()

    days: dict[date, dict] = {}
    for meal in meals:
        day = days.setdefault(meal.date, {
            "date": meal.date,
            "day_of_week": meal.day_of_week,
            "meals": {},
        })
        day["meals"][meal.meal_type] = {
            "id": meal.id,
            "meal_type": meal.meal_type,
            "menu_items": [_menu_item_dict(item) for item in meal.menu_items],
        }

    meals_by_day = list(days.values())
    summary = summarize_days(meals_by_day)
    logger.debug(f"Read {summary.total_meals} meals for {restaurant.code} week {week.start_date}")

    return {
        "restaurant": {
            "id": restaurant.id,
            "code": restaurant.code,
            "name": restaurant.name,
            "name_en": restaurant.name_en,
        },
        "week": {
            "id": week.id,
            "start_date": week.start_date,
            "end_date": week.start_date + timedelta(days=6),
        },
        "meals_by_day": meals_by_day,
        "summary": summary.to_dict(),
    }
