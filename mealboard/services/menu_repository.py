"""
Storage operations for the menu graph (restaurant -> week -> meal -> menu item).

Week and meal identity is resolved with a single INSERT ... ON CONFLICT DO
NOTHING followed by a select on the natural key, so two concurrent
ingestions of the same week settle on the row the unique constraint kept.
"""
import logging
from datetime import date, timedelta
from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from mealboard.models.meal import Meal
from mealboard.models.menu_item import MenuItem
from mealboard.models.restaurant import Restaurant
from mealboard.models.week import Week
from mealboard.services.menu_grammar import CategorizedItem
from mealboard.utils.db_compat import insert_or_ignore, upsert_insert
from mealboard.utils.validators import parse_restaurant_type

logger = logging.getLogger(__name__)


class MenuRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    # ----- restaurants -----

    async def find_restaurant_by_name(self, name: str) -> Optional[Restaurant]:
        result = await self.db.execute(
            select(Restaurant).where(Restaurant.name == name)
        )
        return result.scalar_one_or_none()

    async def find_restaurant_by_code(self, code: str) -> Optional[Restaurant]:
        result = await self.db.execute(
            select(Restaurant).where(Restaurant.code == code)
        )
        return result.scalar_one_or_none()

    async def find_restaurant(self, label: str) -> Optional[Restaurant]:
        """Match a restaurant by its printed name, then by a type label ("RESTAURANT_1", "식당 1")."""
        restaurant = await self.find_restaurant_by_name(label)
        if restaurant:
            return restaurant
        try:
            restaurant_type = parse_restaurant_type(label)
        except ValueError:
            return None
        return await self.find_restaurant_by_code(restaurant_type.value)

    async def get_restaurant(self, restaurant_id: int) -> Optional[Restaurant]:
        return await self.db.get(Restaurant, restaurant_id)

    async def seed_restaurants(self, rows: list[dict]) -> int:
        """Insert reference restaurants that are missing; returns how many were added."""
        added = 0
        for row in rows:
            if await self.find_restaurant_by_code(row["code"]):
                continue
            self.db.add(Restaurant(**row))
            added += 1
        await self.db.commit()
        return added

    # ----- weeks -----

    async def get_week(self, week_id: int) -> Optional[Week]:
        return await self.db.get(Week, week_id)

    async def find_week(self, restaurant_id: int, start_date: date) -> Optional[int]:
        result = await self.db.execute(
            select(Week.id).where(
                Week.restaurant_id == restaurant_id,
                Week.start_date == start_date,
            )
        )
        return result.scalar_one_or_none()

    async def find_week_containing(self, restaurant_id: int, on_date: date) -> Optional[Week]:
        """Latest week of the restaurant whose 7-day span covers on_date."""
        result = await self.db.execute(
            select(Week)
            .where(
                Week.restaurant_id == restaurant_id,
                Week.start_date <= on_date,
                Week.start_date >= on_date - timedelta(days=6),
            )
            .order_by(Week.start_date.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def create_week(self, restaurant_id: int, start_date: date) -> bool:
        """Insert the week unless it exists; True when a row was created."""
        result = await self.db.execute(
            insert_or_ignore(
                self.db,
                Week.__table__,
                {"restaurant_id": restaurant_id, "start_date": start_date},
                ["restaurant_id", "start_date"],
            )
        )
        return result.rowcount == 1

    async def resolve_or_create_week(self, restaurant_id: int, start_date: date) -> tuple[int, bool]:
        created = await self.create_week(restaurant_id, start_date)
        week_id = await self.find_week(restaurant_id, start_date)
        await self.db.commit()
        if week_id is None:
            raise RuntimeError(f"Week {start_date} for restaurant {restaurant_id} vanished after insert")
        return week_id, created

    # ----- meals -----

    async def find_meal(self, week_id: int, meal_date: date, meal_type: str) -> Optional[int]:
        result = await self.db.execute(
            select(Meal.id).where(
                Meal.week_id == week_id,
                Meal.date == meal_date,
                Meal.meal_type == meal_type,
            )
        )
        return result.scalar_one_or_none()

    async def create_meal(self, week_id: int, meal_date: date, day_of_week: str, meal_type: str) -> bool:
        result = await self.db.execute(
            insert_or_ignore(
                self.db,
                Meal.__table__,
                {
                    "week_id": week_id,
                    "date": meal_date,
                    "day_of_week": day_of_week,
                    "meal_type": meal_type,
                },
                ["week_id", "date", "meal_type"],
            )
        )
        return result.rowcount == 1

    async def resolve_or_create_meal(
        self, week_id: int, meal_date: date, day_of_week: str, meal_type: str
    ) -> tuple[int, bool]:
        created = await self.create_meal(week_id, meal_date, day_of_week, meal_type)
        meal_id = await self.find_meal(week_id, meal_date, meal_type)
        await self.db.commit()
        if meal_id is None:
            raise RuntimeError(f"Meal {meal_type} on {meal_date} vanished after insert")
        return meal_id, created

    # ----- menu items -----

    async def upsert_menu_items(self, meal_id: int, items: list[CategorizedItem]) -> int:
        """Insert a meal's items in one transaction.

        On a (meal, category, name) collision only name_en, price and
        updated_at change; a missing incoming translation keeps the stored one.
        Any failure rolls back this meal's batch and re-raises.
        """
        if not items:
            return 0

        table = MenuItem.__table__
        try:
            for position, item in enumerate(items):
                stmt = upsert_insert(self.db, table).values(
                    meal_id=meal_id,
                    category=item.category,
                    name=item.name,
                    name_en=item.name_en,
                    price=item.price,
                    position=position,
                )
                stmt = stmt.on_conflict_do_update(
                    index_elements=["meal_id", "category", "name"],
                    set_={
                        "name_en": func.coalesce(stmt.excluded.name_en, table.c.name_en),
                        "price": stmt.excluded.price,
                        "updated_at": func.now(),
                    },
                )
                await self.db.execute(stmt)
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise

        # A repeated (category, name) in one slot lands on the same row
        return len({(item.category, item.name) for item in items})

    async def fetch_menu_items_ordered(self, meal_id: int) -> list:
        """Items of a meal in native-pass order (rows with id, position, category, name, name_en)."""
        result = await self.db.execute(
            select(MenuItem.id, MenuItem.position, MenuItem.category, MenuItem.name, MenuItem.name_en)
            .where(MenuItem.meal_id == meal_id)
            .order_by(MenuItem.position, MenuItem.id)
        )
        return list(result.all())

    async def update_menu_item_translation(self, item_id: int, name_en: str) -> bool:
        """Set one item's translation; the caller owns the transaction."""
        result = await self.db.execute(
            update(MenuItem)
            .where(MenuItem.id == item_id)
            .values(name_en=name_en, updated_at=func.now())
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
