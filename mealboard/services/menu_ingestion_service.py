"""
Menu ingestion engine.

Native pass: resolve restaurant -> resolve/create week -> for every served day
and meal slot, resolve/create the meal and upsert its categorized items.
Translation pass: walk the same slots of a translated document and patch
name_en onto the already stored items by position.

Identity failures (source, header, restaurant, week) abort the run. Anything
that goes wrong for a single meal is logged, recorded on the run and skipped.
"""
import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from mealboard.models.meal import MealType
from mealboard.models.restaurant import Restaurant, RestaurantType
from mealboard.services.menu_errors import (
    FieldMissing,
    RestaurantMismatch,
    RestaurantNotFound,
    WeekNotFound,
)
from mealboard.services.menu_grammar import categorize, translated_names
from mealboard.services.menu_reader import RESTAURANT_FIELD, DateColumn, MenuLayoutReader
from mealboard.services.menu_repository import MenuRepository
from mealboard.services.menu_summary import NATIVE_PASS, TRANSLATION_PASS, IngestionRun, summarize

logger = logging.getLogger(__name__)


class MenuIngestionService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.repo = MenuRepository(db)

    async def resolve_restaurant(
        self,
        name: Optional[str] = None,
        variant: Optional[RestaurantType] = None,
    ) -> Restaurant:
        """Look up an existing restaurant by type, or by printed name / type label."""
        if variant is not None:
            restaurant = await self.repo.find_restaurant_by_code(variant.value)
            if restaurant is None:
                raise RestaurantNotFound(f"Restaurant not found for type {variant.value}")
            return restaurant

        restaurant = await self.repo.find_restaurant(name or "")
        if restaurant is None:
            raise RestaurantNotFound(f"Restaurant not found: {name}")
        return restaurant

    async def _restaurant_for_run(
        self,
        reader: MenuLayoutReader,
        restaurant_type: Optional[RestaurantType],
    ) -> Restaurant:
        if restaurant_type is None:
            return await self.resolve_restaurant(name=reader.read_header_field(RESTAURANT_FIELD))

        restaurant = await self.resolve_restaurant(variant=restaurant_type)

        # The header is optional when the caller names the restaurant
        try:
            header = reader.read_header_field(RESTAURANT_FIELD)
        except FieldMissing:
            return restaurant

        header_restaurant = await self.repo.find_restaurant(header)
        if header_restaurant is not None and header_restaurant.id != restaurant.id:
            raise RestaurantMismatch(
                f"Restaurant type mismatch: requested {restaurant_type.value}, "
                f"document is for {header_restaurant.code}"
            )
        return restaurant

    # ----- native pass -----

    async def ingest(
        self,
        reader: MenuLayoutReader,
        restaurant_type: Optional[RestaurantType] = None,
        year: Optional[int] = None,
    ) -> IngestionRun:
        if year is not None:
            reader.year = year

        restaurant = await self._restaurant_for_run(reader, restaurant_type)
        variant = restaurant.restaurant_type
        start_date = reader.read_week_anchor_date()

        run = IngestionRun(
            pass_name=NATIVE_PASS,
            restaurant_id=restaurant.id,
            restaurant_type=variant.value,
            week_start_date=start_date,
        )
        logger.info(f"Ingesting menu for {restaurant.name} ({variant.value}), week of {start_date}")

        run.week_id, run.week_created = await self.repo.resolve_or_create_week(restaurant.id, start_date)

        columns = reader.enumerate_date_columns(variant)
        if not columns:
            run.warn("No served days found in document")

        for column in columns:
            for meal_type in MealType:
                await self._ingest_slot(reader, run, column, meal_type)

        summary = summarize(run)
        logger.info(
            f"Menu ingested: week={run.week_id} (created={run.week_created}), "
            f"days={summary.total_days}, meals={summary.total_meals} "
            f"({run.meals_created} new), items={summary.total_menu_items}, "
            f"failures={len(run.failures)}"
        )
        return run

    async def _ingest_slot(
        self,
        reader: MenuLayoutReader,
        run: IngestionRun,
        column: DateColumn,
        meal_type: MealType,
    ):
        slot = f"{meal_type.value} on {column.date}"
        try:
            meal_id, created = await self.repo.resolve_or_create_meal(
                run.week_id, column.date, column.day_label, meal_type.value
            )
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to create meal {slot}: {e}")
            run.fail(f"InsertFailed: meal {slot}: {e}")
            return

        run.record_meal(meal_id, column.date, meal_type.value, created)

        items = categorize(reader.read_slot_raw_text(column.column_key, meal_type), meal_type, reader.grammar_mode)
        if not items:
            logger.debug(f"Empty slot {slot}")
            return

        try:
            written = await self.repo.upsert_menu_items(meal_id, items)
        except SQLAlchemyError as e:
            logger.error(f"Failed to save menu items for {slot}: {e}")
            run.fail(f"InsertFailed: items of {slot}: {e}")
            return

        run.record_items(meal_id, column.date, meal_type.value, written)

    # ----- translation pass -----

    async def apply_translations(self, reader: MenuLayoutReader, week_id: int) -> IngestionRun:
        week = await self.repo.get_week(week_id)
        if week is None:
            raise WeekNotFound(f"Week {week_id} not found")

        restaurant = await self.repo.get_restaurant(week.restaurant_id)
        variant = restaurant.restaurant_type

        run = IngestionRun(
            pass_name=TRANSLATION_PASS,
            restaurant_id=restaurant.id,
            restaurant_type=variant.value,
            week_id=week.id,
            week_start_date=week.start_date,
        )
        logger.info(f"Applying translations to week {week.id} ({variant.value}, {week.start_date})")

        for column in reader.enumerate_date_columns(variant):
            for meal_type in MealType:
                await self._translate_slot(reader, run, column, meal_type)

        summary = summarize(run)
        logger.info(
            f"Translations applied: week={run.week_id}, meals={summary.total_meals}, "
            f"items={summary.total_menu_items}, warnings={len(run.warnings)}"
        )
        return run

    async def _translate_slot(
        self,
        reader: MenuLayoutReader,
        run: IngestionRun,
        column: DateColumn,
        meal_type: MealType,
    ):
        names = translated_names(
            reader.read_slot_raw_text(column.column_key, meal_type), meal_type, reader.grammar_mode
        )
        if not names:
            return

        slot = f"{meal_type.value} on {column.date}"
        meal_id = await self.repo.find_meal(run.week_id, column.date, meal_type.value)
        if meal_id is None:
            logger.warning(f"No stored meal for {slot}, translations skipped")
            run.warn(f"MealNotFound: {slot}")
            return

        run.record_meal(meal_id, column.date, meal_type.value)
        patched = await self.patch_translations(meal_id, names, run)
        if patched:
            run.record_items(meal_id, column.date, meal_type.value, patched)

    async def patch_translations(
        self,
        meal_id: int,
        names: list[str],
        run: Optional[IngestionRun] = None,
    ) -> int:
        """Set name_en on the meal's items by stored position; returns how many were patched.

        names[i] goes to the item stored at position i. A repeated item in the
        native slot keeps its first position, so the later index has no row
        and its translation is skipped.
        """
        existing = await self.repo.fetch_menu_items_ordered(meal_id)
        by_position = {item.position: item for item in existing}

        targets = [(by_position[i], name_en) for i, name_en in enumerate(names) if i in by_position]
        last_position = max(by_position, default=-1)
        if len(targets) != len(existing) or len(names) > last_position + 1:
            message = (
                f"AlignmentMismatch: meal {meal_id} has {len(existing)} items "
                f"but {len(names)} translations"
            )
            logger.warning(message)
            if run is not None:
                run.warn(message)

        patched = 0
        try:
            for item, name_en in targets:
                if await self.repo.update_menu_item_translation(item.id, name_en):
                    patched += 1
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to update translations for meal {meal_id}: {e}")
            if run is not None:
                run.fail(f"UpdateFailed: meal {meal_id}: {e}")
            return 0

        return patched
