"""
Ingestion run bookkeeping and summary counts.

Nothing here touches the database: the engine records what it committed on an
IngestionRun and the counts are derived from those records.
"""
from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Iterable, Optional

NATIVE_PASS = "native"
TRANSLATION_PASS = "translation"


@dataclass
class MealOutcome:
    meal_id: int
    date: date
    meal_type: str
    created: bool = False


@dataclass
class ItemBatchOutcome:
    meal_id: int
    date: date
    meal_type: str
    count: int


@dataclass
class MenuSummary:
    total_days: int = 0
    total_meals: int = 0
    total_menu_items: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class IngestionRun:
    """What one ingestion or translation pass committed."""
    pass_name: str = NATIVE_PASS
    restaurant_id: Optional[int] = None
    restaurant_type: Optional[str] = None
    week_id: Optional[int] = None
    week_start_date: Optional[date] = None
    week_created: bool = False
    meals: list[MealOutcome] = field(default_factory=list)
    item_batches: list[ItemBatchOutcome] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    failures: list[str] = field(default_factory=list)

    def record_meal(self, meal_id: int, served_on: date, meal_type: str, created: bool = False):
        self.meals.append(MealOutcome(meal_id, served_on, meal_type, created))

    def record_items(self, meal_id: int, served_on: date, meal_type: str, count: int):
        self.item_batches.append(ItemBatchOutcome(meal_id, served_on, meal_type, count))

    def warn(self, message: str):
        self.warnings.append(message)

    def fail(self, message: str):
        self.failures.append(message)

    @property
    def meals_created(self) -> int:
        return sum(1 for m in self.meals if m.created)

    def to_result(self, message: str) -> dict:
        summary = summarize(self)
        return {
            "success": True,
            "restaurant_id": self.restaurant_id,
            "restaurant_type": self.restaurant_type,
            "week_id": self.week_id,
            "week_start_date": self.week_start_date.isoformat() if self.week_start_date else None,
            **summary.to_dict(),
            "message": message,
            "warnings": list(self.warnings),
            "failures": list(self.failures),
        }


def _tally(dates: Iterable[date], meal_ids: Iterable[int], item_count: int) -> MenuSummary:
    return MenuSummary(
        total_days=len(set(dates)),
        total_meals=len(set(meal_ids)),
        total_menu_items=item_count,
    )


def summarize(run: IngestionRun) -> MenuSummary:
    return _tally(
        (m.date for m in run.meals),
        (m.meal_id for m in run.meals),
        sum(batch.count for batch in run.item_batches),
    )


def summarize_days(meals_by_day: list[dict]) -> MenuSummary:
    """Same tally over the read-path tree ({"date", "meals": {type: {"id", "menu_items"}}})."""
    days_with_meals = [day for day in meals_by_day if day["meals"]]
    meals = [meal for day in days_with_meals for meal in day["meals"].values()]
    return _tally(
        (day["date"] for day in days_with_meals),
        (meal["id"] for meal in meals),
        sum(len(meal["menu_items"]) for meal in meals),
    )
