"""
Menu grammar: turns raw slot strings into categorized menu items.

Spreadsheet cells carry no category, so categories are assigned by position
from CATEGORY_TEMPLATES. Text payloads name the category explicitly on every
line ("국: 된장국").
"""
from dataclasses import dataclass
from typing import Optional, Union

from mealboard.models.meal import MealType
from mealboard.services.menu_errors import UnknownMealType

TABULAR = "tabular"
LABELED = "labeled"

CATCH_ALL_CATEGORY = "기타"

RICE = "밥"
SOUP = "국"
MAIN = "메인메뉴"
SIDE = "반찬"

# Bump the version whenever a template changes; stored items keep the categories
# they were ingested with.
CATEGORY_TEMPLATE_VERSION = "2025.1"
CATEGORY_TEMPLATES = {
    MealType.BREAKFAST: (RICE, SOUP, SIDE, MAIN, SIDE, SIDE, SIDE, SIDE, SIDE),
    MealType.LUNCH_1: (MAIN,),  # single-dish lunch line
    MealType.LUNCH_2: (RICE, SOUP, MAIN, MAIN, SIDE, SIDE),
    MealType.DINNER: (RICE, SOUP, MAIN, MAIN, SIDE, SIDE),
}


@dataclass(frozen=True)
class CategorizedItem:
    category: str
    name: str
    price: float = 0.0
    name_en: Optional[str] = None


def coerce_meal_type(value: Union[MealType, str]) -> MealType:
    """Accept a MealType or its string value."""
    if isinstance(value, MealType):
        return value
    try:
        return MealType(value)
    except ValueError:
        raise UnknownMealType(f"Unknown meal type: {value!r}")


def category_for_position(meal_type: Union[MealType, str], position: int) -> str:
    template = CATEGORY_TEMPLATES[coerce_meal_type(meal_type)]
    if 0 <= position < len(template):
        return template[position]
    return CATCH_ALL_CATEGORY


def _categorize_tabular(raw_items: list[str], meal_type: MealType) -> list[CategorizedItem]:
    return [
        CategorizedItem(category=category_for_position(meal_type, idx), name=raw.strip())
        for idx, raw in enumerate(raw_items)
    ]


def _categorize_labeled(raw_items: list[str]) -> list[CategorizedItem]:
    items = []
    for line in raw_items:
        if ":" not in line:
            continue
        label, value = line.split(":", 1)
        name = value.strip()
        if not name:
            continue
        items.append(CategorizedItem(category=label.strip() or CATCH_ALL_CATEGORY, name=name))
    return items


def categorize(raw_items: list[str], meal_type: Union[MealType, str], mode: str = TABULAR) -> list[CategorizedItem]:
    """Categorize one meal slot's raw strings.

    tabular: item i takes the i-th template category (catch-all past the end);
    output length always equals input length.
    labeled: "category: name" lines; lines without a colon or without a name
    are dropped.
    """
    meal_type = coerce_meal_type(meal_type)
    if mode == TABULAR:
        return _categorize_tabular(raw_items, meal_type)
    if mode == LABELED:
        return _categorize_labeled(raw_items)
    raise ValueError(f"Unknown grammar mode: {mode}")


def translated_names(raw_items: list[str], meal_type: Union[MealType, str], mode: str = TABULAR) -> list[str]:
    """Ordered names of a translated slot, aligned with categorize() output."""
    return [item.name for item in categorize(raw_items, meal_type, mode)]
