"""
Layout readers for weekly menu sources.

Two fixed layouts are supported:

* the cafeteria's Excel sheet, where the restaurant name sits in D2, the
  day/date headers ("Mon 5/26") run along row 6 and every meal slot owns a
  fixed row window below them;
* a plain-text payload with ``식당:`` / ``주 시작일:`` header lines, one section
  per weekday ("월요일 ...") and one ``아침:`` / ``점심1:`` / ``점심2:`` / ``저녁:``
  block per meal slot holding ``category: name`` lines.

Readers only extract raw strings; turning them into categorized items is the
job of ``menu_grammar``.
"""
import io
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional, Union

from openpyxl import load_workbook

from mealboard.config import get_settings
from mealboard.models.meal import MealType
from mealboard.models.restaurant import RestaurantType
from mealboard.services.menu_errors import DateFormatInvalid, FieldMissing, SourceUnreadable
from mealboard.services.menu_grammar import LABELED, TABULAR, coerce_meal_type

logger = logging.getLogger(__name__)
settings = get_settings()

RESTAURANT_FIELD = "restaurant"
WEEK_ANCHOR_FIELD = "week_anchor"

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@dataclass(frozen=True)
class DateColumn:
    """One served day of the week and where its menu lives in the source."""
    date: date
    day_label: str
    column_key: str


def parse_day_date_label(label, year: int) -> tuple[str, date]:
    """Parse a day/date header into (day label, calendar date).

    Accepts "Mon 5/26" (year supplied by the caller), "2025-05-26" and native
    spreadsheet date cells. The day name is kept as printed and is not checked
    against the computed date.
    """
    if isinstance(label, datetime):
        return label.strftime("%a"), label.date()
    if isinstance(label, date):
        return label.strftime("%a"), label

    text = str(label or "").strip()
    if not text:
        raise DateFormatInvalid("Date label is empty")

    if _ISO_DATE_RE.match(text):
        try:
            parsed = date.fromisoformat(text)
        except ValueError as e:
            raise DateFormatInvalid(f"Invalid date {text!r}: {e}") from e
        return parsed.strftime("%a"), parsed

    parts = text.split(None, 1)
    if len(parts) < 2:
        raise DateFormatInvalid(f"Invalid date label {text!r}, expected 'Day M/D'")

    day_label, month_day = parts
    segments = month_day.strip().split("/")
    if len(segments) != 2:
        raise DateFormatInvalid(f"Invalid date label {text!r}, expected 'Day M/D'")

    try:
        month = int(segments[0])
        day = int(segments[1])
        return day_label, date(year, month, day)
    except ValueError as e:
        raise DateFormatInvalid(f"Failed to parse month/day from {text!r}: {e}") from e


def roll_into_week(served_on: date, anchor: date) -> date:
    """Move a yearless "M/D" date that fell before the anchor into the next year.

    A week starting "Mon 12/29" continues with "Thu 1/1" of the following year.
    """
    if served_on >= anchor:
        return served_on
    try:
        rolled = served_on.replace(year=served_on.year + 1)
    except ValueError:
        return served_on
    return rolled if rolled >= anchor else served_on


class MenuLayoutReader(ABC):
    """Read-only view over one uploaded menu document."""

    grammar_mode = TABULAR

    def __init__(self, year: Optional[int] = None):
        self.year = year or settings.MENU_YEAR or date.today().year

    @abstractmethod
    def read_header_field(self, field_key: str) -> str:
        """Return the trimmed header value, raising FieldMissing when empty"""

    @abstractmethod
    def read_week_anchor_date(self) -> date:
        """Return the week's start date"""

    @abstractmethod
    def enumerate_date_columns(self, variant: RestaurantType) -> list[DateColumn]:
        """Return the served days present in the document, in order"""

    @abstractmethod
    def read_slot_raw_text(self, column_key: str, meal_type: Union[MealType, str]) -> list[str]:
        """Return the non-empty raw strings of one day's meal slot"""

    def close(self) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


# ---------------------------------------------------------------------------
# Excel layout
# ---------------------------------------------------------------------------

class ExcelMenuReader(MenuLayoutReader):
    """Cell-addressed reader for the weekly menu workbook."""

    HEADER_CELLS = {
        RESTAURANT_FIELD: "D2",
        WEEK_ANCHOR_FIELD: "D6",
    }
    DATE_HEADER_ROW = 6
    # Mon..Fri, then Sat/Sun for seven-day restaurants
    DAY_COLUMNS = ["D", "E", "F", "G", "H", "I", "J"]
    SLOT_ROWS = {
        MealType.BREAKFAST: (7, 16),
        MealType.LUNCH_1: (18, 18),
        MealType.LUNCH_2: (21, 26),
        MealType.DINNER: (27, 32),
    }

    def __init__(self, workbook, sheet, year: Optional[int] = None):
        super().__init__(year)
        self.workbook = workbook
        self.sheet = sheet

    @classmethod
    def open(cls, source, sheet_name: Optional[str] = None, year: Optional[int] = None) -> "ExcelMenuReader":
        """Open a workbook from a path, raw bytes or a binary file object."""
        if isinstance(source, (bytes, bytearray)):
            source = io.BytesIO(source)

        try:
            workbook = load_workbook(source, data_only=True)
        except Exception as e:
            raise SourceUnreadable(f"Failed to open Excel file: {e}") from e

        sheet = cls._pick_sheet(workbook, sheet_name or settings.MENU_SHEET_NAME)
        if sheet is None:
            workbook.close()
            raise SourceUnreadable("No non-empty sheet found in Excel file")

        logger.debug(f"Reading menu sheet '{sheet.title}'")
        return cls(workbook, sheet, year)

    @staticmethod
    def _pick_sheet(workbook, preferred: Optional[str]):
        if preferred and preferred in workbook.sheetnames:
            return workbook[preferred]

        for ws in workbook.worksheets:
            for row in ws.iter_rows(values_only=True):
                if any(c is not None and str(c).strip() for c in row):
                    return ws
        return None

    def _cell_value(self, coordinate: str):
        value = self.sheet[coordinate].value
        if isinstance(value, str):
            value = value.strip()
        return value

    def _cell_text(self, coordinate: str) -> str:
        value = self._cell_value(coordinate)
        if value is None:
            return ""
        if isinstance(value, datetime):
            return value.date().isoformat()
        return str(value).strip()

    def read_header_field(self, field_key: str) -> str:
        if field_key not in self.HEADER_CELLS:
            raise ValueError(f"Unknown header field: {field_key}")

        coordinate = self.HEADER_CELLS[field_key]
        text = self._cell_text(coordinate)
        if not text:
            raise FieldMissing(f"Cell {coordinate} ({field_key}) is empty")
        return text

    def read_week_anchor_date(self) -> date:
        coordinate = self.HEADER_CELLS[WEEK_ANCHOR_FIELD]
        value = self._cell_value(coordinate)
        if value is None or value == "":
            raise FieldMissing(f"Cell {coordinate} ({WEEK_ANCHOR_FIELD}) is empty")

        _, anchor = parse_day_date_label(value, self.year)
        return anchor

    def _anchor_or_none(self) -> Optional[date]:
        try:
            return self.read_week_anchor_date()
        except (FieldMissing, DateFormatInvalid):
            return None

    def enumerate_date_columns(self, variant: RestaurantType) -> list[DateColumn]:
        anchor = self._anchor_or_none()
        columns = []
        for col in self.DAY_COLUMNS[:variant.day_count]:
            coordinate = f"{col}{self.DATE_HEADER_ROW}"
            value = self._cell_value(coordinate)
            if value is None or value == "":
                continue
            try:
                day_label, served_on = parse_day_date_label(value, self.year)
            except DateFormatInvalid as e:
                logger.debug(f"Skipping date header {coordinate}: {e}")
                continue
            if anchor is not None:
                served_on = roll_into_week(served_on, anchor)
            columns.append(DateColumn(date=served_on, day_label=day_label, column_key=col))
        return columns

    def read_slot_raw_text(self, column_key: str, meal_type: Union[MealType, str]) -> list[str]:
        start_row, end_row = self.SLOT_ROWS[coerce_meal_type(meal_type)]
        items = []
        for row_idx in range(start_row, end_row + 1):
            text = self._cell_text(f"{column_key}{row_idx}")
            if text:
                items.append(text)
        return items

    def close(self) -> None:
        self.workbook.close()


# ---------------------------------------------------------------------------
# Plain-text layout
# ---------------------------------------------------------------------------

class TextMenuReader(MenuLayoutReader):
    """Section-addressed reader for the plain-text weekly menu."""

    grammar_mode = LABELED

    HEADER_PREFIXES = {
        RESTAURANT_FIELD: "식당:",
        WEEK_ANCHOR_FIELD: "주 시작일:",
    }
    DAY_NAMES = ["월요일", "화요일", "수요일", "목요일", "금요일", "토요일", "일요일"]
    MEAL_LABELS = {
        MealType.BREAKFAST: "아침",
        MealType.LUNCH_1: "점심1",
        MealType.LUNCH_2: "점심2",
        MealType.DINNER: "저녁",
    }

    def __init__(self, text: str, year: Optional[int] = None):
        super().__init__(year)
        self.lines = [line.strip() for line in text.splitlines()]
        self._sections: Optional[dict[str, list[str]]] = None

    @classmethod
    def open(cls, source, year: Optional[int] = None) -> "TextMenuReader":
        """Open a text payload given as str or UTF-8 bytes."""
        if isinstance(source, (bytes, bytearray)):
            try:
                source = bytes(source).decode("utf-8-sig")
            except UnicodeDecodeError as e:
                raise SourceUnreadable(f"Text data is not valid UTF-8: {e}") from e

        if not source or not source.strip():
            raise SourceUnreadable("Text data is empty")
        return cls(source, year)

    def read_header_field(self, field_key: str) -> str:
        if field_key not in self.HEADER_PREFIXES:
            raise ValueError(f"Unknown header field: {field_key}")

        prefix = self.HEADER_PREFIXES[field_key]
        for line in self.lines:
            if line.startswith(prefix):
                value = line[len(prefix):].strip()
                if value:
                    return value
        raise FieldMissing(f"'{prefix}' line ({field_key}) not found in text")

    def read_week_anchor_date(self) -> date:
        value = self.read_header_field(WEEK_ANCHOR_FIELD)
        if not _ISO_DATE_RE.match(value):
            raise DateFormatInvalid(f"Invalid date format: {value}, expected YYYY-MM-DD")
        try:
            return date.fromisoformat(value)
        except ValueError as e:
            raise DateFormatInvalid(f"Invalid date format: {value}, expected YYYY-MM-DD") from e

    def enumerate_date_columns(self, variant: RestaurantType) -> list[DateColumn]:
        start = self.read_week_anchor_date()
        sections = self._day_sections()
        # Days without a section in the payload are not served
        return [
            DateColumn(
                date=start + timedelta(days=offset),
                day_label=self.DAY_NAMES[offset],
                column_key=self.DAY_NAMES[offset],
            )
            for offset in range(variant.day_count)
            if self.DAY_NAMES[offset] in sections
        ]

    def _day_sections(self) -> dict[str, list[str]]:
        if self._sections is not None:
            return self._sections

        sections: dict[str, list[str]] = {}
        current_day = None
        for line in self.lines:
            if not line:
                continue
            day = next((d for d in self.DAY_NAMES if line.startswith(d)), None)
            if day:
                current_day = day
                sections[day] = []
            elif current_day:
                sections[current_day].append(line)

        self._sections = sections
        return sections

    def _is_meal_label(self, line: str) -> bool:
        return any(line.startswith(label + ":") for label in self.MEAL_LABELS.values())

    def read_slot_raw_text(self, column_key: str, meal_type: Union[MealType, str]) -> list[str]:
        label = self.MEAL_LABELS[coerce_meal_type(meal_type)] + ":"
        day_lines = self._day_sections().get(column_key, [])

        items = []
        in_slot = False
        for line in day_lines:
            if line.startswith(label):
                in_slot = True
                continue
            if in_slot:
                if self._is_meal_label(line):
                    break
                items.append(line)
        return items
