"""
Input validation utilities
"""
import os
import re
from datetime import date

from mealboard.models.restaurant import RestaurantType

ALLOWED_EXCEL_EXTENSIONS = {".xlsx"}
STANDALONE_DIGIT = re.compile(r"(?<!\d)([12])(?!\d)")


def parse_restaurant_type(value: str) -> RestaurantType:
    """Normalize a restaurant label ("RESTAURANT_1", "restaurant_2", "식당 1") to its type"""
    normalized = (value or "").strip().upper()
    for rt in RestaurantType:
        if normalized == rt.value:
            return rt
    # Loose labels such as "식당 1" / "제2식당"; "제12식당" is neither
    match = STANDALONE_DIGIT.search(normalized)
    if match:
        return RestaurantType.RESTAURANT_1 if match.group(1) == "1" else RestaurantType.RESTAURANT_2
    raise ValueError(
        f"Invalid restaurant type: {value!r} (must be RESTAURANT_1 or RESTAURANT_2)"
    )


def validate_excel_filename(filename: str) -> str:
    """Validate that an uploaded file is an Excel workbook"""
    ext = os.path.splitext(filename or "")[1].lower()
    if ext not in ALLOWED_EXCEL_EXTENSIONS:
        raise ValueError("Only Excel files (.xlsx) are allowed")
    return filename


def validate_upload_size(content: bytes, max_size_mb: int) -> bytes:
    """Validate uploaded payload is non-empty and below the size limit"""
    if not content:
        raise ValueError("Uploaded file is empty")
    if len(content) > max_size_mb * 1024 * 1024:
        raise ValueError(f"File too large. Maximum size: {max_size_mb}MB")
    return content


def validate_iso_date(value: str) -> date:
    """Validate a YYYY-MM-DD query parameter"""
    try:
        return date.fromisoformat((value or "").strip())
    except ValueError:
        raise ValueError("Invalid date format. Use YYYY-MM-DD")
