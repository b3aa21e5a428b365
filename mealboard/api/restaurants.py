"""
Restaurant meal lookup endpoints
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from mealboard.database import get_db
from mealboard.services.meal_query_service import get_restaurant_week_meals
from mealboard.services.menu_errors import DateFormatInvalid, FieldMissing
from mealboard.utils.validators import validate_iso_date

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/{name}")
async def get_restaurant_meals(
    name: str,
    date: Optional[str] = Query(None, description="Any date within the week, YYYY-MM-DD"),
    db: AsyncSession = Depends(get_db),
):
    """Return the restaurant's meals for the week containing `date`."""
    if not date:
        raise FieldMissing("date parameter is required (YYYY-MM-DD)")

    try:
        on_date = validate_iso_date(date)
    except ValueError as e:
        raise DateFormatInvalid(str(e))

    data = await get_restaurant_week_meals(db, name, on_date)
    return {"success": True, "data": data}
