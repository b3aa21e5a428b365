"""
Menu upload endpoints (Excel workbook and plain text, native and English passes)
"""
import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Query, Request, UploadFile
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from mealboard.api.auth import verify_token
from mealboard.api.errors import error_response
from mealboard.config import get_settings
from mealboard.database import get_db
from mealboard.services.menu_errors import MenuIngestionError, UploadInvalid
from mealboard.services.menu_ingestion_service import MenuIngestionService
from mealboard.services.menu_reader import ExcelMenuReader, TextMenuReader
from mealboard.utils.validators import (
    parse_restaurant_type,
    validate_excel_filename,
    validate_upload_size,
)

router = APIRouter()
logger = logging.getLogger(__name__)
settings = get_settings()


class MenuProcessResponse(BaseModel):
    success: bool
    restaurant_id: Optional[int] = None
    restaurant_type: Optional[str] = None
    week_id: Optional[int] = None
    week_start_date: Optional[date] = None
    total_days: int = 0
    total_meals: int = 0
    total_menu_items: int = 0
    message: str
    warnings: List[str] = []
    failures: List[str] = []


async def _read_excel_upload(excel: UploadFile) -> bytes:
    try:
        validate_excel_filename(excel.filename)
        return validate_upload_size(await excel.read(), settings.MAX_UPLOAD_SIZE_MB)
    except ValueError as e:
        raise UploadInvalid(str(e))


async def _read_text_body(request: Request) -> bytes:
    try:
        return validate_upload_size(await request.body(), settings.MAX_UPLOAD_SIZE_MB)
    except ValueError as e:
        raise UploadInvalid(str(e))


def _internal_error(action: str, e: Exception):
    logger.error(f"Failed to {action}: {e}", exc_info=True)
    return error_response(500, f"Failed to {action}: {e}", "INTERNAL_ERROR")


@router.post("/upload/excel", response_model=MenuProcessResponse)
async def upload_excel_menu(
    excel: UploadFile = File(...),
    db: AsyncSession = Depends(get_db),
    token: str = Depends(verify_token),
):
    """Ingest a weekly menu workbook (Korean names)."""
    content = await _read_excel_upload(excel)
    logger.info(f"Excel upload received: {excel.filename} ({len(content)} bytes)")

    try:
        with ExcelMenuReader.open(content) as reader:
            run = await MenuIngestionService(db).ingest(reader)
    except MenuIngestionError:
        raise
    except Exception as e:
        return _internal_error("process Excel file", e)

    return run.to_result("Excel file processed successfully")


@router.post("/upload/excel/english", response_model=MenuProcessResponse)
async def upload_excel_menu_english(
    week_id: int = Query(...),
    excel: UploadFile = File(...),
    db: AsyncSession = Depends(get_db),
    token: str = Depends(verify_token),
):
    """Patch English names onto an ingested week from the translated workbook."""
    content = await _read_excel_upload(excel)
    logger.info(f"English Excel upload received for week {week_id}: {excel.filename}")

    try:
        with ExcelMenuReader.open(content) as reader:
            run = await MenuIngestionService(db).apply_translations(reader, week_id)
    except MenuIngestionError:
        raise
    except Exception as e:
        return _internal_error("process English Excel file", e)

    return run.to_result("English menu names updated successfully")


async def _ingest_text(db: AsyncSession, body: bytes, restaurant_type=None):
    try:
        with TextMenuReader.open(body) as reader:
            run = await MenuIngestionService(db).ingest(reader, restaurant_type=restaurant_type)
    except MenuIngestionError:
        raise
    except Exception as e:
        return _internal_error("process text data", e)

    return run.to_result("Text data processed successfully")


@router.post("/upload/text", response_model=MenuProcessResponse)
async def upload_text_menu(
    request: Request,
    db: AsyncSession = Depends(get_db),
    token: str = Depends(verify_token),
):
    """Ingest a plain-text weekly menu; the restaurant comes from the `식당:` line."""
    body = await _read_text_body(request)
    return await _ingest_text(db, body)


@router.post("/restaurants/{restaurant_type}/upload/text", response_model=MenuProcessResponse)
async def upload_restaurant_text_menu(
    restaurant_type: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    token: str = Depends(verify_token),
):
    """Ingest a plain-text weekly menu for the restaurant named in the path."""
    try:
        forced_type = parse_restaurant_type(restaurant_type)
    except ValueError as e:
        raise UploadInvalid(str(e))

    body = await _read_text_body(request)
    return await _ingest_text(db, body, restaurant_type=forced_type)


@router.post("/upload/text/english", response_model=MenuProcessResponse)
async def upload_text_menu_english(
    request: Request,
    week_id: int = Query(...),
    db: AsyncSession = Depends(get_db),
    token: str = Depends(verify_token),
):
    """Patch English names onto an ingested week from a translated text menu."""
    body = await _read_text_body(request)

    try:
        with TextMenuReader.open(body) as reader:
            run = await MenuIngestionService(db).apply_translations(reader, week_id)
    except MenuIngestionError:
        raise
    except Exception as e:
        return _internal_error("process English text data", e)

    return run.to_result("English menu names updated successfully")


class BilingualProcessResponse(BaseModel):
    success: bool
    result_ko: MenuProcessResponse
    result_en: MenuProcessResponse


@router.post("/upload/excel/bilingual", response_model=BilingualProcessResponse)
async def upload_excel_menu_bilingual(
    excel: UploadFile = File(...),
    excel_en: UploadFile = File(...),
    db: AsyncSession = Depends(get_db),
    token: str = Depends(verify_token),
):
    """Ingest the Korean workbook, then patch English names from its translated twin."""
    content = await _read_excel_upload(excel)
    content_en = await _read_excel_upload(excel_en)
    logger.info(f"Bilingual Excel upload received: {excel.filename} / {excel_en.filename}")

    service = MenuIngestionService(db)
    try:
        with ExcelMenuReader.open(content) as reader:
            run_ko = await service.ingest(reader)
        with ExcelMenuReader.open(content_en) as reader:
            run_en = await service.apply_translations(reader, run_ko.week_id)
    except MenuIngestionError:
        raise
    except Exception as e:
        return _internal_error("process bilingual Excel files", e)

    return {
        "success": True,
        "result_ko": run_ko.to_result("Excel file processed successfully"),
        "result_en": run_en.to_result("English menu names updated successfully"),
    }
