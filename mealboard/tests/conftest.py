"""
Test fixtures - in-memory SQLite database, bearer-authenticated HTTP client
and in-memory menu workbooks
"""
import io

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from openpyxl import Workbook
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from mealboard.config import get_settings
from mealboard.database import Base, get_db
from mealboard.main import app
from mealboard.models import Restaurant
from mealboard.models.meal import MealType
from mealboard.services.menu_reader import ExcelMenuReader

WEEKDAY_HEADERS = {
    "D": "Mon 5/26",
    "E": "Tue 5/27",
    "F": "Wed 5/28",
    "G": "Thu 5/29",
    "H": "Fri 5/30",
}
WEEKEND_HEADERS = {
    "I": "Sat 5/31",
    "J": "Sun 6/1",
}

SAMPLE_TEXT_MENU = """식당: RESTAURANT_1
주 시작일: 2025-05-26

월요일 (5/26)
아침:
밥: 쌀밥
국: 된장국
반찬: 김치
메인메뉴: 계란후라이
점심1:
메인메뉴: 돈까스
점심2:
밥: 잡곡밥
국: 미역국
메인메뉴: 제육볶음
저녁:
밥: 쌀밥
메인메뉴: 닭갈비
: 요구르트

화요일 (5/27)
아침:
밥: 쌀밥
국: 콩나물국
점심1:
메인메뉴: 비빔밥
"""


@pytest_asyncio.fixture()
async def db_session():
    """Create a fresh in-memory SQLite database for each test"""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture()
async def seed_data(db_session):
    """Insert the two reference restaurants"""
    r1 = Restaurant(code="RESTAURANT_1", name="제1학생식당", name_en="Student Cafeteria 1")
    r2 = Restaurant(code="RESTAURANT_2", name="제2학생식당", name_en="Student Cafeteria 2")

    db_session.add_all([r1, r2])
    await db_session.commit()
    await db_session.refresh(r1)
    await db_session.refresh(r2)

    return {"r1": r1, "r2": r2}


@pytest_asyncio.fixture()
async def client(db_session, seed_data):
    """Bearer-authenticated httpx AsyncClient bound to the FastAPI app"""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test", follow_redirects=True) as ac:
        ac.headers["Authorization"] = f"Bearer {get_settings().BEARER_TOKEN}"
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def unauth_client(db_session):
    """Unauthenticated httpx AsyncClient"""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test", follow_redirects=True) as ac:
        yield ac

    app.dependency_overrides.clear()


def build_menu_workbook(restaurant_name="제1학생식당", headers=None, slots=None, sheet_title="12") -> bytes:
    """Lay out a menu workbook the way the cafeteria sheet does.

    slots maps (column, meal type) to the cell values written from the
    slot's first row downwards; None leaves a blank cell.
    """
    wb = Workbook()
    ws = wb.active
    ws.title = sheet_title

    if restaurant_name is not None:
        ws["D2"] = restaurant_name
    for col, label in (WEEKDAY_HEADERS if headers is None else headers).items():
        ws[f"{col}{ExcelMenuReader.DATE_HEADER_ROW}"] = label
    for (col, meal_type), values in (slots or {}).items():
        start_row, _ = ExcelMenuReader.SLOT_ROWS[MealType(meal_type)]
        for offset, value in enumerate(values):
            if value is not None:
                ws[f"{col}{start_row + offset}"] = value

    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


@pytest.fixture()
def make_workbook():
    return build_menu_workbook


@pytest.fixture()
def text_menu():
    return SAMPLE_TEXT_MENU
