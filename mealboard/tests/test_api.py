"""
API endpoint tests for all routes.
Uses in-memory SQLite + dependency-overridden FastAPI test client.
"""
import pytest

from mealboard.services import menu_reader

XLSX = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

NATIVE_SLOTS = {
    ("D", "Breakfast"): ["쌀밥", "된장국", "김치", "계란후라이"],
    ("F", "Lunch_1"): ["돈까스"],
}
ENGLISH_SLOTS = {
    ("D", "Breakfast"): ["Rice", "Soybean Paste Soup", "Kimchi", "Fried Egg"],
    ("F", "Lunch_1"): ["Pork Cutlet"],
}


@pytest.fixture(autouse=True)
def menu_year(monkeypatch):
    monkeypatch.setattr(menu_reader.settings, "MENU_YEAR", 2025)


def _excel_file(content, filename="menu.xlsx"):
    return {"excel": (filename, content, XLSX)}


def _text_body(text):
    return {"content": text.encode("utf-8"), "headers": {"Content-Type": "text/plain; charset=utf-8"}}


# ===================== HEALTH / ROOT =====================


async def test_root(client):
    r = await client.get("/")
    assert r.status_code == 200
    assert r.json()["status"] == "running"


async def test_health(client):
    r = await client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "healthy"


# ===================== AUTH =====================


async def test_upload_requires_token(unauth_client, make_workbook):
    r = await unauth_client.post("/api/menus/upload/excel", files=_excel_file(make_workbook()))
    assert r.status_code == 401


async def test_upload_rejects_wrong_token(unauth_client, text_menu):
    r = await unauth_client.post(
        "/api/menus/upload/text",
        content=text_menu.encode("utf-8"),
        headers={"Authorization": "Bearer wrong", "Content-Type": "text/plain"},
    )
    assert r.status_code == 401


# ===================== EXCEL UPLOADS =====================


async def test_upload_excel(client, make_workbook):
    r = await client.post("/api/menus/upload/excel", files=_excel_file(make_workbook(slots=NATIVE_SLOTS)))
    assert r.status_code == 200
    data = r.json()
    assert data["success"] is True
    assert data["restaurant_type"] == "RESTAURANT_1"
    assert data["week_start_date"] == "2025-05-26"
    assert data["total_days"] == 5
    assert data["total_meals"] == 20
    assert data["total_menu_items"] == 5


async def test_upload_excel_wrong_extension(client, make_workbook):
    r = await client.post("/api/menus/upload/excel", files=_excel_file(make_workbook(), "menu.csv"))
    assert r.status_code == 400
    assert r.json() == {"success": False, "error": "Only Excel files (.xlsx) are allowed", "code": "INVALID_UPLOAD"}


async def test_upload_excel_unreadable(client):
    r = await client.post("/api/menus/upload/excel", files=_excel_file(b"not a workbook"))
    assert r.status_code == 400
    assert r.json()["code"] == "SOURCE_UNREADABLE"


async def test_upload_excel_unknown_restaurant(client, make_workbook):
    r = await client.post("/api/menus/upload/excel", files=_excel_file(make_workbook(restaurant_name="중앙식당")))
    assert r.status_code == 404
    assert r.json()["code"] == "RESTAURANT_NOT_FOUND"


async def test_upload_excel_english(client, make_workbook):
    r = await client.post("/api/menus/upload/excel", files=_excel_file(make_workbook(slots=NATIVE_SLOTS)))
    week_id = r.json()["week_id"]

    r = await client.post(
        f"/api/menus/upload/excel/english?week_id={week_id}",
        files=_excel_file(make_workbook(slots=ENGLISH_SLOTS)),
    )
    assert r.status_code == 200
    assert r.json()["total_menu_items"] == 5
    assert r.json()["warnings"] == []

    r = await client.get("/api/restaurants/RESTAURANT_1", params={"date": "2025-05-26"})
    breakfast = r.json()["data"]["meals_by_day"][0]["meals"]["Breakfast"]
    assert [item["name_en"] for item in breakfast["menu_items"]] == ["Rice", "Soybean Paste Soup", "Kimchi", "Fried Egg"]


async def test_upload_excel_english_unknown_week(client, make_workbook):
    r = await client.post(
        "/api/menus/upload/excel/english?week_id=404",
        files=_excel_file(make_workbook(slots=ENGLISH_SLOTS)),
    )
    assert r.status_code == 404
    assert r.json()["code"] == "WEEK_DATA_NOT_FOUND"


async def test_upload_excel_bilingual(client, make_workbook):
    files = {
        "excel": ("menu_ko.xlsx", make_workbook(slots=NATIVE_SLOTS), XLSX),
        "excel_en": ("menu_en.xlsx", make_workbook(slots=ENGLISH_SLOTS), XLSX),
    }
    r = await client.post("/api/menus/upload/excel/bilingual", files=files)
    assert r.status_code == 200
    data = r.json()
    assert data["success"] is True
    assert data["result_ko"]["total_menu_items"] == 5
    assert data["result_en"]["week_id"] == data["result_ko"]["week_id"]
    assert data["result_en"]["total_menu_items"] == 5
    assert data["result_en"]["warnings"] == []

    r = await client.get("/api/restaurants/RESTAURANT_1", params={"date": "2025-05-28"})
    lunch = r.json()["data"]["meals_by_day"][2]["meals"]["Lunch_1"]
    assert lunch["menu_items"][0]["name_en"] == "Pork Cutlet"


async def test_upload_excel_bilingual_requires_both_files(client, make_workbook):
    r = await client.post("/api/menus/upload/excel/bilingual", files=_excel_file(make_workbook()))
    assert r.status_code == 422


async def test_upload_excel_bilingual_rejects_bad_english_file(client, make_workbook):
    files = {
        "excel": ("menu_ko.xlsx", make_workbook(slots=NATIVE_SLOTS), XLSX),
        "excel_en": ("menu_en.csv", b"a,b", "text/csv"),
    }
    r = await client.post("/api/menus/upload/excel/bilingual", files=files)
    assert r.status_code == 400
    assert r.json()["code"] == "INVALID_UPLOAD"


# ===================== TEXT UPLOADS =====================


async def test_upload_text(client, text_menu):
    r = await client.post("/api/menus/upload/text", **_text_body(text_menu))
    assert r.status_code == 200
    data = r.json()
    assert data["restaurant_type"] == "RESTAURANT_1"
    assert data["total_menu_items"] == 14
    assert data["message"] == "Text data processed successfully"


async def test_upload_text_empty(client):
    r = await client.post("/api/menus/upload/text", **_text_body(""))
    assert r.status_code == 400
    assert r.json()["code"] == "INVALID_UPLOAD"


async def test_upload_text_bad_anchor(client):
    r = await client.post("/api/menus/upload/text", **_text_body("식당: RESTAURANT_1\n주 시작일: 05/26/2025\n"))
    assert r.status_code == 400
    assert r.json()["code"] == "INVALID_DATE_FORMAT"


async def test_upload_text_for_restaurant(client, text_menu):
    body = text_menu.replace("식당: RESTAURANT_1\n", "")
    r = await client.post("/api/menus/restaurants/restaurant_2/upload/text", **_text_body(body))
    assert r.status_code == 200
    assert r.json()["restaurant_type"] == "RESTAURANT_2"
    assert r.json()["total_days"] == 2


async def test_upload_text_for_restaurant_mismatch(client, text_menu):
    r = await client.post("/api/menus/restaurants/RESTAURANT_2/upload/text", **_text_body(text_menu))
    assert r.status_code == 400
    assert r.json()["code"] == "RESTAURANT_MISMATCH"


async def test_upload_text_for_invalid_restaurant_type(client, text_menu):
    r = await client.post("/api/menus/restaurants/CAFE/upload/text", **_text_body(text_menu))
    assert r.status_code == 400


async def test_upload_text_english(client, text_menu):
    r = await client.post("/api/menus/upload/text", **_text_body(text_menu))
    week_id = r.json()["week_id"]

    english = "주 시작일: 2025-05-26\n월요일\n아침:\nRice: Rice\nSoup: Soybean Paste Soup\n"
    r = await client.post(f"/api/menus/upload/text/english?week_id={week_id}", **_text_body(english))
    assert r.status_code == 200
    data = r.json()
    assert data["total_menu_items"] == 2
    assert len(data["warnings"]) == 1


# ===================== RESTAURANT MEALS =====================


async def test_get_restaurant_meals(client, make_workbook):
    await client.post("/api/menus/upload/excel", files=_excel_file(make_workbook(slots=NATIVE_SLOTS)))

    r = await client.get("/api/restaurants/RESTAURANT_1", params={"date": "2025-05-29"})
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["restaurant"]["code"] == "RESTAURANT_1"
    assert data["week"]["start_date"] == "2025-05-26"
    assert data["week"]["end_date"] == "2025-06-01"
    assert [day["date"] for day in data["meals_by_day"]] == [
        "2025-05-26", "2025-05-27", "2025-05-28", "2025-05-29", "2025-05-30",
    ]
    assert list(data["meals_by_day"][0]["meals"]) == ["Breakfast", "Lunch_1", "Lunch_2", "Dinner"]
    assert data["meals_by_day"][2]["meals"]["Lunch_1"]["menu_items"][0]["name"] == "돈까스"
    assert data["summary"] == {"total_days": 5, "total_meals": 20, "total_menu_items": 5}


async def test_get_restaurant_meals_by_name(client, make_workbook):
    await client.post("/api/menus/upload/excel", files=_excel_file(make_workbook(slots=NATIVE_SLOTS)))

    r = await client.get("/api/restaurants/제1학생식당", params={"date": "2025-05-26"})
    assert r.status_code == 200
    assert r.json()["data"]["summary"]["total_menu_items"] == 5


async def test_get_restaurant_meals_no_week(client):
    r = await client.get("/api/restaurants/RESTAURANT_1", params={"date": "2025-05-26"})
    assert r.status_code == 404
    assert r.json()["code"] == "WEEK_DATA_NOT_FOUND"


async def test_get_restaurant_meals_unknown_restaurant(client):
    r = await client.get("/api/restaurants/CAFE", params={"date": "2025-05-26"})
    assert r.status_code == 404
    assert r.json()["code"] == "RESTAURANT_NOT_FOUND"


async def test_get_restaurant_meals_bad_date(client):
    r = await client.get("/api/restaurants/RESTAURANT_1", params={"date": "26/05/2025"})
    assert r.status_code == 400
    assert r.json()["code"] == "INVALID_DATE_FORMAT"

    r = await client.get("/api/restaurants/RESTAURANT_1")
    assert r.status_code == 400
    assert r.json()["code"] == "FIELD_MISSING"


# ===================== IMAGES =====================


async def test_current_image_defaults_to_empty(client):
    r = await client.get("/api/images/current", params={"restaurant": "RESTAURANT_1"})
    assert r.status_code == 200
    assert r.json() == {"success": True, "restaurant_code": "RESTAURANT_1", "image_name": "", "image_date": ""}


async def test_upload_image_name_is_kept_per_restaurant(client):
    r = await client.post("/api/images/upload", params={"restaurant": "2"}, json={"image_name": "week22.png"})
    assert r.status_code == 200
    assert r.json()["restaurant_code"] == "RESTAURANT_2"
    assert r.json()["image_name"] == "week22.png"
    assert r.json()["image_date"]

    r = await client.get("/api/images/current", params={"restaurant": "제2학생식당"})
    assert r.json()["image_name"] == "week22.png"

    r = await client.get("/api/images/current", params={"restaurant": "RESTAURANT_1"})
    assert r.json()["image_name"] == ""


async def test_upload_image_name_requires_token(unauth_client):
    r = await unauth_client.post("/api/images/upload", params={"restaurant": "1"}, json={"image_name": "a.png"})
    assert r.status_code == 401


async def test_upload_image_name_validation(client):
    r = await client.post("/api/images/upload", params={"restaurant": "1"}, json={"image_name": "  "})
    assert r.status_code == 400
    assert r.json()["code"] == "FIELD_MISSING"

    r = await client.post("/api/images/upload", params={"restaurant": "CAFE"}, json={"image_name": "a.png"})
    assert r.status_code == 404
    assert r.json()["code"] == "RESTAURANT_NOT_FOUND"
