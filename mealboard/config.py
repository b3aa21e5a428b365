"""
Configuration management for Mealboard
"""
from typing import Optional

from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "Mealboard"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Database
    DATABASE_URL: str = "sqlite:///./mealboard.db"

    # Security (static bearer token guarding upload endpoints)
    BEARER_TOKEN: str = "dev-bearer-token-change-in-production"

    # Menu layout
    MENU_YEAR: Optional[int] = None         # year for "Mon 5/26" labels; current year if unset
    MENU_SHEET_NAME: Optional[str] = None   # e.g. "12"; first non-empty sheet if unset

    # Uploads
    MAX_UPLOAD_SIZE_MB: int = 10

    # CORS
    CORS_ORIGINS: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    return Settings()
