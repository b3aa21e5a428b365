"""
Main FastAPI application
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mealboard.config import get_settings
from mealboard.database import AsyncSessionLocal, create_tables
from mealboard.models.restaurant import DEFAULT_RESTAURANTS
from mealboard.api import images, menus, restaurants
from mealboard.api.errors import menu_error_handler
from mealboard.services.menu_errors import MenuIngestionError
from mealboard.services.menu_repository import MenuRepository
from mealboard.utils.logger import get_logger

settings = get_settings()
get_logger("mealboard")
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Create all tables
    await create_tables()
    logger.info("Database tables created")

    # Seed reference restaurants
    async with AsyncSessionLocal() as session:
        added = await MenuRepository(session).seed_restaurants(DEFAULT_RESTAURANTS)
        if added:
            logger.info(f"Created {added} default restaurants")

    yield


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    debug=settings.DEBUG,
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(MenuIngestionError, menu_error_handler)

# Include routers
app.include_router(menus.router, prefix="/api/menus", tags=["Menus"])
app.include_router(restaurants.router, prefix="/api/restaurants", tags=["Restaurants"])
app.include_router(images.router, prefix="/api/images", tags=["Images"])


@app.get("/")
async def root():
    return {
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running"
    }


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "mealboard.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )
