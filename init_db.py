"""Initialize database tables"""
import asyncio
from mealboard.database import create_tables


async def init():
    await create_tables()
    print("Database tables created successfully.")


if __name__ == "__main__":
    asyncio.run(init())
