"""
Database setup script
"""
import asyncio
from mealboard.database import AsyncSessionLocal, create_tables
from mealboard.models.restaurant import DEFAULT_RESTAURANTS
from mealboard.services.menu_repository import MenuRepository


async def setup_database():
    """Create tables and seed the reference restaurants"""
    print("Creating database tables...")
    await create_tables()
    print("Tables created")

    async with AsyncSessionLocal() as session:
        added = await MenuRepository(session).seed_restaurants(DEFAULT_RESTAURANTS)
        print(f"Seeded {added} restaurants")

    print("\nDatabase setup complete!")
    print("\nRestaurants:")
    for row in DEFAULT_RESTAURANTS:
        print(f"  {row['code']}: {row['name']} ({row['name_en']})")


if __name__ == "__main__":
    asyncio.run(setup_database())
