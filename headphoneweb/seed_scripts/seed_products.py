import asyncio
from decimal import Decimal
from typing import List
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from headphoneweb.config.settings import config_settings
from headphoneweb.db.connection import Database
from headphoneweb.db.schema import Headphones


CATALOGUE: List[dict] = [
    {
        "name": "Studio Reference One",
        "description": "Open-back reference headphones with hand-wound 50mm drivers.",
        "price": Decimal("299.99"),
        "stock_quantity": 25,
        "image_url": "/images/studio-reference-one.webp",
    },
    {
        "name": "Closed Back Monitor",
        "description": "Sealed monitoring headphones for tracking and travel.",
        "price": Decimal("199.00"),
        "stock_quantity": 40,
        "image_url": "/images/closed-back-monitor.webp",
    },
    {
        "name": "Wooden Cup Edition",
        "description": "Limited run with walnut cups and a braided cable.",
        "price": Decimal("449.50"),
        "stock_quantity": 5,
        "image_url": "/images/wooden-cup-edition.webp",
    },
]


async def seed_products(products: List[dict] = CATALOGUE):
    """Insert the catalogue; existing names get price/description/image refreshed, stock is left alone."""
    db = Database(config_settings)
    try:
        await db.create_all()
        async with db.session_maker() as session:
            insert = sqlite_insert if db.engine.dialect.name == "sqlite" else pg_insert
            stmt = insert(Headphones).values(products)
            stmt = stmt.on_conflict_do_update(
                index_elements=[Headphones.name],
                set_={
                    "description": stmt.excluded.description,
                    "price": stmt.excluded.price,
                    "image_url": stmt.excluded.image_url,
                },
            )
            await session.execute(stmt)
            await session.commit()
        print(f"Seeded {len(products)} products")
    finally:
        await db.dispose()


if __name__ == "__main__":
    asyncio.run(seed_products())
