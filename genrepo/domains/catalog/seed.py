"""Seed data for the catalog tables."""

import logging
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from genrepo.domains.catalog.models import Product, ProductBrand, ProductType

logger = logging.getLogger(__name__)

BRANDS = ["Angular", "NetCore", "React", "Typescript"]

TYPES = ["Boards", "Hats", "Gloves"]

# (name, price, brand index, type index)
PRODUCTS: list[tuple[str, str, int, int]] = [
    ("Angular Speedster Board 2000", "200.00", 0, 0),
    ("Green Angular Board 3000", "150.00", 0, 0),
    ("Core Board Speed Rush 3", "180.00", 1, 0),
    ("Net Core Super Board", "300.00", 1, 0),
    ("React Board Super Whizzy Fast", "250.00", 2, 0),
    ("Typescript Entry Board", "120.00", 3, 0),
    ("Core Blue Hat", "10.00", 1, 1),
    ("Green React Woolen Hat", "8.00", 2, 1),
    ("Angular Purple Hat", "15.00", 0, 1),
    ("Core Red Gloves", "18.00", 1, 2),
    ("React Cool Gloves", "22.00", 2, 2),
]


async def seed_catalog(session: AsyncSession) -> bool:
    """Insert brands, types and products when the catalog is empty.

    Rows are added in list order, so ids follow the order above on a
    fresh database. The caller owns the transaction.

    Returns:
        True if data was inserted, False if the catalog already had brands
    """
    existing = await session.execute(select(func.count()).select_from(ProductBrand))
    if existing.scalar():
        logger.info("Catalog already seeded, skipping")
        return False

    brands = [ProductBrand(name=name) for name in BRANDS]
    types = [ProductType(name=name) for name in TYPES]
    session.add_all(brands)
    session.add_all(types)
    await session.flush()

    session.add_all(
        Product(
            name=name,
            description=f"{name} from the {BRANDS[brand]} range.",
            price=Decimal(price),
            picture_url=f"images/products/{name.lower().replace(' ', '-')}.png",
            product_brand_id=brands[brand].id,
            product_type_id=types[kind].id,
        )
        for name, price, brand, kind in PRODUCTS
    )
    await session.flush()
    logger.info(
        "Seeded catalog with %d brands, %d types, %d products",
        len(BRANDS),
        len(TYPES),
        len(PRODUCTS),
    )
    return True
