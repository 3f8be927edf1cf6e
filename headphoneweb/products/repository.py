from typing import List, Optional
from fastapi import HTTPException, status
from sqlalchemy import select
from headphoneweb.common.utils import rows_to_dicts
from headphoneweb.db.schema import Headphones
from headphoneweb.products.constants import logger

PRODUCT_COLUMNS = (
    Headphones.product_id,
    Headphones.name,
    Headphones.description,
    Headphones.price,
    Headphones.stock_quantity,
    Headphones.image_url,
)


async def fetch_in_stock_products(session) -> List[dict]:
    stmt = (
        select(*PRODUCT_COLUMNS)
        .where(Headphones.stock_quantity > 0)
        .order_by(Headphones.product_id)
    )
    res = await session.execute(stmt)
    return rows_to_dicts(res.all())


async def fetch_product(session, product_id: int) -> dict:
    stmt = select(*PRODUCT_COLUMNS).where(Headphones.product_id == product_id)
    res = await session.execute(stmt)
    row = res.one_or_none()
    if not row:
        logger.warning("product.not_found", extra={"product_id": product_id})
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    return dict(row._mapping)


async def fetch_stock(session, product_id: int) -> Optional[dict]:
    stmt = select(Headphones.name, Headphones.stock_quantity).where(Headphones.product_id == product_id)
    res = await session.execute(stmt)
    row = res.one_or_none()
    if not row:
        return None
    return {"name": row.name, "stock_quantity": int(row.stock_quantity)}
