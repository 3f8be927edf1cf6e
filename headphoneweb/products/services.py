from typing import List
from fastapi import HTTPException, status
from headphoneweb.common.custom_exceptions import InsufficientStockError
from headphoneweb.products.constants import logger
from headphoneweb.products.repository import fetch_stock


def validate_stock_request(product_id, quantity):
    if not product_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Product ID is required")
    if not quantity or quantity < 1:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid quantity")


async def check_product_stock(session, product_id: int, quantity: int) -> int:
    """Advisory check only, nothing is reserved. Returns the available quantity."""
    validate_stock_request(product_id, quantity)

    product = await fetch_stock(session, product_id)
    if product is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")

    if product["stock_quantity"] < quantity:
        logger.info("stock.check.insufficient", extra={
            "product_id": product_id, "available": product["stock_quantity"], "requested": quantity})
        raise InsufficientStockError(available=product["stock_quantity"], requested=quantity, name=product["name"])

    return product["stock_quantity"]


async def check_items_stock(session, items) -> List[dict]:
    checks = []
    for item in items:
        validate_stock_request(item.id, item.quantity)
        product = await fetch_stock(session, item.id)
        if product is None:
            checks.append({"id": item.id, "available": False, "message": "Product not found"})
            continue
        checks.append({
            "id": item.id,
            "available": product["stock_quantity"] >= item.quantity,
            "requested": item.quantity,
            "inStock": product["stock_quantity"],
        })
    return checks
