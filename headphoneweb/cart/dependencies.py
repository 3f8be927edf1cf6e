from typing import Optional
from fastapi import HTTPException, status
from headphoneweb.cart.constants import logger


def _bad_request(detail: str, field: str):
    logger.warning("cart.validation.failed", extra={"field": field})
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


def require_session_id(session_id: Optional[str]) -> str:
    if not session_id or not session_id.strip():
        _bad_request("Session ID is required", "sessionId")
    return session_id


def require_cart_item_id(cart_item_id: Optional[int]) -> int:
    if cart_item_id is None:
        _bad_request("Cart item ID is required", "cartItemId")
    return cart_item_id


def require_product_id(product_id: Optional[int]) -> int:
    if product_id is None:
        _bad_request("Product ID is required", "productId")
    return product_id


def require_quantity(quantity: Optional[int]) -> int:
    if quantity is None:
        _bad_request("Quantity is required", "quantity")
    if quantity < 1:
        _bad_request("Quantity must be a positive integer", "quantity")
    return quantity
