from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from headphoneweb.cart.constants import logger
from headphoneweb.cart.dependencies import require_cart_item_id, require_product_id, require_quantity, require_session_id
from headphoneweb.cart.models import CartAddIn, CartClearIn, CartUpdateIn
from headphoneweb.cart.repository import (add_item_to_cart, cart_snapshot, clear_items, get_or_create_cart_session,
                                          get_product_stock, remove_item, update_item_quantity)
from headphoneweb.common.custom_exceptions import AppError
from headphoneweb.common.utils import success_response
from headphoneweb.db.dependencies import get_session
from headphoneweb.products.models import StockCheckBatchIn
from headphoneweb.products.services import check_items_stock

carts_router = APIRouter()

# Every mutation runs in the request's transaction: the ownership-scoped write,
# then a re-read of the cart, then commit. Any exception rolls back in get_session.


@carts_router.get("")
async def get_cart(session_id: Optional[str] = Query(None, alias="sessionId"),
                   session: AsyncSession = Depends(get_session)):
    user_identifier = require_session_id(session_id)
    items = await cart_snapshot(session, user_identifier)
    return success_response({"items": items})


@carts_router.post("")
async def add_to_cart(payload: CartAddIn, session: AsyncSession = Depends(get_session)):
    user_identifier = require_session_id(payload.session_id)
    product_id = require_product_id(payload.product_id)
    quantity = require_quantity(payload.quantity)

    product = await get_product_stock(session, product_id)
    cart_session_id = await get_or_create_cart_session(session, user_identifier)
    cart_item_id = await add_item_to_cart(session, cart_session_id, product, quantity)

    items = await cart_snapshot(session, user_identifier)
    await session.commit()

    logger.info("cart.add.success", extra={"cart_item_id": cart_item_id, "product_id": product_id})
    return success_response({"items": items})


@carts_router.put("/update")
async def update_cart_item(payload: CartUpdateIn, session: AsyncSession = Depends(get_session)):
    user_identifier = require_session_id(payload.session_id)
    cart_item_id = require_cart_item_id(payload.cart_item_id)
    quantity = require_quantity(payload.quantity)

    await update_item_quantity(session, user_identifier, cart_item_id, quantity)

    items = await cart_snapshot(session, user_identifier)
    await session.commit()

    logger.info("cart.update.success", extra={"cart_item_id": cart_item_id, "quantity": quantity})
    return success_response({"items": items})


@carts_router.delete("/remove")
async def remove_cart_item(session_id: Optional[str] = Query(None, alias="sessionId"),
                           cart_item_id: Optional[int] = Query(None, alias="cartItemId"),
                           session: AsyncSession = Depends(get_session)):
    user_identifier = require_session_id(session_id)
    cart_item_id = require_cart_item_id(cart_item_id)

    await remove_item(session, user_identifier, cart_item_id)

    items = await cart_snapshot(session, user_identifier)
    await session.commit()

    logger.info("cart.remove.success", extra={"cart_item_id": cart_item_id})
    return success_response({"items": items})


@carts_router.delete("/clear")
async def clear_cart(payload: Optional[CartClearIn] = None, session: AsyncSession = Depends(get_session)):
    user_identifier = require_session_id(payload.session_id if payload else None)

    removed = await clear_items(session, user_identifier)
    await session.commit()

    logger.info("cart.clear.success", extra={"removed": removed})
    return success_response({"removed": removed})


@carts_router.post("/check-stock")
async def check_cart_stock(payload: StockCheckBatchIn, session: AsyncSession = Depends(get_session)):
    checks = await check_items_stock(session, payload.items)

    unavailable = [c for c in checks if not c["available"]]
    if unavailable:
        raise AppError(status.HTTP_400_BAD_REQUEST, "Some items are out of stock",
                       extra={"unavailableItems": unavailable})

    return success_response({"stockChecks": checks})
