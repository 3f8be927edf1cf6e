import json
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Optional
from fastapi import HTTPException, status
from headphoneweb.common.custom_exceptions import InsufficientStockError, PaymentProviderError
from headphoneweb.db.schema import OrderStatus, PaymentStatus
from headphoneweb.orders.constants import INTENT_CANCELED, INTENT_SUCCEEDED, METADATA_VALUE_LIMIT, logger
from headphoneweb.orders.models import CheckoutItemIn
from headphoneweb.orders.repository import (fetch_order_items, get_order_by_intent, insert_order,
                                            insert_order_items, insert_payment, release_stock,
                                            reserve_stock, set_order_and_payment_status)
from headphoneweb.products.repository import fetch_stock

CENTS = Decimal("0.01")


def compute_total_cents(lines: List[Dict[str, Any]]) -> int:
    total = sum((Decimal(ln["price"]) * ln["quantity"] for ln in lines), Decimal("0"))
    return int((total * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def build_manifest(lines: List[Dict[str, Any]]) -> str:
    """Compact JSON for the intent's `order_items` metadata; names are dropped when it would not fit."""
    full = [{"id": ln["product_id"], "quantity": ln["quantity"], "name": ln["name"]} for ln in lines]
    text = json.dumps(full, separators=(",", ":"))
    if len(text) <= METADATA_VALUE_LIMIT:
        return text
    text = json.dumps([{"id": m["id"], "quantity": m["quantity"]} for m in full], separators=(",", ":"))
    return text[:METADATA_VALUE_LIMIT]


def merge_checkout_items(items: List[CheckoutItemIn]) -> List[Dict[str, int]]:
    merged: Dict[int, int] = {}
    for item in items:
        if item.product_id is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Product ID is required")
        if item.quantity is None or item.quantity < 1:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid quantity")
        merged[item.product_id] = merged.get(item.product_id, 0) + item.quantity
    return [{"product_id": pid, "quantity": qty} for pid, qty in merged.items()]


async def _reserve_lines(session, wanted: List[Dict[str, int]]) -> List[Dict[str, Any]]:
    lines = []
    for want in wanted:
        row = await reserve_stock(session, want["product_id"], want["quantity"])
        if row is None:
            current = await fetch_stock(session, want["product_id"])
            if current is None:
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
            raise InsufficientStockError(available=int(current["stock_quantity"]), requested=want["quantity"],
                                         name=current["name"], product_id=want["product_id"])
        lines.append({
            "product_id": int(row["product_id"]),
            "name": row["name"],
            "price": Decimal(row["price"]).quantize(CENTS),
            "quantity": want["quantity"],
        })
    return lines


async def _release_pending_order(session, intent_id: str) -> Optional[Dict[str, Any]]:
    """Free the stock of an earlier checkout attempt whose order is still pending."""
    order = await get_order_by_intent(session, intent_id, lock=True)
    if order is None or order["status"] != OrderStatus.PENDING.value:
        return None
    items = await fetch_order_items(session, order["order_id"])
    await release_stock(session, items)
    await set_order_and_payment_status(session, order["order_id"], OrderStatus.FAILED.value,
                                       PaymentStatus.FAILED.value)
    return order


async def create_checkout_order(session, gateway, items: Optional[List[CheckoutItemIn]],
                                email: Optional[str] = None,
                                previous_intent_id: Optional[str] = None) -> Dict[str, Any]:
    """Reserve stock, open a provider intent and record the pending order, all in the caller's transaction.

    Any failure before commit rolls the stock decrements back with everything else.
    When `previous_intent_id` names a still-pending order, that attempt is
    superseded: its stock goes back before the new reservation, its order and
    payment are marked failed, and its intent is canceled at the provider.
    """
    if not items:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No items in cart")

    wanted = merge_checkout_items(items)
    superseded = None
    if previous_intent_id:
        superseded = await _release_pending_order(session, previous_intent_id)
    lines = await _reserve_lines(session, wanted)

    amount = compute_total_cents(lines)
    metadata = {"order_items": build_manifest(lines)}

    try:
        intent = await gateway.create_payment_intent(amount, metadata, receipt_email=email)
        if superseded is not None:
            await gateway.cancel_payment_intent(previous_intent_id)
    except PaymentProviderError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message) from e

    total_price = (Decimal(amount) / 100).quantize(CENTS)
    order_id = await insert_order(session, intent["id"], total_price, email)
    await insert_payment(session, order_id, intent["id"])
    await insert_order_items(session, order_id, lines)
    await session.commit()

    if superseded is not None:
        logger.info("checkout.order.superseded", extra={"order_id": superseded["order_id"],
                                                        "payment_intent_id": previous_intent_id})
    logger.info("checkout.intent.created", extra={"order_id": order_id, "payment_intent_id": intent["id"],
                                                  "amount": amount})
    return {
        "clientSecret": intent["client_secret"],
        "paymentIntentId": intent["id"],
        "orderId": order_id,
        "amount": amount,
    }


async def reconcile_order(session, intent: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Bring the local order in line with the provider's view of the intent.

    Safe to call any number of times: a paid order is never re-marked and a
    canceled intent restores stock only while the order is still pending.
    Returns the (possibly updated) order row, or None when no order exists
    or the intent carries no id.
    """
    intent_id = intent.get("id")
    if not intent_id:
        return None
    order = await get_order_by_intent(session, intent_id, lock=True)
    if order is None:
        return None

    provider_status = intent.get("status")
    if provider_status == INTENT_SUCCEEDED and order["status"] != OrderStatus.PAID.value:
        received = intent.get("amount_received")
        amount_received = (Decimal(received) / 100).quantize(CENTS) if received is not None else None
        await set_order_and_payment_status(session, order["order_id"], OrderStatus.PAID.value,
                                           PaymentStatus.SUCCEEDED.value, amount_received)
        await session.commit()
        logger.info("order.reconciled.paid", extra={"order_id": order["order_id"]})
    elif provider_status == INTENT_CANCELED and order["status"] == OrderStatus.PENDING.value:
        items = await fetch_order_items(session, order["order_id"])
        await release_stock(session, items)
        await set_order_and_payment_status(session, order["order_id"], OrderStatus.FAILED.value,
                                           PaymentStatus.FAILED.value)
        await session.commit()
        logger.info("order.reconciled.failed", extra={"order_id": order["order_id"], "restocked": len(items)})
    else:
        return order

    return await get_order_by_intent(session, intent_id)


async def load_order_details(session, order: Dict[str, Any], provider_status: Optional[str]) -> Dict[str, Any]:
    items = await fetch_order_items(session, order["order_id"])
    return {**order, "items": items, "stripe_status": provider_status}
