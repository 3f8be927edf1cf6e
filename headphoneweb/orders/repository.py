from decimal import Decimal
from typing import Any, Dict, List, Optional
from sqlalchemy import insert, select, update
from headphoneweb.common.utils import now, rows_to_dicts
from headphoneweb.db.schema import Headphones, OrderItem, Orders, OrderStatus, Payment, PaymentStatus


async def reserve_stock(session, product_id: int, quantity: int) -> Optional[Dict[str, Any]]:
    """Conditional decrement; None when the product is missing or has fewer than `quantity` units."""
    stmt = (
        update(Headphones)
        .where(Headphones.product_id == product_id, Headphones.stock_quantity >= quantity)
        .values(stock_quantity=Headphones.stock_quantity - quantity)
        .returning(Headphones.product_id, Headphones.name, Headphones.price, Headphones.stock_quantity)
        .execution_options(synchronize_session=False)
    )
    res = await session.execute(stmt)
    row = res.one_or_none()
    return dict(row._mapping) if row else None


async def release_stock(session, items: List[Dict[str, Any]]) -> None:
    for item in items:
        stmt = (
            update(Headphones)
            .where(Headphones.product_id == item["product_id"])
            .values(stock_quantity=Headphones.stock_quantity + item["quantity"])
            .execution_options(synchronize_session=False)
        )
        await session.execute(stmt)


async def insert_order(session, payment_intent_id: str, total_price: Decimal, email: Optional[str]) -> int:
    ts = now()
    stmt = (
        insert(Orders)
        .values(payment_intent_id=payment_intent_id, total_price=total_price, email=email,
                status=OrderStatus.PENDING.value, created_at=ts, updated_at=ts)
        .returning(Orders.order_id)
    )
    res = await session.execute(stmt)
    return int(res.scalar_one())


async def insert_payment(session, order_id: int, payment_intent_id: str) -> None:
    stmt = insert(Payment).values(order_id=order_id, stripe_payment_id=payment_intent_id,
                                  payment_status=PaymentStatus.PENDING.value)
    await session.execute(stmt)


async def insert_order_items(session, order_id: int, lines: List[Dict[str, Any]]) -> None:
    rows = [
        {"order_id": order_id, "product_id": ln["product_id"], "quantity": ln["quantity"],
         "price_at_time": ln["price"]}
        for ln in lines
    ]
    await session.execute(insert(OrderItem), rows)


async def get_order_by_intent(session, payment_intent_id: str, lock: bool = False) -> Optional[Dict[str, Any]]:
    stmt = (
        select(
            Orders.order_id,
            Orders.payment_intent_id,
            Orders.email,
            Orders.total_price,
            Orders.status,
            Orders.created_at,
            Orders.updated_at,
            Payment.payment_status,
            Payment.payment_date,
        )
        .outerjoin(Payment, Payment.order_id == Orders.order_id)
        .where(Orders.payment_intent_id == payment_intent_id)
    )
    if lock:
        stmt = stmt.with_for_update(of=Orders)
    res = await session.execute(stmt)
    row = res.one_or_none()
    return dict(row._mapping) if row else None


async def fetch_order_items(session, order_id: int) -> List[Dict[str, Any]]:
    stmt = (
        select(
            OrderItem.order_item_id,
            OrderItem.product_id,
            OrderItem.quantity,
            OrderItem.price_at_time,
            Headphones.name,
            Headphones.image_url,
        )
        .join(Headphones, Headphones.product_id == OrderItem.product_id)
        .where(OrderItem.order_id == order_id)
        .order_by(OrderItem.order_item_id)
    )
    res = await session.execute(stmt)
    return rows_to_dicts(res.all())


async def set_order_and_payment_status(session, order_id: int, order_status: str, payment_status: str,
                                       amount_received: Optional[Decimal] = None) -> None:
    """Orders.status and Payment.payment_status only ever change together, inside the caller's transaction."""
    ts = now()
    await session.execute(
        update(Orders)
        .where(Orders.order_id == order_id)
        .values(status=order_status, updated_at=ts)
        .execution_options(synchronize_session=False)
    )
    payment_values: Dict[str, Any] = {"payment_status": payment_status}
    if payment_status == PaymentStatus.SUCCEEDED.value:
        payment_values["payment_date"] = ts
        if amount_received is not None:
            payment_values["amount_received"] = amount_received
    await session.execute(
        update(Payment)
        .where(Payment.order_id == order_id)
        .values(**payment_values)
        .execution_options(synchronize_session=False)
    )
