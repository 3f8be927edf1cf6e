from typing import List, Optional
from fastapi import HTTPException, status
from sqlalchemy import delete, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from headphoneweb.cart.constants import ITEM_NOT_OWNED, logger
from headphoneweb.common.custom_exceptions import InsufficientStockError
from headphoneweb.common.utils import now, rows_to_dicts
from headphoneweb.db.schema import CartItem, CartSession, Headphones


def _upsert_insert(session):
    # ON CONFLICT is dialect specific; production runs postgres, tests sqlite
    if session.get_bind().dialect.name == "sqlite":
        return sqlite_insert
    return pg_insert


def owned_by(user_identifier: str):
    """The only ownership check for cart rows: item -> cart_session on the caller's identifier."""
    return CartItem.session_id.in_(
        select(CartSession.session_id).where(CartSession.user_identifier == user_identifier)
    )


async def cart_snapshot(session, user_identifier: str) -> List[dict]:
    stmt = (
        select(
            CartItem.cart_item_id,
            CartItem.product_id,
            Headphones.name,
            Headphones.price,
            CartItem.quantity,
            Headphones.stock_quantity,
            Headphones.image_url,
        )
        .join(CartSession, CartSession.session_id == CartItem.session_id)
        .join(Headphones, Headphones.product_id == CartItem.product_id)
        .where(CartSession.user_identifier == user_identifier)
        .order_by(CartItem.cart_item_id)
    )
    res = await session.execute(stmt)
    return rows_to_dicts(res.all())


async def get_or_create_cart_session(session, user_identifier: str) -> int:
    insert = _upsert_insert(session)
    ts = now()
    stmt = (
        insert(CartSession)
        .values(user_identifier=user_identifier, created_at=ts, last_modified=ts)
        .on_conflict_do_update(index_elements=[CartSession.user_identifier], set_={"last_modified": ts})
        .returning(CartSession.session_id)
    )
    res = await session.execute(stmt)
    return int(res.scalar_one())


async def get_product_stock(session, product_id: int) -> dict:
    stmt = select(Headphones.product_id, Headphones.name, Headphones.stock_quantity).where(
        Headphones.product_id == product_id)
    res = await session.execute(stmt)
    row = res.one_or_none()
    if not row:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    return {"product_id": int(row.product_id), "name": row.name, "stock_quantity": int(row.stock_quantity)}


async def add_item_to_cart(session, cart_session_id: int, product: dict, quantity: int) -> int:
    stmt = (
        select(CartItem.cart_item_id, CartItem.quantity)
        .where(CartItem.session_id == cart_session_id, CartItem.product_id == product["product_id"])
        .with_for_update()
    )
    res = await session.execute(stmt)
    row = res.one_or_none()
    existing_qty = int(row.quantity) if row else 0

    new_qty = existing_qty + quantity
    if new_qty > product["stock_quantity"]:
        raise InsufficientStockError(available=product["stock_quantity"], requested=new_qty,
                                     name=product["name"], product_id=product["product_id"])

    insert = _upsert_insert(session)
    ins = insert(CartItem).values(session_id=cart_session_id, product_id=product["product_id"], quantity=quantity)
    ins = ins.on_conflict_do_update(
        index_elements=[CartItem.session_id, CartItem.product_id],
        set_={"quantity": CartItem.quantity + ins.excluded.quantity},
    ).returning(CartItem.cart_item_id)
    res = await session.execute(ins)
    return int(res.scalar_one())


async def find_owned_item(session, user_identifier: str, cart_item_id: int) -> Optional[dict]:
    stmt = (
        select(CartItem.cart_item_id, CartItem.quantity, Headphones.name, Headphones.stock_quantity)
        .join(Headphones, Headphones.product_id == CartItem.product_id)
        .where(CartItem.cart_item_id == cart_item_id, owned_by(user_identifier))
        .with_for_update(of=CartItem)
    )
    res = await session.execute(stmt)
    row = res.one_or_none()
    return dict(row._mapping) if row else None


async def update_item_quantity(session, user_identifier: str, cart_item_id: int, quantity: int) -> None:
    item = await find_owned_item(session, user_identifier, cart_item_id)
    if item is None:
        logger.warning("cart.update.not_found", extra={"cart_item_id": cart_item_id})
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=ITEM_NOT_OWNED)

    if quantity > item["stock_quantity"]:
        raise InsufficientStockError(available=int(item["stock_quantity"]), requested=quantity, name=item["name"])

    stmt = (
        update(CartItem)
        .where(CartItem.cart_item_id == cart_item_id, owned_by(user_identifier))
        .values(quantity=quantity)
        .execution_options(synchronize_session=False)
    )
    res = await session.execute(stmt)
    if res.rowcount == 0:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=ITEM_NOT_OWNED)


async def remove_item(session, user_identifier: str, cart_item_id: int) -> None:
    stmt = (
        delete(CartItem)
        .where(CartItem.cart_item_id == cart_item_id, owned_by(user_identifier))
        .execution_options(synchronize_session=False)
    )
    res = await session.execute(stmt)
    if res.rowcount == 0:
        logger.warning("cart.remove.not_found", extra={"cart_item_id": cart_item_id})
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=ITEM_NOT_OWNED)


async def clear_items(session, user_identifier: str) -> int:
    stmt = delete(CartItem).where(owned_by(user_identifier)).execution_options(synchronize_session=False)
    res = await session.execute(stmt)
    return int(res.rowcount or 0)
