from typing import List, Optional
from sqlalchemy import insert, select, update
from headphoneweb.common.utils import now, rows_to_dicts
from headphoneweb.db.schema import ContactMessage, MessageStatus

MESSAGE_COLUMNS = (
    ContactMessage.message_id,
    ContactMessage.name,
    ContactMessage.email,
    ContactMessage.message,
    ContactMessage.message_date,
    ContactMessage.status,
    ContactMessage.admin_response,
    ContactMessage.responded_at,
    ContactMessage.updated_at,
)


async def insert_message(session, name: Optional[str], email: str, message: str) -> int:
    ts = now()
    stmt = (
        insert(ContactMessage)
        .values(name=name, email=email, message=message, message_date=ts,
                status=MessageStatus.UNREAD.value, updated_at=ts)
        .returning(ContactMessage.message_id)
    )
    res = await session.execute(stmt)
    return int(res.scalar_one())


async def list_messages(session, status_filter: Optional[str] = None) -> List[dict]:
    stmt = select(*MESSAGE_COLUMNS)
    if status_filter:
        stmt = stmt.where(ContactMessage.status == status_filter)
    stmt = stmt.order_by(ContactMessage.message_date.desc(), ContactMessage.message_id.desc())
    res = await session.execute(stmt)
    return rows_to_dicts(res.all())


async def get_message_for_update(session, message_id: int) -> Optional[dict]:
    stmt = select(*MESSAGE_COLUMNS).where(ContactMessage.message_id == message_id).with_for_update()
    res = await session.execute(stmt)
    row = res.one_or_none()
    return dict(row._mapping) if row else None


async def set_message_status(session, message_id: int, new_status: str) -> Optional[dict]:
    stmt = (
        update(ContactMessage)
        .where(ContactMessage.message_id == message_id)
        .values(status=new_status, updated_at=now())
        .returning(*MESSAGE_COLUMNS)
        .execution_options(synchronize_session=False)
    )
    res = await session.execute(stmt)
    row = res.one_or_none()
    return dict(row._mapping) if row else None


async def save_response(session, message_id: int, response_text: str) -> dict:
    ts = now()
    stmt = (
        update(ContactMessage)
        .where(ContactMessage.message_id == message_id)
        .values(admin_response=response_text, responded_at=ts,
                status=MessageStatus.RESPONDED.value, updated_at=ts)
        .returning(*MESSAGE_COLUMNS)
        .execution_options(synchronize_session=False)
    )
    res = await session.execute(stmt)
    return dict(res.one()._mapping)
