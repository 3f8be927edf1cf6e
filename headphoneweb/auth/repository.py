from typing import Optional
from sqlalchemy import select
from headphoneweb.db.schema import Admin


async def get_admin_by_username(session, username: str) -> Optional[dict]:
    stmt = select(Admin.admin_id, Admin.password_hash).where(Admin.username == username)
    res = await session.execute(stmt)
    row = res.one_or_none()
    if not row:
        return None
    return {"admin_id": int(row.admin_id), "password_hash": row.password_hash}
