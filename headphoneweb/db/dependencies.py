from typing import AsyncGenerator
from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession


async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    # one pooled connection per request: rolled back on any escaping exception, always released on exit
    async with request.app.state.db.session_maker() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
