from typing import Optional
from fastapi import HTTPException, status
from headphoneweb.auth.constants import INVALID_CREDENTIALS, logger
from headphoneweb.auth.repository import get_admin_by_username
from headphoneweb.auth.utils import burn_password_check, verify_password


async def authenticate_admin(session, username: str, password: str) -> int:
    """Returns the admin id; unknown user and wrong password fail identically."""
    admin: Optional[dict] = await get_admin_by_username(session, username)

    if admin is None:
        burn_password_check()
        logger.warning("admin.login.failed", extra={"reason": "unknown_user"})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_CREDENTIALS)

    if not verify_password(password, admin["password_hash"]):
        logger.warning("admin.login.failed", extra={"reason": "password_mismatch", "admin_id": admin["admin_id"]})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_CREDENTIALS)

    return admin["admin_id"]
