from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from headphoneweb.auth.constants import ADMIN_COOKIE_NAME, SITE_COOKIE_NAME, logger
from headphoneweb.auth.models import AdminLoginIn, SitePasswordIn
from headphoneweb.auth.services import authenticate_admin
from headphoneweb.auth.utils import create_admin_token, create_site_token, session_ttl, site_password_matches
from headphoneweb.common.utils import success_response
from headphoneweb.db.dependencies import get_session

site_auth_router = APIRouter()
admin_auth_router = APIRouter()


def _set_session_cookie(response, settings, key: str, value: str):
    response.set_cookie(
        key=key,
        value=value,
        httponly=True,
        secure=settings.secure_cookies,
        samesite="strict",
        path="/",
        max_age=int(session_ttl(settings).total_seconds()),
    )


@site_auth_router.post("/verify-password")
async def verify_site_password(request: Request, payload: SitePasswordIn):
    settings = request.app.state.settings

    if not payload.password:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Password is required")

    if not site_password_matches(payload.password, settings.SITE_PASSWORD):
        logger.warning("site.password.rejected")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid password")

    response = success_response()
    _set_session_cookie(response, settings, SITE_COOKIE_NAME, create_site_token(settings))
    logger.info("site.password.accepted")
    return response


@admin_auth_router.post("/login")
async def admin_login(request: Request, payload: AdminLoginIn, session: AsyncSession = Depends(get_session)):
    settings = request.app.state.settings

    logger.info("admin.login.attempt", extra={"username": payload.username})

    if not payload.username or not payload.password:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Username and password are required")

    admin_id = await authenticate_admin(session, payload.username, payload.password)

    response = success_response()
    _set_session_cookie(response, settings, ADMIN_COOKIE_NAME, create_admin_token(settings, admin_id))

    logger.info("admin.login.success", extra={"admin_id": admin_id})
    return response


@admin_auth_router.post("/logout")
async def admin_logout():
    res = success_response()
    res.delete_cookie(key=ADMIN_COOKIE_NAME, path="/", httponly=True, samesite="strict")
    logger.info("admin.logout")
    return res
