from typing import Iterable, Optional
from urllib.parse import urlencode
from fastapi import Request, status
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import RedirectResponse
from headphoneweb.auth.constants import ADMIN_COOKIE_NAME, ADMIN_SCOPE, SITE_COOKIE_NAME, SITE_SCOPE
from headphoneweb.auth.utils import decode_session_token
from headphoneweb.common.utils import build_error, json_error
from headphoneweb.config.settings import Settings
from headphoneweb.middlewares.constants import (ADMIN_API_PREFIX, ADMIN_API_PUBLIC_PATHS, ADMIN_DASHBOARD_PAGE,
                                                ADMIN_LOGIN_PAGE, ADMIN_PREFIX, PASSWORD_PAGE, SITE_PUBLIC_PATHS,
                                                STATIC_PREFIXES, WEBHOOK_BYPASS_PATHS, logger)


def _under(path: str, prefix: str) -> bool:
    return path == prefix or path.startswith(prefix.rstrip("/") + "/")


def _matches_any(path: str, paths: Iterable[str]) -> bool:
    return any(_under(path, p) for p in paths)


class RequestGateMiddleware(BaseHTTPMiddleware):
    """Two nested boundaries checked before any handler runs.

    Outer: every non allow-listed path needs a valid ``site_session`` cookie,
    otherwise the browser is sent to the password page with ``from`` set to
    the requested location. Inner: ``/admin`` pages and ``/api/admin`` endpoints
    need a valid ``admin_session`` cookie.

    Both cookies are signed session tokens checked for signature, expiry and
    scope on every request; no database lookup happens here.
    """

    def __init__(self, app, *, settings: Settings,
                 public_paths: Iterable[str] = SITE_PUBLIC_PATHS,
                 static_prefixes: Iterable[str] = STATIC_PREFIXES,
                 bypass_paths: Iterable[str] = WEBHOOK_BYPASS_PATHS):
        super().__init__(app)
        self.settings = settings
        self.public_paths = tuple(public_paths)
        self.static_prefixes = tuple(static_prefixes)
        self.bypass_paths = tuple(bypass_paths)

    def _is_site_public(self, path: str) -> bool:
        if _matches_any(path, self.public_paths):
            return True
        return any(path.startswith(p) for p in self.static_prefixes)

    def _admin_claims(self, request: Request) -> Optional[dict]:
        return decode_session_token(self.settings, request.cookies.get(ADMIN_COOKIE_NAME), ADMIN_SCOPE)

    async def dispatch(self, request: Request, call_next):
        path = request.url.path

        if _matches_any(path, self.bypass_paths):
            return await call_next(request)

        if not self._is_site_public(path):
            site_claims = decode_session_token(self.settings, request.cookies.get(SITE_COOKIE_NAME), SITE_SCOPE)
            if site_claims is None:
                original = path + (f"?{request.url.query}" if request.url.query else "")
                logger.info("gate.site.redirect", extra={"path": path, "method": request.method})
                return RedirectResponse(f"{PASSWORD_PAGE}?{urlencode({'from': original})}",
                                        status_code=status.HTTP_307_TEMPORARY_REDIRECT)

        if _under(path, ADMIN_PREFIX):
            admin_claims = self._admin_claims(request)
            if path == ADMIN_LOGIN_PAGE:
                # already signed in, skip the login form
                if admin_claims is not None:
                    return RedirectResponse(ADMIN_DASHBOARD_PAGE, status_code=status.HTTP_307_TEMPORARY_REDIRECT)
                return await call_next(request)

            if admin_claims is None:
                logger.info("gate.admin.redirect", extra={"path": path})
                return RedirectResponse(ADMIN_LOGIN_PAGE, status_code=status.HTTP_307_TEMPORARY_REDIRECT)
            request.state.admin_id = int(admin_claims["sub"])

        elif _under(path, ADMIN_API_PREFIX) and not _matches_any(path, ADMIN_API_PUBLIC_PATHS):
            admin_claims = self._admin_claims(request)
            if admin_claims is None:
                logger.warning("gate.admin_api.unauthenticated", extra={"path": path, "method": request.method})
                return json_error(build_error("Admin authentication required"),
                                  status_code=status.HTTP_401_UNAUTHORIZED)
            request.state.admin_id = int(admin_claims["sub"])

        return await call_next(request)
