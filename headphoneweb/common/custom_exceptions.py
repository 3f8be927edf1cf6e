from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from headphoneweb.common import logger
from headphoneweb.common.utils import build_error, json_error
from headphoneweb.common.constants import request_id_ctx


class AppError(HTTPException):
    """HTTPException whose body carries extra fields next to `error` (e.g. available/requested)."""

    def __init__(self, status_code: int, detail: str, extra: Optional[Dict[str, Any]] = None):
        super().__init__(status_code=status_code, detail=detail)
        self.extra = extra or {}


class InsufficientStockError(AppError):
    def __init__(self, available: int, requested: int, name: Optional[str] = None, product_id: Any = None):
        extra: Dict[str, Any] = {"available": available, "requested": requested}
        if name is not None:
            extra["name"] = name
        if product_id is not None:
            extra["productId"] = product_id
        super().__init__(status.HTTP_400_BAD_REQUEST, "Insufficient stock", extra)


class PaymentProviderError(Exception):
    """Raised by the payment gateway for any failure reported by the provider."""

    def __init__(self, message: str, not_found: bool = False):
        super().__init__(message)
        self.message = message
        self.not_found = not_found


async def fallback_handler(request: Request, exc: Exception):

    rid = request_id_ctx.get(None)

    logger.error(
        "unexpected.exception",
        extra={
            "path": request.url.path,
            "method": request.method,
        },
        exc_info=exc,
    )

    payload = build_error("Internal Server Error", request_id=rid)
    return json_error(payload, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    rid = request_id_ctx.get(None)
    fields = [".".join(str(p) for p in err.get("loc", ()) if p != "body") for err in exc.errors()]
    logger.warning(
        "request.validation_failed",
        extra={
            "errors": exc.errors(),
            "path": request.url.path,
        },
    )

    payload = build_error("Invalid request", extra={"fields": fields}, request_id=rid)
    return json_error(payload, status_code=status.HTTP_400_BAD_REQUEST)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):

    rid = request_id_ctx.get(None)
    extra = getattr(exc, "extra", None)

    payload = build_error(str(exc.detail), extra=extra, request_id=rid)
    return json_error(payload, status_code=exc.status_code, headers=getattr(exc, "headers", None))


def register_all_exceptions(app: FastAPI):

    app.add_exception_handler(
        Exception,  # catch all unidentified/unhandled exceptions
        fallback_handler
    )

    app.add_exception_handler(
        RequestValidationError,
        validation_exception_handler
    )

    app.add_exception_handler(
        StarletteHTTPException,
        http_exception_handler
    )
