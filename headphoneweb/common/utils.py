from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def now() -> datetime:
    return datetime.now(timezone.utc)


def build_success(data: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return {"success": True, **(data or {})}


def build_error(message: str,
                extra: Optional[Dict[str, Any]] = None,
                request_id: Optional[str] = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {"error": message}
    if extra:
        body.update(extra)
    if request_id:
        body["request_id"] = request_id
    return body


def json_ok(content: Dict[str, Any], status_code: int = 200, headers=None) -> JSONResponse:
    return JSONResponse(jsonable_encoder(content), status_code=status_code, headers=headers)


def json_error(content: Dict[str, Any], status_code: int = 500, headers=None) -> JSONResponse:
    return JSONResponse(jsonable_encoder(content), status_code=status_code, headers=headers)


def success_response(data: Optional[Dict[str, Any]] = None, status_code: int = 200,
                     headers: Optional[Dict[str, Any]] = None) -> JSONResponse:
    return json_ok(build_success(data), status_code=status_code, headers=headers)


def rows_to_dicts(rows: Iterable[Any]) -> list:
    """SQLAlchemy Row objects -> plain dicts keyed by the selected column labels."""
    return [dict(r._mapping) for r in rows]
