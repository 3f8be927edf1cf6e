from fastapi import APIRouter, HTTPException, Request, status
from sqlalchemy.exc import SQLAlchemyError
from headphoneweb.common import logger
from headphoneweb.common.utils import success_response

home_router = APIRouter()


@home_router.get("/health")
async def health_check(request: Request):
    try:
        await request.app.state.db.ping()
    except (SQLAlchemyError, OSError) as e:
        logger.error("health.db.unreachable", extra={"error": str(e)})
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                            detail="Database connection error") from e

    return success_response({"status": "healthy"})
