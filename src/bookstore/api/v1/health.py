import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from bookstore.utils.logging import get_project_name, get_project_version

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(request: Request) -> JSONResponse:
    """Liveness plus a `SELECT 1` round trip through the pool; 503 when the database is unreachable."""
    body = {"service": get_project_name(), "version": get_project_version()}
    try:
        async with request.app.state.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError):
        logger.warning("health.database_unreachable", exc_info=True)
        return JSONResponse(status_code=503, content={"status": "unhealthy", "database": "unreachable", **body})

    return JSONResponse(status_code=200, content={"status": "healthy", "database": "ok", **body})
