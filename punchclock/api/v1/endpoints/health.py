"""
Health endpoint — readiness depends on the database answering.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from punchclock.api.v1.deps import get_db
from punchclock.core.timeutils import utcnow
from punchclock.schemas.attendance import HealthResponse

router = APIRouter(tags=["health"])
logger = logging.getLogger(__name__)


@router.get("/health", response_model=HealthResponse)
async def health(db: AsyncSession = Depends(get_db)) -> JSONResponse:
    """Public health check — 200 when ready, 503 when the DB is down."""
    db_up = True
    try:
        await db.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        logger.error("Health check DB failure: %s", e)
        db_up = False

    body = HealthResponse(
        status="ok",
        readiness="ready" if db_up else "not_ready",
        dependencies={"database": "up" if db_up else "down"},
        timestamp=utcnow().isoformat(),
    )
    return JSONResponse(status_code=200 if db_up else 503, content=body.model_dump())
