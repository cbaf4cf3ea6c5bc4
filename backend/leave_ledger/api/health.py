from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Literal

from fastapi import APIRouter
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from leave_ledger.config import get_settings
from leave_ledger.db import SessionDep

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

health_router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: Literal["ok", "degraded"]
    database: Literal["up", "down"]
    version: str
    environment: str


async def _database_reachable(session: AsyncSession) -> bool:
    try:
        await session.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError):
        logger.exception("Health check could not reach the database")
        return False
    return True


@health_router.get("/health", response_model=HealthResponse)
async def health(session: SessionDep) -> HealthResponse:
    """Liveness plus a database round trip. Always 200; ``status`` carries the verdict."""
    settings = get_settings()
    reachable = await _database_reachable(session)
    return HealthResponse(
        status="ok" if reachable else "degraded",
        database="up" if reachable else "down",
        version=settings.app_version,
        environment=settings.environment,
    )
