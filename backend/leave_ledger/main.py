from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI

from leave_ledger.api.health import health_router
from leave_ledger.api.router import api_router
from leave_ledger.config import get_settings
from leave_ledger.db import dispose_engine
from leave_ledger.exceptions import setup_exception_handlers
from leave_ledger.logging_config import configure_logging
from leave_ledger.middleware import setup_middleware

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from leave_ledger.config import Settings

logger = logging.getLogger(__name__)

DESCRIPTION = (
    "Leave balances, applications and their approval lifecycle, sandwich-leave charging, "
    "monthly tenure-based accrual and anniversary carry-forward."
)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info("%s %s starting (%s)", settings.app_name, settings.app_version, settings.environment)
    try:
        yield
    finally:
        await dispose_engine()
        logger.info("%s stopped", settings.app_name)


def _docs_kwargs(settings: Settings) -> dict[str, str | None]:
    """Interactive docs are served everywhere except production."""
    if settings.environment == "production":
        return {"docs_url": None, "redoc_url": None, "openapi_url": None}
    return {"docs_url": "/docs", "redoc_url": "/redoc", "openapi_url": "/openapi.json"}


def create_app() -> FastAPI:
    settings = get_settings()
    application = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description=DESCRIPTION,
        debug=settings.debug,
        lifespan=lifespan,
        **_docs_kwargs(settings),
    )
    setup_middleware(application, settings)
    setup_exception_handlers(application)
    for router in (health_router, api_router):
        application.include_router(router)
    return application


app = create_app()
