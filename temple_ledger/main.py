"""Temple Ledger API — application factory and the module-level ASGI app.

Invariants:
    - Routers are listed explicitly in ROUTERS; nothing is auto-discovered
    - The database manager exists only between lifespan startup and shutdown
    - Every error leaves through api/error_handlers.py

Design Decisions:
    - create_app() builds a fresh app so tests and scripts can own their instance;
      `app` is what uvicorn serves (uvicorn temple_ledger.main:app)
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from temple_ledger.api.error_handlers import register_error_handlers
from temple_ledger.api.routes import bookings, health, identity, reports
from temple_ledger.config import Settings, get_settings
from temple_ledger.infrastructure import database
from temple_ledger.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)

ROUTERS = (health.router, identity.router, bookings.router, reports.router)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    setup_logging(settings.log_level, settings.log_format)
    database.init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    logger.info(
        f"Ledger API up (visit_date_policy={settings.visit_date_policy.value}, "
        f"booking_timezone={settings.booking_timezone})"
    )
    try:
        yield
    finally:
        if database.db_manager is not None:
            await database.db_manager.dispose()
            database.db_manager = None
        logger.info("Ledger API stopped")


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    application = FastAPI(title="Temple Ledger API", version="1.0.0", lifespan=lifespan)
    application.state.settings = settings
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "PATCH"],
        allow_headers=["*"],
    )
    for router in ROUTERS:
        application.include_router(router)
    register_error_handlers(application)
    return application


app = create_app()
