"""
FreshAlert FastAPI Application
Entry point: wires the store, the messaging client, the expiry notifier and
the recurring alert jobs.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging
import uvicorn
from contextlib import asynccontextmanager
import anyio
from typing import Optional

from api.routes import notify, health
from api.middleware import (
    RequestLoggingMiddleware,
    validation_exception_handler,
    http_exception_handler,
    freshalert_exception_handler,
    general_exception_handler,
)
from adapters import messaging_adapter
from app.config import settings
from app.exceptions import FreshAlertError
from domain import models as db_models
from services.alert_scheduler import AlertScheduler
from services.channel_dispatcher import build_default_dispatcher
from services.expiry_notifier import ExpiryNotifier
from services.expiry_time import make_clock

# Setup logging with configured level and format
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()), format=settings.log_format
)
_logger = logging.getLogger("freshalert.main")


async def _init_database_with_retries() -> None:
    for attempt in range(1, settings.db_init_attempts + 1):
        try:
            # Run blocking init in a thread to avoid blocking the event loop
            await anyio.to_thread.run_sync(db_models.init_database)
            _logger.info("Database initialization succeeded")
            return
        except Exception as exc:
            _logger.warning(
                "Database init attempt %d/%d failed: %s",
                attempt,
                settings.db_init_attempts,
                exc,
            )
            if attempt < settings.db_init_attempts:
                await anyio.sleep(settings.db_init_delay_sec)
            else:
                _logger.error(
                    "Database initialization failed after %d attempts", attempt
                )
                raise


def build_notifier() -> ExpiryNotifier:
    """Production wiring: shared session factory, Twilio client, alert-timezone clock."""
    client = messaging_adapter.connect(settings)
    dispatcher = build_default_dispatcher(settings, client)
    return ExpiryNotifier(
        session_factory=db_models.SessionLocal,
        dispatcher=dispatcher,
        clock=make_clock(settings.alert_timezone),
    )


def create_app(
    notifier: Optional[ExpiryNotifier] = None,
    scheduler_enabled: Optional[bool] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        notifier: pre-built notifier (tests); when omitted the database is
            initialised and the production notifier is wired at startup
        scheduler_enabled: override settings.scheduler_enabled
    """
    start_jobs = settings.scheduler_enabled if scheduler_enabled is None else scheduler_enabled

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        _logger.info(f"Starting FreshAlert in {settings.environment.value} mode")

        active = notifier
        if active is None:
            await _init_database_with_retries()
            active = build_notifier()

        scheduler = AlertScheduler(active, settings)
        app.state.notifier = active
        app.state.scheduler = scheduler
        if start_jobs:
            scheduler.start()
        else:
            _logger.info("Recurring alert jobs disabled")

        try:
            yield
        finally:
            _logger.info("Shutting down FreshAlert")
            await scheduler.stop()

    application = FastAPI(
        title=settings.api_title,
        version=settings.app_version,
        description=settings.api_description,
        lifespan=lifespan,
        debug=settings.debug,
        openapi_url=(
            f"{settings.api_prefix}/openapi.json" if not settings.is_production() else None
        ),
        docs_url=f"{settings.api_prefix}/docs" if not settings.is_production() else None,
        redoc_url=None,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )
    application.add_middleware(RequestLoggingMiddleware)

    application.add_exception_handler(RequestValidationError, validation_exception_handler)
    application.add_exception_handler(StarletteHTTPException, http_exception_handler)
    application.add_exception_handler(FreshAlertError, freshalert_exception_handler)
    application.add_exception_handler(Exception, general_exception_handler)

    application.include_router(notify.router, prefix=settings.api_prefix)
    application.include_router(health.router, prefix=settings.api_prefix)
    return application


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development(),
        log_level=settings.log_level.lower(),
    )
