"""Adjutant -- FastAPI application entry point."""

import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from adjutant.api.routers.agents import router as agents_router
from adjutant.api.routers.assistant import router as assistant_router
from adjutant.api.routers.health import router as health_router
from adjutant.api.routers.projects import router as projects_router
from adjutant.api.routers.settings import router as settings_router
from adjutant.api.routers.ws import router as ws_router
from adjutant.clients import llm_client
from adjutant.config import VERSION, settings
from adjutant.logging_setup import configure_logging
from adjutant.middleware import RequestIDMiddleware
from adjutant.middleware.access_log import AccessLogMiddleware
from adjutant.middleware.exception_handler import setup_exception_handlers
from adjutant.services import agent_service
from adjutant.services.settings_store import SettingsStore
from adjutant.ws_manager import manager as ws_manager

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(application: FastAPI):
    """Application lifespan: startup and shutdown hooks."""
    # pytest owns log capture; don't replace its handlers.
    if "pytest" not in sys.modules:
        configure_logging(settings.LOG_LEVEL, settings.LOG_FILE)
    logger.info(
        "Adjutant %s starting  settings=%s  provider=%s",
        VERSION,
        application.state.settings_store.path,
        application.state.settings_store.settings.active_provider.value,
    )
    await ws_manager.start_heartbeat()
    yield
    # Shutdown order: no more pings, then stop agents (they may still be
    # mid-request), then close the shared HTTP client.
    await ws_manager.stop_heartbeat()
    await agent_service.shutdown_all()
    await llm_client.close_client()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    application = FastAPI(
        title="Adjutant",
        version=VERSION,
        description="Blueprint-driven project scaffolding and code generation",
        lifespan=lifespan,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
    )
    application.state.settings_store = SettingsStore(settings.SETTINGS_FILE)

    setup_exception_handlers(application)

    # RequestIDMiddleware wraps the access log so the id is already set.
    application.add_middleware(AccessLogMiddleware)
    application.add_middleware(RequestIDMiddleware)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.FRONTEND_URL],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "X-Request-ID"],
    )

    application.include_router(health_router)
    application.include_router(settings_router)
    application.include_router(assistant_router)
    application.include_router(projects_router)
    application.include_router(agents_router)
    application.include_router(ws_router)
    return application


app = create_app()
