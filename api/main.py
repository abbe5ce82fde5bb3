"""
Solar Lead CRM API - Main Application.

FastAPI application with CORS enabled for frontend communication.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api import __version__
from api.logging_config import setup_logging
from domain.time import to_iso_utc
from repositories.client import Settings, load_settings
from services.event_bus import EventBus, Heartbeat
from services.lead_service import LeadService, create_lead_service

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    service: Optional[LeadService] = None,
) -> FastAPI:
    """
    Build the API application.

    Args:
        settings: Configuration; read from the environment when omitted
        service: Pre-built LeadService (tests inject one); wired from settings when omitted
    """
    settings = settings or load_settings()
    setup_logging(settings.log_level)

    bus = service.bus if service is not None else EventBus()
    service = service or create_lead_service(settings, bus)
    heartbeat = Heartbeat(bus, interval_seconds=settings.heartbeat_interval_seconds)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        heartbeat.start()
        logger.info(
            "API started",
            extra={"mock_mode": settings.mock_mode, "version": __version__},
        )
        try:
            yield
        finally:
            heartbeat.stop()
            logger.info("API stopped")

    app = FastAPI(
        title="Solar Lead CRM API",
        description="REST API for managing solar installation leads",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.bus = bus
    app.state.heartbeat = heartbeat
    app.state.lead_service = service

    # TODO: Restrict origins once the dashboard has a fixed host
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health", tags=["Health"])
    def health_check():
        """
        Health check endpoint.

        Returns the API status, version, backend mode and the time of the
        last event fan-out (heartbeats included).
        """
        last_update = bus.last_update
        return {
            "status": "healthy",
            "version": __version__,
            "service": "solar-lead-crm-api",
            "mode": "mock" if settings.mock_mode else "backend",
            "last_update": to_iso_utc(last_update) if last_update else None,
        }

    @app.get("/", tags=["Root"])
    def root():
        """
        Root endpoint with API information.
        """
        return {
            "message": "Solar Lead CRM API",
            "version": __version__,
            "docs": "/docs",
            "health": "/health"
        }

    from api.routers import analytics, leads, users, whatsapp

    app.include_router(leads.router, prefix="/api/v1", tags=["Leads"])
    app.include_router(whatsapp.router, prefix="/api/v1", tags=["WhatsApp"])
    app.include_router(analytics.router, prefix="/api/v1", tags=["Dashboard"])
    app.include_router(users.router, prefix="/api/v1", tags=["Users"])

    return app


app = create_app()
