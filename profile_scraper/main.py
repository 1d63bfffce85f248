"""FastAPI application entry point with lifespan management.

Startup: load settings, configure logging, load site presets, restore the
persisted API config, and wire transport, state store, exporter,
orchestrator and controller into the routers.
Shutdown: stop the scrape loop at its next iteration boundary, wait for it,
then close the HTTP client.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from profile_scraper.config.settings import ScraperSettings
from profile_scraper.config.site_presets import default_api_config, load_site_presets
from profile_scraper.dispatch.transport import HttpxTransport
from profile_scraper.logging_config import configure_logging
from profile_scraper.middleware.error_handler import register_error_handlers
from profile_scraper.middleware.request_id import RequestIdMiddleware
from profile_scraper.models.api_config import merge_api_config
from profile_scraper.routers.control import create_control_router
from profile_scraper.routers.health import create_health_router
from profile_scraper.services.controller import ScraperController
from profile_scraper.services.exporter import JsonResultExporter
from profile_scraper.services.orchestrator import ScrapeOrchestrator
from profile_scraper.services.state_store import JsonFileStateStore

logger = logging.getLogger(__name__)

# Shared state for the application, populated during lifespan startup
_state: dict = {}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown logic."""
    settings = ScraperSettings()

    configure_logging(settings.log_level)
    logger.info("Starting profile scraper service on port %d", settings.port)

    presets = load_site_presets(settings.site_presets_path)
    state_store = JsonFileStateStore(settings.state_path)

    api_config = default_api_config(presets, settings.default_target_domain)
    stored_config = state_store.load().get("apiConfig")
    if isinstance(stored_config, dict):
        api_config = merge_api_config(api_config, stored_config)

    transport = HttpxTransport(
        target_domain=api_config.target_domain,
        timeout_seconds=settings.request_timeout_seconds,
    )

    orchestrator = ScrapeOrchestrator(
        transport=transport,
        state_store=state_store,
        settings=settings,
        api_config=api_config,
        presets=presets,
        exporter=JsonResultExporter(settings.export_dir),
    )
    controller = ScraperController(orchestrator)

    app.include_router(create_health_router(orchestrator=orchestrator))
    app.include_router(create_control_router(controller=controller))

    _state.update({
        "settings": settings,
        "orchestrator": orchestrator,
        "controller": controller,
    })

    logger.info(
        "Profile scraper started",
        extra={
            "api_type": api_config.api_type.value,
            "target_domain": api_config.target_domain,
        },
    )

    yield

    logger.info("Shutting down profile scraper…")
    await controller.shutdown()
    await transport.aclose()
    logger.info("Profile scraper shut down")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Universal Profile Scraper",
        version="1.0.0",
        lifespan=lifespan,
    )

    register_error_handlers(app)
    app.add_middleware(RequestIdMiddleware)

    return app


app = create_app()
