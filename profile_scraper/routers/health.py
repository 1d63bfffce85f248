"""Health endpoint.

- GET /health — service status plus the scrape loop's phase and progress
"""

from __future__ import annotations

from fastapi import APIRouter

from profile_scraper.models.responses import ApiResponse
from profile_scraper.services.orchestrator import ScrapeOrchestrator


def create_health_router(*, orchestrator: ScrapeOrchestrator) -> APIRouter:
    """Factory that creates the health router with injected dependencies."""
    health_router = APIRouter(tags=["health"])

    @health_router.get("/health")
    async def health() -> dict:
        state = orchestrator.state
        return ApiResponse(
            success=True,
            data={
                "status": "healthy",
                "phase": orchestrator.phase.value,
                "progress": {
                    "current_index": state.current_index,
                    "total_profiles": state.total,
                },
            },
        ).model_dump()

    return health_router
