"""Scraper control endpoints.

- POST /api/v1/scraper/messages — dispatch a raw ``{action, payload}`` message
- POST /api/v1/scraper/profiles — load a profile list (JSON body)
- POST /api/v1/scraper/profiles/upload?filename=... — load a raw file body
- PUT  /api/v1/scraper/config — merge a partial API config
- PUT  /api/v1/scraper/config/form — merge a config built from form values
- PUT  /api/v1/scraper/settings — update general settings
- POST /api/v1/scraper/{start,pause,resume,stop,export}
- GET  /api/v1/scraper/status — status snapshot
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Query, Request
from pydantic import BaseModel, Field

from profile_scraper.config.settings import SettingsUpdate
from profile_scraper.middleware.error_handler import MalformedProfileInputError
from profile_scraper.models.responses import ApiResponse
from profile_scraper.services.controller import ScraperController

logger = logging.getLogger(__name__)


class ControlMessage(BaseModel):
    action: str = Field(..., min_length=1)
    payload: dict[str, Any] | None = None


def _ok(data: dict) -> dict:
    return ApiResponse(success=True, data=data).model_dump()


def create_control_router(*, controller: ScraperController) -> APIRouter:
    """Factory that creates the control router bound to *controller*."""
    router = APIRouter(prefix="/api/v1/scraper", tags=["scraper"])

    @router.post("/messages")
    async def dispatch_message(message: ControlMessage) -> dict:
        result = await controller.handle(message.action, message.payload)
        return ApiResponse(
            success=result.get("status") != "error",
            data=result,
            error=result.get("error"),
        ).model_dump()

    @router.post("/profiles")
    async def load_profiles(data: Any = Body(...)) -> dict:
        return _ok(await controller.load_profiles(data))

    @router.post("/profiles/upload")
    async def upload_profiles(
        request: Request,
        filename: str = Query(..., min_length=1),
    ) -> dict:
        try:
            text = (await request.body()).decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise MalformedProfileInputError(
                "Profile file is not valid UTF-8", filename=filename
            ) from exc
        return _ok(await controller.load_profile_file(text, filename))

    @router.put("/config")
    async def update_config(config: dict[str, Any] = Body(...)) -> dict:
        return _ok(await controller.update_api_config(config=config))

    @router.put("/config/form")
    async def update_config_form(form: dict[str, Any] = Body(...)) -> dict:
        return _ok(await controller.update_api_config(form=form))

    @router.put("/settings")
    async def update_settings(body: SettingsUpdate) -> dict:
        return _ok(await controller.update_settings(body.model_dump()))

    @router.post("/start")
    async def start() -> dict:
        return _ok(await controller.start_scraping())

    @router.post("/pause")
    async def pause() -> dict:
        return _ok(await controller.pause_scraping())

    @router.post("/resume")
    async def resume() -> dict:
        return _ok(await controller.resume_scraping())

    @router.post("/stop")
    async def stop() -> dict:
        return _ok(await controller.stop_scraping())

    @router.post("/export")
    async def export() -> dict:
        return _ok(await controller.export_results())

    @router.get("/status")
    async def status() -> dict:
        return _ok(await controller.get_status())

    return router
