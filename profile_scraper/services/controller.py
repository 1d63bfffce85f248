"""Control surface for the scraper.

Each operation returns a status token (``loaded``, ``error``, ``updated``,
``started``, ``paused``, ``resumed``, ``stopped``, ``exported``) plus any
payload. The typed methods raise ``ScraperError`` on bad input; the
message-style :meth:`ScraperController.handle` entry point turns those into
``{"status": "error", "error": ...}`` replies instead.

Starting (or resuming an idle scraper) launches the loop as a background
``asyncio.Task``; at most one such task exists at a time. A stopped loop
still finishes its in-flight item, so a later start or resume waits for it
before launching the next loop.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Coroutine
from typing import Any

from pydantic import ValidationError

from profile_scraper.config.settings import SettingsUpdate
from profile_scraper.middleware.error_handler import InvalidSettingsError, ScraperError
from profile_scraper.models.api_config import build_partial_config
from profile_scraper.services.ingestion import parse_profiles
from profile_scraper.services.orchestrator import ScrapeOrchestrator

logger = logging.getLogger(__name__)


class ScraperController:
    """Message-passing facade over a :class:`ScrapeOrchestrator`."""

    def __init__(self, orchestrator: ScrapeOrchestrator) -> None:
        self._orchestrator = orchestrator
        self._task: asyncio.Task[None] | None = None
        self._stopping: asyncio.Task[None] | None = None
        self._handlers: dict[str, Callable[[dict], Awaitable[dict]]] = {
            "loadProfiles": lambda p: self.load_profiles(p.get("data")),
            "updateApiConfig": lambda p: self.update_api_config(p.get("config"), p.get("form")),
            "startScraping": lambda p: self.start_scraping(),
            "pauseScraping": lambda p: self.pause_scraping(),
            "resumeScraping": lambda p: self.resume_scraping(),
            "stopScraping": lambda p: self.stop_scraping(),
            "getStatus": lambda p: self.get_status(),
            "exportResults": lambda p: self.export_results(),
            "updateSettings": lambda p: self.update_settings(p.get("settings") or {}),
        }

    @property
    def orchestrator(self) -> ScrapeOrchestrator:
        return self._orchestrator

    @property
    def loop_active(self) -> bool:
        return self._task is not None and not self._task.done()

    # ------------------------------------------------------------------
    # Message dispatch
    # ------------------------------------------------------------------

    async def handle(self, action: str, payload: dict | None = None) -> dict:
        """Dispatch one control message by its ``action`` name."""
        handler = self._handlers.get(action)
        if handler is None:
            return {"status": "error", "error": f"Unknown action '{action}'"}
        try:
            return await handler(payload or {})
        except ScraperError as exc:
            logger.warning("Control action %s failed: %s", action, exc.message)
            return {"status": "error", "error": exc.message}

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def load_profiles(self, data: Any) -> dict:
        count = self._orchestrator.load_profiles(data)
        return {"status": "loaded", "count": count}

    async def load_profile_file(self, text: str, filename: str) -> dict:
        return await self.load_profiles(parse_profiles(text, filename))

    async def update_api_config(
        self,
        config: dict | None = None,
        form: dict | None = None,
    ) -> dict:
        partial: dict = {}
        if form:
            partial.update(build_partial_config(form))
        if config:
            partial.update(config)
        updated = self._orchestrator.update_api_config(partial)
        return {"status": "updated", "apiConfig": updated.to_wire()}

    async def start_scraping(self) -> dict:
        await self._wait_for_stopped_loop()
        if not self.loop_active:
            self._spawn(self._orchestrator.start())
        return {"status": "started"}

    async def pause_scraping(self) -> dict:
        self._orchestrator.pause()
        return {"status": "paused"}

    async def resume_scraping(self) -> dict:
        await self._wait_for_stopped_loop()
        if self._orchestrator.state.is_running:
            await self._orchestrator.resume()
        elif not self.loop_active:
            self._spawn(self._orchestrator.resume())
        return {"status": "resumed"}

    async def stop_scraping(self) -> dict:
        self._orchestrator.stop()
        if self.loop_active:
            self._stopping = self._task
        return {"status": "stopped"}

    async def get_status(self) -> dict:
        return self._orchestrator.status().to_wire()

    async def export_results(self) -> dict:
        path = self._orchestrator.export_results()
        return {"status": "exported", "path": str(path) if path else None}

    async def update_settings(self, settings: dict) -> dict:
        try:
            update = SettingsUpdate.model_validate(settings)
        except ValidationError as exc:
            raise InvalidSettingsError(delay=repr(settings.get("delay"))) from exc
        self._orchestrator.update_settings(update.delay)
        return {"status": "updated"}

    async def shutdown(self) -> None:
        """Stop the loop and wait for the in-flight item to finish."""
        task = self._task
        if task is None or task.done():
            return
        self._orchestrator.stop()
        await task

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _wait_for_stopped_loop(self) -> None:
        """Let a stopped loop finish its in-flight item before anything new starts."""
        task, self._stopping = self._stopping, None
        if task is None or task.done():
            return
        logger.info("Waiting for the stopped scrape loop to finish its current item")
        await asyncio.wait({task})

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        self._task = asyncio.create_task(coro)
        self._task.add_done_callback(self._on_loop_done)

    @staticmethod
    def _on_loop_done(task: asyncio.Task[None]) -> None:
        if task.cancelled():
            logger.warning("Scrape loop task was cancelled")
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Scrape loop crashed: %s", exc, exc_info=exc)
