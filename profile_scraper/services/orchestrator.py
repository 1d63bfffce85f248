"""Scrape orchestrator — drives the sequential scrape loop.

Coordinates each profile through the pipeline:
build request → send via transport → extract payload → normalize → append
result → checkpoint → sleep.

Exactly one request is in flight at a time and results are appended in
source order. ``pause()`` and ``stop()`` only flip flags; the loop observes
them at the next iteration boundary, so an in-flight item (including its
retries) always completes first.

Per-item retries form one bounded loop: rate limits back off for
``rate_limit_delay_ms``, other HTTP / transport errors for
``retry_delay_ms``, and both draw from the same ``max_retries`` budget.
An item that runs out of retries is recorded as an error result and the
loop moves on.
"""

from __future__ import annotations

import asyncio
import logging
import random
import time
from collections.abc import Awaitable, Callable, Mapping
from pathlib import Path
from typing import Any

from profile_scraper.config.settings import ScraperSettings
from profile_scraper.dispatch.request_builder import build_request
from profile_scraper.dispatch.transport import HttpTransport
from profile_scraper.middleware.error_handler import (
    RETRYABLE_ERRORS,
    InvalidResponseShapeError,
    RateLimitedError,
    RequestBuildError,
    ScrapeAlreadyRunningError,
    ScraperError,
    TransportError,
)
from profile_scraper.models.api_config import ApiConfig, merge_api_config
from profile_scraper.models.normalizer import ResponseNormalizer, extract_payload
from profile_scraper.models.run_state import (
    RunPhase,
    RunState,
    StatusSnapshot,
    error_result,
    is_error_result,
    success_result,
)
from profile_scraper.services.exporter import JsonResultExporter
from profile_scraper.services.ingestion import coerce_profile_list
from profile_scraper.services.state_store import StateStore

logger = logging.getLogger(__name__)

SleepFn = Callable[[float], Awaitable[None]]


def _epoch_ms() -> int:
    return int(time.time() * 1000)


class ScrapeOrchestrator:
    """Owns the run state and the single active scrape loop.

    Dependencies are injected via the constructor so the orchestrator is
    testable with fake transports, in-memory stores and instant sleeps.
    """

    def __init__(
        self,
        *,
        transport: HttpTransport,
        state_store: StateStore,
        settings: ScraperSettings,
        api_config: ApiConfig,
        presets: Mapping[str, ApiConfig] | None = None,
        exporter: JsonResultExporter | None = None,
        normalizer: ResponseNormalizer | None = None,
        sleep: SleepFn = asyncio.sleep,
        clock: Callable[[], int] = _epoch_ms,
        jitter: Callable[[], float] | None = None,
        on_status: Callable[[StatusSnapshot], None] | None = None,
    ) -> None:
        self._transport = transport
        self._store = state_store
        self._settings = settings
        self._api_config = api_config
        self._presets = dict(presets or {})
        self._exporter = exporter
        self._normalizer = normalizer or ResponseNormalizer()
        self._sleep = sleep
        self._clock = clock
        self._jitter = jitter or (lambda: random.uniform(0, settings.max_jitter_ms))
        self._on_status = on_status

        self._delay_ms = settings.delay_between_requests_ms
        self._stopped = False
        self.state = RunState()

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def api_config(self) -> ApiConfig:
        return self._api_config

    @property
    def delay_ms(self) -> int:
        return self._delay_ms

    @property
    def phase(self) -> RunPhase:
        if self.state.is_paused:
            return RunPhase.PAUSED
        if self.state.is_running:
            return RunPhase.RUNNING
        if self._stopped:
            return RunPhase.STOPPED
        return RunPhase.IDLE

    # ------------------------------------------------------------------
    # Configuration and input
    # ------------------------------------------------------------------

    def load_profiles(self, data: Any) -> int:
        """Replace the profile list and reset progress.

        Raises
        ------
        MalformedProfileInputError
            If *data* is not a recognized profile list. State is untouched.
        ScrapeAlreadyRunningError
            If a scrape loop is active.
        """
        if self.state.is_running:
            raise ScrapeAlreadyRunningError("Cannot load profiles while scraping is running")

        profiles = coerce_profile_list(data)
        self.state = RunState(profile_data=profiles)
        self._stopped = False
        self._persist()
        logger.info("Loaded %d profiles", len(profiles))
        return len(profiles)

    def update_api_config(self, partial: Mapping[str, Any]) -> ApiConfig:
        """Merge *partial* into the current config (or a site preset) and persist it.

        A running loop keeps the config it started with.
        """
        self._api_config = merge_api_config(self._api_config, partial, self._presets)
        self._store.save({"apiConfig": self._api_config.to_wire()})
        logger.info(
            "API configuration updated",
            extra={
                "api_type": self._api_config.api_type.value,
                "target_domain": self._api_config.target_domain,
            },
        )
        return self._api_config

    def update_settings(self, delay_ms: int | None) -> None:
        self._delay_ms = delay_ms or self._settings.delay_between_requests_ms
        self._store.save({"settings": {"delay": self._delay_ms}})
        logger.info("Delay between requests set to %dms", self._delay_ms)

    # ------------------------------------------------------------------
    # Control
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Run the scrape loop until the list is exhausted, paused or stopped."""
        if self.state.is_running:
            logger.info("Scrape loop already running — ignoring start")
            return

        self._restore()

        if not self.state.profile_data:
            logger.warning("No profile data loaded — nothing to scrape")
            return

        self.state.is_running = True
        self.state.is_paused = False
        self._stopped = False
        config = self._api_config

        logger.info(
            "Starting scrape of %d remaining profiles",
            self.state.total - self.state.current_index,
            extra={"api_type": config.api_type.value, "target_domain": config.target_domain},
        )

        try:
            await self._run_loop(config)
        finally:
            self._persist()
            self.state.is_running = False
            self._broadcast()

        logger.info("Scrape loop finished: %d profiles processed", len(self.state.results))
        self.export_results()

    def pause(self) -> bool:
        """Ask the loop to halt before the next item. Returns False if idle."""
        if not self.state.is_running:
            logger.warning("Pause requested but no scrape loop is running")
            return False
        self.state.is_paused = True
        self._persist()
        logger.info("Scraping paused at %d/%d", self.state.current_index, self.state.total)
        return True

    async def resume(self) -> None:
        """Clear a pause; start a new loop when none is active."""
        if not self.state.is_running:
            await self.start()
            return
        self.state.is_paused = False
        logger.info("Scraping resumed")

    def stop(self) -> None:
        self.state.is_running = False
        self.state.is_paused = False
        self._stopped = True
        self._persist()
        logger.info("Scraping stopped at %d/%d", self.state.current_index, self.state.total)

    def status(self) -> StatusSnapshot:
        return StatusSnapshot.from_state(self.state, self._api_config.to_wire())

    def export_results(self) -> Path | None:
        if self._exporter is None:
            logger.debug("No exporter configured — skipping export")
            return None
        return self._exporter.export(self.state.results, self._clock())

    # ------------------------------------------------------------------
    # Loop
    # ------------------------------------------------------------------

    async def _run_loop(self, config: ApiConfig) -> None:
        state = self.state
        advances = 0

        while state.has_pending and state.is_running and not state.is_paused:
            index = state.current_index
            person = state.profile_data[index]
            self._broadcast()

            result = await self.scrape_one(person, index, config)
            state.results.append(result)
            state.current_index += 1
            advances += 1

            if is_error_result(result):
                logger.warning(
                    "Profile %d/%d failed",
                    state.current_index,
                    state.total,
                    extra={"profile_index": index, "error_reason": result["error"]},
                )
            else:
                logger.info(
                    "Profile %d/%d scraped",
                    state.current_index,
                    state.total,
                    extra={"profile_index": index, "fields_extracted": len(result) - 2},
                )

            if advances % self._settings.batch_size == 0:
                self._persist()
                logger.info("Progress saved: %d/%d", state.current_index, state.total)

            if state.has_pending:
                delay_ms = self._delay_ms + self._jitter()
                logger.debug("Waiting %.0fms before next request", delay_ms)
                await self._sleep(delay_ms / 1000)

    async def scrape_one(
        self, person: dict, index: int, config: ApiConfig | None = None
    ) -> dict[str, Any]:
        """Scrape one profile, retrying per the shared retry budget.

        Always returns a result dict; failures are recorded, never raised.
        """
        config = config or self._api_config
        max_retries = self._settings.max_retries
        attempt = 0

        while True:
            try:
                record = await self._fetch_record(person, config)
                return success_result(record, self._clock(), index)
            except RateLimitedError as exc:
                last_error: ScraperError = exc
                delay_ms = self._settings.rate_limit_delay_ms
            except RETRYABLE_ERRORS as exc:
                last_error = exc
                delay_ms = self._settings.retry_delay_ms
            except (InvalidResponseShapeError, RequestBuildError) as exc:
                logger.warning(
                    "Profile %d not retryable: %s",
                    index,
                    exc.message,
                    extra={"profile_index": index, "error_reason": exc.message},
                )
                return error_result(person, exc.message, self._clock(), index)
            except Exception as exc:
                logger.exception("Unexpected error scraping profile %d", index)
                last_error = TransportError(str(exc) or type(exc).__name__)
                delay_ms = self._settings.retry_delay_ms

            if attempt >= max_retries:
                logger.error(
                    "Profile %d failed after %d attempts",
                    index,
                    attempt + 1,
                    extra={
                        "profile_index": index,
                        "attempt": attempt + 1,
                        "error_reason": last_error.message,
                    },
                )
                return error_result(person, last_error.message, self._clock(), index)

            attempt += 1
            logger.info(
                "Retrying profile %d (%d/%d) in %dms: %s",
                index,
                attempt,
                max_retries,
                delay_ms,
                last_error.message,
                extra={"profile_index": index, "attempt": attempt},
            )
            await self._sleep(delay_ms / 1000)

    async def _fetch_record(self, person: dict, config: ApiConfig) -> dict[str, Any]:
        request = build_request(config, person)
        outcome = await self._transport.send(request)
        document = outcome.raise_for_failure()
        payload = extract_payload(document, config.api_type, config.data_extractor)
        return self._normalizer.normalize(payload, config.api_type)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _persist(self) -> None:
        self._store.save({
            "profileData": self.state.profile_data,
            "currentIndex": self.state.current_index,
            "results": self.state.results,
            "apiConfig": self._api_config.to_wire(),
            "lastSaved": self._clock(),
        })

    def _restore(self) -> None:
        """Reload progress, settings and config from the state store."""
        stored = self._store.load()

        self.state.profile_data = list(stored.get("profileData") or [])
        self.state.current_index = int(stored.get("currentIndex") or 0)
        self.state.results = list(stored.get("results") or [])

        settings = stored.get("settings")
        if isinstance(settings, dict):
            delay = settings.get("delay")
            if isinstance(delay, int) and not isinstance(delay, bool) and delay > 0:
                self._delay_ms = delay
            else:
                self._delay_ms = self._settings.delay_between_requests_ms

        if isinstance(stored.get("apiConfig"), dict):
            self._api_config = merge_api_config(self._api_config, stored["apiConfig"])

        logger.info(
            "Restored %d profiles, resuming from index %d",
            self.state.total,
            self.state.current_index,
        )

    def _broadcast(self) -> None:
        if self._on_status is None:
            return
        try:
            self._on_status(self.status())
        except Exception:
            logger.warning("Status listener failed", exc_info=True)
