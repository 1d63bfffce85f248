"""Shared test fixtures for the scraper test suite."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from profile_scraper.config.settings import ScraperSettings
from profile_scraper.config.site_presets import BUILTIN_PRESETS
from profile_scraper.models.api_config import ApiConfig
from profile_scraper.services.orchestrator import ScrapeOrchestrator
from profile_scraper.services.state_store import InMemoryStateStore
from tests.helpers import FakeExporter, RecordingSleep, ScriptedTransport


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def settings() -> ScraperSettings:
    """Test settings with the default retry budget and pacing."""
    return ScraperSettings(
        delay_between_requests_ms=5000,
        max_jitter_ms=2000,
        max_retries=2,
        batch_size=5,
        rate_limit_delay_ms=5000,
        retry_delay_ms=2000,
    )


@pytest.fixture
def rest_config() -> ApiConfig:
    return BUILTIN_PRESETS["sbcconnect.com"]


@pytest.fixture
def graphql_config() -> ApiConfig:
    return BUILTIN_PRESETS["event.igblive.com"]


@pytest.fixture
def store() -> InMemoryStateStore:
    return InMemoryStateStore()


@pytest.fixture
def make_orchestrator(
    settings: ScraperSettings, graphql_config: ApiConfig, store: InMemoryStateStore
) -> Callable[..., ScrapeOrchestrator]:
    """Build an orchestrator over fakes; keyword overrides replace any collaborator."""

    def _make(**overrides: Any) -> ScrapeOrchestrator:
        kwargs: dict[str, Any] = {
            "transport": ScriptedTransport(),
            "state_store": store,
            "settings": settings,
            "api_config": graphql_config,
            "presets": BUILTIN_PRESETS,
            "exporter": FakeExporter(),
            "sleep": RecordingSleep(),
            "clock": lambda: 1_700_000_000_000,
            "jitter": lambda: 0.0,
        }
        kwargs.update(overrides)
        return ScrapeOrchestrator(**kwargs)

    return _make
