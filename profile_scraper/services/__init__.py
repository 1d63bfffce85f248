"""Scrape orchestration, persistence, export, ingestion and control."""

from profile_scraper.services.controller import ScraperController
from profile_scraper.services.exporter import JsonResultExporter
from profile_scraper.services.ingestion import coerce_profile_list, parse_profiles
from profile_scraper.services.orchestrator import ScrapeOrchestrator
from profile_scraper.services.state_store import (
    InMemoryStateStore,
    JsonFileStateStore,
    StateStore,
)

__all__ = [
    "InMemoryStateStore",
    "JsonFileStateStore",
    "JsonResultExporter",
    "ScrapeOrchestrator",
    "ScraperController",
    "StateStore",
    "coerce_profile_list",
    "parse_profiles",
]
