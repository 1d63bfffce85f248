"""Configuration module — settings and site presets."""

from profile_scraper.config.settings import ScraperSettings, SettingsUpdate
from profile_scraper.config.site_presets import (
    BUILTIN_PRESETS,
    default_api_config,
    load_site_presets,
)

__all__ = [
    "BUILTIN_PRESETS",
    "ScraperSettings",
    "SettingsUpdate",
    "default_api_config",
    "load_site_presets",
]
