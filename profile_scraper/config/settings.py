"""Pydantic Settings for the profile scraper service.

All environment variables use the PROFILE_SCRAPER_ prefix.
Example: PROFILE_SCRAPER_PORT=8002, PROFILE_SCRAPER_MAX_RETRIES=3
"""

from __future__ import annotations

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings


class ScraperSettings(BaseSettings):
    """Scraper service configuration validated from environment variables."""

    # Service
    port: int = 8002
    log_level: str = "INFO"

    # Scrape loop pacing
    delay_between_requests_ms: int = Field(default=5000, ge=0)
    max_jitter_ms: int = Field(default=2000, ge=0)
    batch_size: int = Field(default=5, ge=1)  # Checkpoint every N advances

    # Per-item retries (rate limits and errors share one budget)
    max_retries: int = Field(default=2, ge=0)
    rate_limit_delay_ms: int = Field(default=5000, ge=0)
    retry_delay_ms: int = Field(default=2000, ge=0)

    # HTTP transport
    request_timeout_seconds: float = Field(default=30.0, gt=0)

    # Persistence / export
    state_path: str = "scraper_state.json"
    export_dir: str = "exports"

    # Site presets
    site_presets_path: str = "profile_scraper/config/site_presets.yaml"
    default_target_domain: str = "sbcconnect.com"

    model_config = {"env_prefix": "PROFILE_SCRAPER_"}


class SettingsUpdate(BaseModel):
    """User-editable settings sent through the control surface."""

    delay: int | None = Field(default=None, ge=0)
