"""Unit tests for ScraperSettings and site preset loading."""

from pathlib import Path

import pytest
import yaml

import profile_scraper
from profile_scraper.config.settings import ScraperSettings
from profile_scraper.config.site_presets import (
    BUILTIN_PRESETS,
    default_api_config,
    load_site_presets,
)
from profile_scraper.models.api_config import ApiType

_SHIPPED_PRESETS = Path(profile_scraper.__file__).parent / "config" / "site_presets.yaml"


# ---------------------------------------------------------------------------
# ScraperSettings
# ---------------------------------------------------------------------------


class TestScraperSettings:
    def test_defaults_are_correct(self):
        settings = ScraperSettings()

        assert settings.port == 8002
        assert settings.log_level == "INFO"
        assert settings.delay_between_requests_ms == 5000
        assert settings.max_jitter_ms == 2000
        assert settings.batch_size == 5
        assert settings.max_retries == 2
        assert settings.rate_limit_delay_ms == 5000
        assert settings.retry_delay_ms == 2000
        assert settings.request_timeout_seconds == 30.0
        assert settings.state_path == "scraper_state.json"
        assert settings.export_dir == "exports"
        assert settings.default_target_domain == "sbcconnect.com"

    def test_env_prefix(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("PROFILE_SCRAPER_PORT", "9000")
        monkeypatch.setenv("PROFILE_SCRAPER_MAX_RETRIES", "4")

        settings = ScraperSettings()
        assert settings.port == 9000
        assert settings.max_retries == 4

    def test_rejects_zero_batch_size(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("PROFILE_SCRAPER_BATCH_SIZE", "0")
        with pytest.raises(Exception):
            ScraperSettings()


# ---------------------------------------------------------------------------
# Site presets
# ---------------------------------------------------------------------------


class TestLoadSitePresets:
    def test_missing_file_returns_builtins(self, tmp_path: Path):
        presets = load_site_presets(str(tmp_path / "nope.yaml"))
        assert presets == BUILTIN_PRESETS

    def test_shipped_file_matches_builtins(self):
        presets = load_site_presets(str(_SHIPPED_PRESETS))

        assert presets["sbcconnect.com"] == BUILTIN_PRESETS["sbcconnect.com"]
        assert presets["event.igblive.com"] == BUILTIN_PRESETS["event.igblive.com"]

    def test_yaml_overrides_and_adds(self, tmp_path: Path):
        path = tmp_path / "sites.yaml"
        path.write_text(yaml.safe_dump({
            "sites": {
                "sbcconnect.com": {
                    "apiType": "REST",
                    "endpoint": "https://sbcconnect.com/api/user/getById",
                    "eventPath": "sbc-summit-2026",
                },
                "people.example.org": {
                    "apiType": "CUSTOM",
                    "endpoint": "https://people.example.org/api",
                },
            }
        }))

        presets = load_site_presets(str(path))

        assert presets["sbcconnect.com"].event_path == "sbc-summit-2026"
        assert presets["people.example.org"].api_type is ApiType.CUSTOM
        assert presets["people.example.org"].target_domain == "people.example.org"
        assert "event.igblive.com" in presets

    def test_invalid_entry_skipped(self, tmp_path: Path):
        path = tmp_path / "sites.yaml"
        path.write_text(yaml.safe_dump({
            "sites": {
                "bad.example": {"apiType": "SOAP"},
                "good.example": {"apiType": "REST", "endpoint": "https://good.example"},
            }
        }))

        presets = load_site_presets(str(path))

        assert "bad.example" not in presets
        assert "good.example" in presets

    def test_missing_sites_key(self, tmp_path: Path):
        path = tmp_path / "sites.yaml"
        path.write_text("domains: {}\n")
        assert load_site_presets(str(path)) == BUILTIN_PRESETS

    def test_unparsable_yaml(self, tmp_path: Path):
        path = tmp_path / "sites.yaml"
        path.write_text("sites: [unclosed\n")
        assert load_site_presets(str(path)) == BUILTIN_PRESETS


class TestDefaultApiConfig:
    def test_known_domain(self):
        config = default_api_config(BUILTIN_PRESETS, "event.igblive.com")
        assert config.api_type is ApiType.GRAPHQL

    def test_unknown_domain_falls_back_to_rest(self):
        config = default_api_config(BUILTIN_PRESETS, "unknown.test")
        assert config == BUILTIN_PRESETS["sbcconnect.com"]
