"""Per-domain API presets and YAML loader.

Two integrations ship built in: the SBC Connect REST endpoint and the IGB
Live GraphQL endpoint. A YAML file may override or add presets; entries are
validated into :class:`ApiConfig` objects and invalid ones are skipped.

YAML shape::

    sites:
      event.igblive.com:
        apiType: GraphQL
        endpoint: https://event.igblive.com/api/graphql
        ...
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from profile_scraper.models.api_config import DEFAULT_OPERATION_NAME, ApiConfig, ApiType

logger = logging.getLogger(__name__)

_IGB_HASH = "03e6ab3182b93582753b79d92ee01125bd74c7164986e7870be9dcad9080f048"

BUILTIN_PRESETS: dict[str, ApiConfig] = {
    "sbcconnect.com": ApiConfig(
        api_type=ApiType.REST,
        endpoint="https://sbcconnect.com/api/user/getById",
        event_path="casinobeats-summit-2025",
        target_domain="sbcconnect.com",
    ),
    "event.igblive.com": ApiConfig(
        api_type=ApiType.GRAPHQL,
        endpoint="https://event.igblive.com/api/graphql",
        method="POST",
        operation_name=DEFAULT_OPERATION_NAME,
        sha256_hash=_IGB_HASH,
        event_id="RXZlbnRfMjYxMTQwMQ==",
        headers={
            "x-client-origin": "event.igblive.com",
            "x-client-platform": "Event App",
            "x-client-version": "2.309.229",
        },
        target_domain="event.igblive.com",
        extensions={"persistedQuery": {"version": 1, "sha256Hash": _IGB_HASH}},
    ),
}


def load_site_presets(yaml_path: str) -> dict[str, ApiConfig]:
    """Return the built-in presets updated with those found in *yaml_path*.

    A missing or unparsable file yields the built-in presets unchanged.
    """
    presets = dict(BUILTIN_PRESETS)
    path = Path(yaml_path)

    if not path.exists():
        logger.warning("Site presets file not found at %s — using built-in presets", yaml_path)
        return presets

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        logger.error("Failed to parse site presets YAML at %s: %s", yaml_path, exc)
        return presets

    if not isinstance(raw, dict) or not isinstance(raw.get("sites"), dict):
        logger.warning("Site presets YAML missing 'sites' key — using built-in presets")
        return presets

    for domain, config in raw["sites"].items():
        try:
            preset = ApiConfig.model_validate({"targetDomain": domain, **(config or {})})
        except Exception as exc:
            logger.error("Invalid preset for site '%s': %s — skipping", domain, exc)
            continue
        presets[domain] = preset

    return presets


def default_api_config(presets: dict[str, ApiConfig], domain: str) -> ApiConfig:
    """Initial config for a fresh scraper: the preset for *domain* if any."""
    return presets.get(domain) or BUILTIN_PRESETS["sbcconnect.com"]
