"""API configuration model and merge rules.

``ApiConfig`` describes one of the supported integrations (REST, GraphQL or a
CUSTOM pass-through). It is frozen: a running scrape always sees a stable
config, and updates go through :func:`merge_api_config`, which returns a new
instance.

Merge rules per field kind:

- scalar fields: the partial value replaces the base value when present
- ``headers``, ``variables``, ``dynamic_params``: merged key by key, the
  partial's keys win
- ``extensions``: replaced as a whole
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from profile_scraper.middleware.error_handler import InvalidConfigJSONError

logger = logging.getLogger(__name__)


class ApiType(str, Enum):
    """Supported API integration styles."""

    REST = "REST"
    GRAPHQL = "GraphQL"
    CUSTOM = "CUSTOM"


DEFAULT_OPERATION_NAME = "EventPersonDetailsQuery"

_DICT_MERGE_FIELDS = frozenset({"headers", "variables", "dynamic_params"})


class ApiConfig(BaseModel):
    """Declarative description of the target API for one scrape run."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        arbitrary_types_allowed=True,
    )

    api_type: ApiType = ApiType.REST
    endpoint: str = ""
    method: str = "GET"
    headers: dict[str, str] = Field(default_factory=dict)
    target_domain: str = ""

    # REST
    event_path: str | None = None

    # GraphQL
    operation_name: str | None = None
    sha256_hash: str | None = Field(default=None, alias="sha256Hash")
    event_id: str | None = None
    auth_token: str | None = None
    session_cookies: str | None = None
    variables: dict[str, Any] | None = None
    dynamic_params: dict[str, Any] | None = None
    extensions: dict[str, Any] | None = None

    # CUSTOM hooks; never persisted
    url_builder: Callable[[str, dict], str] | None = Field(default=None, exclude=True)
    body_builder: Callable[[dict], Any] | None = Field(default=None, exclude=True)
    data_extractor: Callable[[Any], Any] | None = Field(default=None, exclude=True)

    def to_wire(self) -> dict:
        """Serialize with camelCase keys, dropping unset optional fields."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


def merge_api_config(
    current: ApiConfig,
    partial: Mapping[str, Any],
    presets: Mapping[str, ApiConfig] | None = None,
) -> ApiConfig:
    """Merge a partial (camelCase or snake_case) config into a base config.

    The base is the preset registered for ``partial["targetDomain"]`` when one
    exists, otherwise *current*.
    """
    fields = _normalize_keys(partial)
    target_domain = fields.get("target_domain")

    base = current
    if presets and target_domain and target_domain in presets:
        base = presets[target_domain]
        logger.info("Using site preset for %s", target_domain)

    merged = base.model_dump()
    for name, value in fields.items():
        if name in _DICT_MERGE_FIELDS and isinstance(value, Mapping):
            merged[name] = {**(merged.get(name) or {}), **value}
        elif value is not None:
            merged[name] = value

    # Excluded hooks are not part of model_dump()
    for hook in ("url_builder", "body_builder", "data_extractor"):
        merged[hook] = fields.get(hook, getattr(base, hook))

    return ApiConfig.model_validate(merged)


def _normalize_keys(partial: Mapping[str, Any]) -> dict[str, Any]:
    """Map camelCase wire keys onto model field names, dropping unknown keys."""
    by_alias = {
        field.alias or name: name for name, field in ApiConfig.model_fields.items()
    }
    result: dict[str, Any] = {}
    for key, value in partial.items():
        if key in ApiConfig.model_fields:
            result[key] = value
        elif key in by_alias:
            result[by_alias[key]] = value
        else:
            logger.debug("Ignoring unknown config key %r", key)
    return result


def _parse_json_object(raw: str, what: str) -> dict[str, Any]:
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise InvalidConfigJSONError(f"Invalid JSON format for {what}") from exc
    if not isinstance(value, dict):
        raise InvalidConfigJSONError(f"Invalid JSON format for {what}")
    return value


def build_partial_config(form: Mapping[str, Any]) -> dict[str, Any]:
    """Build a partial config from raw form values.

    ``form`` carries the values a user typed: ``apiType``, ``endpoint``,
    ``targetDomain`` (or ``customDomain`` when the domain is ``"custom"``),
    ``eventPath``, ``operationName``, ``sha256Hash``, ``eventId``,
    ``clientVersion``, ``authToken``, ``sessionCookies`` and the JSON strings
    ``dynamicParams`` and ``customHeaders``.

    Raises
    ------
    InvalidConfigJSONError
        If ``dynamicParams`` or ``customHeaders`` is not a JSON object. No
        partial config is produced in that case, so callers never apply a
        half-parsed update.
    """
    target_domain = form.get("targetDomain") or ""
    if target_domain == "custom":
        target_domain = form.get("customDomain") or ""

    config: dict[str, Any] = {
        "apiType": form.get("apiType") or ApiType.REST.value,
        "endpoint": form.get("endpoint") or "",
        "targetDomain": target_domain,
    }

    if config["apiType"] == ApiType.REST.value:
        config["eventPath"] = form.get("eventPath") or ""

    elif config["apiType"] == ApiType.GRAPHQL.value:
        for key in ("operationName", "sha256Hash", "eventId", "authToken", "sessionCookies"):
            config[key] = form.get(key) or ""

        dynamic_params = (form.get("dynamicParams") or "").strip()
        if dynamic_params:
            config["dynamicParams"] = _parse_json_object(dynamic_params, "dynamic parameters")

        headers: dict[str, str] = {}
        if form.get("clientVersion"):
            headers.update({
                "x-client-version": form["clientVersion"],
                "x-client-platform": "Event App",
                "x-client-origin": target_domain,
            })
        if config["authToken"]:
            headers["authorization"] = config["authToken"]
        if headers:
            config["headers"] = headers

        config["extensions"] = {
            "persistedQuery": {"version": 1, "sha256Hash": config["sha256Hash"]}
        }

    custom_headers = (form.get("customHeaders") or "").strip()
    if custom_headers:
        parsed = _parse_json_object(custom_headers, "custom headers")
        config["headers"] = {**config.get("headers", {}), **parsed}

    return config
