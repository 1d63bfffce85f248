"""Response normalization logic.

Transforms raw person payloads from the supported APIs into flat records
suitable for tabular export. Handles:
- Payload extraction from the raw JSON document per API type
- Core profile field projection (GraphQL and REST shapes)
- Social network columns (see ``social_links``)
- Dynamic GraphQL event fields, extracted by their ``__typename``
- Field-name sanitization for CSV-safe column names

Missing values resolve to ``None``. The only failure is a payload that is
missing altogether, reported as ``InvalidResponseShapeError``.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Mapping
from typing import Any

from profile_scraper.middleware.error_handler import InvalidResponseShapeError
from profile_scraper.models.api_config import ApiType
from profile_scraper.models.social_links import SOCIAL_COLUMNS, resolve_social_links

logger = logging.getLogger(__name__)

CORE_FIELDS: tuple[str, ...] = (
    "id",
    "userId",
    "firstName",
    "lastName",
    "jobTitle",
    "organization",
    "email",
    "websiteUrl",
    "mobilePhone",
    "landlinePhone",
    "photoUrl",
    "address",
)

# REST: flat record field -> (userProfile key, top-level fallback key)
_REST_FIELD_SOURCES: dict[str, tuple[str, str]] = {
    "firstName": ("firstName", "firstName"),
    "lastName": ("lastName", "lastName"),
    "jobTitle": ("jobTitle", "jobTitle"),
    "organization": ("company", "organization"),
    "email": ("email", "email"),
    "websiteUrl": ("website", "websiteUrl"),
    "mobilePhone": ("phone", "mobilePhone"),
    "photoUrl": ("avatar", "photoUrl"),
}

_FIELD_NAME_STRIP_RE = re.compile(r"[^\w\s-]", re.ASCII)
_WHITESPACE_RE = re.compile(r"\s+", re.ASCII)

CustomExtractor = Callable[[Any], dict[str, Any]]


def clean_field_name(name: str) -> str:
    """Keep word characters, whitespace and hyphens; collapse whitespace; trim."""
    stripped = _FIELD_NAME_STRIP_RE.sub("", name)
    return _WHITESPACE_RE.sub(" ", stripped).strip()


# ---------------------------------------------------------------------------
# Typed event field extraction
# ---------------------------------------------------------------------------


def _value_text(field: Mapping[str, Any]) -> Any:
    value = field.get("value")
    if isinstance(value, Mapping) and value.get("text"):
        return value["text"]
    return None


def _select_value(field: Mapping[str, Any]) -> Any:
    return _value_text(field)


def _multiple_select_values(field: Mapping[str, Any]) -> list[str] | None:
    values = field.get("values")
    if not isinstance(values, list):
        return None
    texts = [
        v["text"] for v in values if isinstance(v, Mapping) and v.get("text")
    ]
    # Empty selections export as an empty cell
    return texts or None


def _text_value(field: Mapping[str, Any]) -> Any:
    text = _value_text(field)
    if text is not None:
        return text
    value = field.get("value")
    return value if isinstance(value, str) else None


def _raw_value(field: Mapping[str, Any]) -> Any:
    return field.get("value")


def _generic_value(field: Mapping[str, Any]) -> Any:
    value = field.get("value")
    if not value:
        return None
    if isinstance(value, Mapping):
        return value.get("text") or None
    if isinstance(value, (list, tuple)):
        return None
    return value


FIELD_EXTRACTORS: dict[str, Callable[[Mapping[str, Any]], Any]] = {
    "Core_SelectField": _select_value,
    "Core_MultipleSelectField": _multiple_select_values,
    "Core_TextField": _text_value,
    "Core_NumberField": _raw_value,
    "Core_BooleanField": _raw_value,
    "Core_DateField": _raw_value,
}


def extract_event_field(field: Mapping[str, Any]) -> Any:
    """Extract a field's value using its ``__typename``, or the generic fallback."""
    extractor = FIELD_EXTRACTORS.get(field.get("__typename") or "", _generic_value)
    return extractor(field)


def process_event_fields(fields: Any) -> dict[str, Any]:
    """Flatten visible, named event fields into ``{clean name: value}``."""
    result: dict[str, Any] = {}
    if not isinstance(fields, list):
        return result

    for field in fields:
        if not isinstance(field, Mapping):
            continue
        if not field.get("name") or not field.get("isVisible"):
            continue
        name = clean_field_name(str(field["name"]))
        if not name:
            logger.debug("Skipping event field with unusable name %r", field["name"])
            continue
        result[name] = extract_event_field(field)

    return result


# ---------------------------------------------------------------------------
# Payload extraction
# ---------------------------------------------------------------------------


def _graphql_person(document: Any) -> Any:
    if isinstance(document, list):
        document = document[0] if document else None
    if not isinstance(document, Mapping):
        return None
    data = document.get("data")
    if not isinstance(data, Mapping):
        return None
    return data.get("person")


def extract_payload(
    document: Any,
    api_type: ApiType,
    data_extractor: Callable[[Any], Any] | None = None,
) -> Any:
    """Pull the person payload out of a raw API document.

    Raises
    ------
    InvalidResponseShapeError
        If no payload can be found.
    """
    if api_type == ApiType.GRAPHQL:
        payload = _graphql_person(document)
    elif api_type == ApiType.CUSTOM and data_extractor is not None:
        payload = data_extractor(document)
    else:
        payload = document

    if not payload:
        raise InvalidResponseShapeError()
    return payload


# ---------------------------------------------------------------------------
# Normalizer
# ---------------------------------------------------------------------------


def _scalar_fields(payload: Any) -> dict[str, Any]:
    if not isinstance(payload, Mapping):
        return {}
    return {
        key: value
        for key, value in payload.items()
        if value is not None and not isinstance(value, (Mapping, list, tuple))
    }


class ResponseNormalizer:
    """Transforms raw person payloads into flat records.

    Parameters
    ----------
    custom_extractor:
        Flattener for ``ApiType.CUSTOM`` payloads. Defaults to copying the
        payload's top-level scalar fields.
    """

    def __init__(self, custom_extractor: CustomExtractor | None = None) -> None:
        self._custom_extractor = custom_extractor or _scalar_fields

    def normalize(self, payload: Any, api_type: ApiType) -> dict[str, Any]:
        """Normalize a person payload into a flat record.

        Raises
        ------
        InvalidResponseShapeError
            If *payload* is empty, or is not a mapping for REST / GraphQL.
        """
        if not payload:
            raise InvalidResponseShapeError()

        if api_type == ApiType.CUSTOM:
            return dict(self._custom_extractor(payload))

        if not isinstance(payload, Mapping):
            raise InvalidResponseShapeError()

        if api_type == ApiType.GRAPHQL:
            return self._normalize_graphql(payload)
        return self._normalize_rest(payload)

    def _normalize_graphql(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        result: dict[str, Any] = {
            name: payload.get(name) or None for name in CORE_FIELDS
        }
        result.update(resolve_social_links(payload.get("socialNetworks")))

        with_event = payload.get("withEvent")
        if isinstance(with_event, Mapping) and with_event.get("fields"):
            result.update(process_event_fields(with_event["fields"]))

        return result

    def _normalize_rest(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        profile = payload.get("userProfile")
        if not isinstance(profile, Mapping):
            profile = {}

        result: dict[str, Any] = {
            "id": payload.get("userId") or payload.get("id") or None,
        }
        for name, (profile_key, top_level_key) in _REST_FIELD_SOURCES.items():
            result[name] = profile.get(profile_key) or payload.get(top_level_key) or None

        for key, value in _scalar_fields(profile).items():
            result.setdefault(key, value)

        for name in (*CORE_FIELDS, *SOCIAL_COLUMNS):
            result.setdefault(name, None)

        return result
