"""Outgoing request construction.

Builds URL, method, headers and body for one person record from the
declarative :class:`ApiConfig`. Nothing here touches the network; sending is
the transport's job.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

from profile_scraper.middleware.error_handler import RequestBuildError
from profile_scraper.models.api_config import DEFAULT_OPERATION_NAME, ApiConfig, ApiType

_ATTENDEE_ID_RE = re.compile(r"/attendees/([^?]+)")

BASE_HEADERS: dict[str, str] = {
    "accept": "application/json, text/plain, */*",
    "accept-language": "en-GB,en-US;q=0.9,en;q=0.8",
    "cache-control": "no-cache",
    "pragma": "no-cache",
}

GRAPHQL_DEFAULT_VARIABLES: dict[str, Any] = {
    "skipMeetings": False,
    "withEvent": True,
}


@dataclass(frozen=True)
class BuiltRequest:
    """A fully specified HTTP request, ready for the transport."""

    url: str
    method: str
    headers: dict[str, str] = field(default_factory=dict)
    body: Any = None


def origin_headers(target_domain: str | None) -> dict[str, str]:
    """``origin``/``referer`` for the site the session belongs to."""
    if not target_domain:
        return {}
    return {
        "origin": f"https://{target_domain}",
        "referer": f"https://{target_domain}/",
    }


def extract_user_id_from_url(url: Any) -> str | None:
    """Return the id in ``.../attendees/{id}?...``, if present."""
    if not isinstance(url, str) or not url:
        return None
    match = _ATTENDEE_ID_RE.search(url)
    return match.group(1) if match else None


def resolve_user_id(person: dict) -> str | None:
    """Find a user id in *person*: ``UserId``, ``userId``, then an attendee URL."""
    user_id = person.get("UserId") or person.get("userId")
    if user_id:
        return str(user_id)

    user_id = extract_user_id_from_url(person.get("User_url"))
    if user_id:
        return user_id

    for value in person.values():
        user_id = extract_user_id_from_url(value)
        if user_id:
            return user_id
    return None


def build_graphql_variables(config: ApiConfig, person: dict) -> dict[str, Any]:
    """Merge variables by priority: defaults < config < dynamic params < person ids."""
    variables: dict[str, Any] = dict(GRAPHQL_DEFAULT_VARIABLES)
    if config.event_id:
        variables["eventId"] = config.event_id
    variables.update(config.variables or {})
    variables.update(config.dynamic_params or {})

    person_id = person.get("personId") or person.get("id")
    if person_id is not None:
        variables["personId"] = person_id
    if person.get("userId") is not None:
        variables["userId"] = person["userId"]

    return variables


def _build_rest(config: ApiConfig, person: dict, headers: dict[str, str]) -> BuiltRequest:
    user_id = resolve_user_id(person)
    if user_id is None:
        raise RequestBuildError(person=person)

    url = (
        f"{config.endpoint}?userId={quote(user_id, safe='')}"
        f"&eventPath={quote(config.event_path or '', safe='')}"
    )
    return BuiltRequest(url=url, method="GET", headers=headers)


def _build_graphql(config: ApiConfig, person: dict, headers: dict[str, str]) -> BuiltRequest:
    headers["content-type"] = "application/json"
    if config.auth_token:
        headers["authorization"] = config.auth_token
    if config.session_cookies:
        headers["cookie"] = config.session_cookies

    extensions = config.extensions or {
        "persistedQuery": {"version": 1, "sha256Hash": config.sha256_hash}
    }
    body = [{
        "operationName": config.operation_name or DEFAULT_OPERATION_NAME,
        "variables": build_graphql_variables(config, person),
        "extensions": extensions,
    }]
    return BuiltRequest(url=config.endpoint, method="POST", headers=headers, body=body)


def _build_custom(config: ApiConfig, person: dict, headers: dict[str, str]) -> BuiltRequest:
    url = config.url_builder(config.endpoint, person) if config.url_builder else config.endpoint
    method = config.method.upper()
    body = None
    if config.body_builder and method != "GET":
        body = config.body_builder(person)
        headers["content-type"] = "application/json"
    return BuiltRequest(url=url, method=method, headers=headers, body=body)


_BUILDERS = {
    ApiType.REST: _build_rest,
    ApiType.GRAPHQL: _build_graphql,
    ApiType.CUSTOM: _build_custom,
}


def build_request(config: ApiConfig, person: dict) -> BuiltRequest:
    """Build the request that fetches *person* from the configured API.

    Raises
    ------
    RequestBuildError
        If a REST request has no resolvable user id.
    """
    headers = {**BASE_HEADERS, **origin_headers(config.target_domain), **config.headers}
    return _BUILDERS[config.api_type](config, person, headers)
