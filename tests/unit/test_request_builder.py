"""Unit tests for outgoing request construction."""

from __future__ import annotations

import pytest

from profile_scraper.config.site_presets import BUILTIN_PRESETS
from profile_scraper.dispatch.request_builder import (
    BASE_HEADERS,
    build_graphql_variables,
    build_request,
    extract_user_id_from_url,
    resolve_user_id,
)
from profile_scraper.middleware.error_handler import RequestBuildError
from profile_scraper.models.api_config import ApiConfig, ApiType, merge_api_config


# ---------------------------------------------------------------------------
# User id resolution
# ---------------------------------------------------------------------------


class TestResolveUserId:
    def test_prefers_capitalized_user_id(self):
        assert resolve_user_id({"UserId": "A1", "userId": "B2"}) == "A1"

    def test_falls_back_to_user_id(self):
        assert resolve_user_id({"userId": "B2"}) == "B2"

    def test_numeric_id_is_stringified(self):
        assert resolve_user_id({"userId": 42}) == "42"

    def test_extracts_from_user_url(self):
        person = {"User_url": "https://sbcconnect.com/event/x/attendees/abc123?tab=info"}
        assert resolve_user_id(person) == "abc123"

    def test_extracts_from_any_url_field(self):
        person = {"profile_link": "https://sbcconnect.com/attendees/zz9"}
        assert resolve_user_id(person) == "zz9"

    def test_empty_user_id_falls_through(self):
        person = {"UserId": "", "User_url": "https://x.com/attendees/from-url"}
        assert resolve_user_id(person) == "from-url"

    def test_none_when_unresolvable(self):
        assert resolve_user_id({"profileId": "a"}) is None


class TestExtractUserIdFromUrl:
    def test_stops_at_query_string(self):
        assert extract_user_id_from_url("/attendees/u-1?x=1") == "u-1"

    def test_non_string(self):
        assert extract_user_id_from_url(None) is None
        assert extract_user_id_from_url(123) is None

    def test_no_match(self):
        assert extract_user_id_from_url("https://example.com/people/1") is None


# ---------------------------------------------------------------------------
# REST
# ---------------------------------------------------------------------------


class TestRestRequest:
    def test_builds_get_with_query(self, rest_config: ApiConfig):
        request = build_request(rest_config, {"userId": "u1"})

        assert request.method == "GET"
        assert request.url == (
            "https://sbcconnect.com/api/user/getById"
            "?userId=u1&eventPath=casinobeats-summit-2025"
        )
        assert request.body is None

    def test_missing_event_path_is_empty(self):
        config = ApiConfig(api_type=ApiType.REST, endpoint="https://x.test/api")
        request = build_request(config, {"userId": "u1"})
        assert request.url == "https://x.test/api?userId=u1&eventPath="

    def test_unresolvable_id_raises(self, rest_config: ApiConfig):
        with pytest.raises(RequestBuildError):
            build_request(rest_config, {"profileId": "nope"})

    def test_base_headers_and_config_headers(self):
        config = ApiConfig(
            api_type=ApiType.REST,
            endpoint="https://x.test/api",
            headers={"x-custom": "1", "accept": "application/json"},
        )
        request = build_request(config, {"userId": "u1"})

        assert request.headers["x-custom"] == "1"
        assert request.headers["accept"] == "application/json"
        assert request.headers["cache-control"] == BASE_HEADERS["cache-control"]

    def test_origin_follows_target_domain(self, rest_config: ApiConfig):
        switched = merge_api_config(
            rest_config, {"targetDomain": "event.igblive.com"}, BUILTIN_PRESETS
        )

        before = build_request(rest_config, {"userId": "u1"})
        after = build_request(switched, {"personId": "p1"})

        assert before.headers["origin"] == "https://sbcconnect.com"
        assert after.headers["origin"] == "https://event.igblive.com"
        assert after.headers["referer"] == "https://event.igblive.com/"

    def test_no_origin_without_target_domain(self):
        config = ApiConfig(api_type=ApiType.REST, endpoint="https://x.test/api")
        assert "origin" not in build_request(config, {"userId": "u1"}).headers


# ---------------------------------------------------------------------------
# GraphQL
# ---------------------------------------------------------------------------


class TestGraphqlRequest:
    def test_builds_persisted_query_body(self, graphql_config: ApiConfig):
        request = build_request(graphql_config, {"personId": "P1", "userId": "U1"})

        assert request.method == "POST"
        assert request.url == "https://event.igblive.com/api/graphql"
        assert request.headers["content-type"] == "application/json"
        assert isinstance(request.body, list) and len(request.body) == 1

        entry = request.body[0]
        assert entry["operationName"] == "EventPersonDetailsQuery"
        assert entry["variables"]["personId"] == "P1"
        assert entry["variables"]["userId"] == "U1"
        assert entry["variables"]["eventId"] == "RXZlbnRfMjYxMTQwMQ=="
        assert entry["extensions"]["persistedQuery"]["sha256Hash"] == graphql_config.sha256_hash

    def test_default_extensions_from_hash(self):
        config = ApiConfig(api_type=ApiType.GRAPHQL, endpoint="https://g.test", sha256_hash="abc")
        request = build_request(config, {"id": "P9"})

        assert request.body[0]["extensions"] == {
            "persistedQuery": {"version": 1, "sha256Hash": "abc"}
        }
        assert request.body[0]["variables"]["personId"] == "P9"

    def test_auth_and_cookie_only_when_configured(self):
        bare = ApiConfig(api_type=ApiType.GRAPHQL, endpoint="https://g.test")
        request = build_request(bare, {"personId": "P"})
        assert "authorization" not in request.headers
        assert "cookie" not in request.headers

        authed = bare.model_copy(update={"auth_token": "Bearer t", "session_cookies": "sid=1"})
        request = build_request(authed, {"personId": "P"})
        assert request.headers["authorization"] == "Bearer t"
        assert request.headers["cookie"] == "sid=1"


class TestGraphqlVariables:
    def test_defaults(self):
        config = ApiConfig(api_type=ApiType.GRAPHQL, endpoint="https://g.test")
        variables = build_graphql_variables(config, {})
        assert variables == {"skipMeetings": False, "withEvent": True}

    def test_priority_order(self):
        config = ApiConfig(
            api_type=ApiType.GRAPHQL,
            endpoint="https://g.test",
            variables={"withEvent": False, "locale": "en", "page": 1, "personId": "cfg"},
            dynamic_params={"locale": "de", "personId": "dyn"},
        )
        variables = build_graphql_variables(config, {"personId": "person"})

        assert variables["withEvent"] is False  # config beats defaults
        assert variables["locale"] == "de"  # dynamic params beat config
        assert variables["page"] == 1
        assert variables["personId"] == "person"  # person record beats everything

    def test_person_without_ids_keeps_lower_layers(self):
        config = ApiConfig(
            api_type=ApiType.GRAPHQL,
            endpoint="https://g.test",
            dynamic_params={"userId": "dyn-user"},
        )
        variables = build_graphql_variables(config, {"profileId": "x"})
        assert variables["userId"] == "dyn-user"
        assert "personId" not in variables


# ---------------------------------------------------------------------------
# CUSTOM
# ---------------------------------------------------------------------------


class TestCustomRequest:
    def test_uses_injected_builders(self):
        config = ApiConfig(
            api_type=ApiType.CUSTOM,
            endpoint="https://c.test/people",
            method="post",
            url_builder=lambda endpoint, person: f"{endpoint}/{person['id']}",
            body_builder=lambda person: {"lookup": person["id"]},
        )
        request = build_request(config, {"id": "7"})

        assert request.url == "https://c.test/people/7"
        assert request.method == "POST"
        assert request.body == {"lookup": "7"}
        assert request.headers["content-type"] == "application/json"

    def test_get_never_has_body(self):
        config = ApiConfig(
            api_type=ApiType.CUSTOM,
            endpoint="https://c.test/people",
            body_builder=lambda person: {"ignored": True},
        )
        request = build_request(config, {"id": "7"})

        assert request.url == "https://c.test/people"
        assert request.body is None
