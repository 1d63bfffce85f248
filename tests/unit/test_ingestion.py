"""Unit tests for profile list ingestion."""

import pytest

from profile_scraper.middleware.error_handler import MalformedProfileInputError
from profile_scraper.services.ingestion import (
    coerce_profile_list,
    parse_csv_profiles,
    parse_json_profiles,
    parse_profiles,
    parse_text_profiles,
)


class TestCoerceProfileList:
    def test_array(self):
        assert coerce_profile_list([{"a": 1}]) == [{"a": 1}]

    def test_profiles_key(self):
        assert coerce_profile_list({"profiles": [{"a": 1}]}) == [{"a": 1}]

    def test_data_key(self):
        assert coerce_profile_list({"data": [{"a": 1}]}) == [{"a": 1}]

    def test_profiles_key_wins_over_data(self):
        assert coerce_profile_list({"profiles": [{"p": 1}], "data": [{"d": 1}]}) == [{"p": 1}]

    def test_empty_list_is_valid(self):
        assert coerce_profile_list([]) == []

    @pytest.mark.parametrize("data", [None, "text", 42, {"items": []}, {"profiles": "x"}])
    def test_rejects_unrecognized(self, data):
        with pytest.raises(MalformedProfileInputError) as exc_info:
            coerce_profile_list(data)
        assert "Expected array" in exc_info.value.message

    def test_rejects_non_object_entries(self):
        with pytest.raises(MalformedProfileInputError):
            coerce_profile_list([{"a": 1}, "b"])


class TestParsers:
    def test_json(self):
        assert parse_json_profiles('{"profiles": [{"userId": "1"}]}') == [{"userId": "1"}]

    def test_json_invalid(self):
        with pytest.raises(MalformedProfileInputError, match="Invalid JSON"):
            parse_json_profiles("[{")

    def test_csv(self):
        text = "UserId, Name\nu1, Ann\n\nu2\n"
        assert parse_csv_profiles(text) == [
            {"UserId": "u1", "Name": "Ann"},
            {"UserId": "u2", "Name": ""},
        ]

    def test_csv_quoted_commas(self):
        text = 'userId,company\nu1,"Acme, Inc."\n'
        assert parse_csv_profiles(text) == [{"userId": "u1", "company": "Acme, Inc."}]

    def test_csv_empty(self):
        assert parse_csv_profiles("\n\n") == []

    def test_text(self):
        assert parse_text_profiles(" a \n\nb\r\n") == [{"profileId": "a"}, {"profileId": "b"}]

    @pytest.mark.parametrize(
        ("filename", "text", "expected"),
        [
            ("people.JSON", '[{"x": 1}]', [{"x": 1}]),
            ("people.csv", "x\n1", [{"x": "1"}]),
            ("people.txt", "1", [{"profileId": "1"}]),
            ("people", "1", [{"profileId": "1"}]),
        ],
    )
    def test_dispatch_by_extension(self, filename, text, expected):
        assert parse_profiles(text, filename) == expected
