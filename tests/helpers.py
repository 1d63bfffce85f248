"""Fakes shared by the unit and property tests."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from profile_scraper.dispatch.request_builder import BuiltRequest
from profile_scraper.dispatch.transport import TransportOutcome


def graphql_document(person: dict) -> list[dict]:
    """Wrap a person payload the way the GraphQL endpoint returns it."""
    return [{"data": {"person": person}}]


def ok(document: Any) -> TransportOutcome:
    return TransportOutcome(success=True, response=document)


RATE_LIMITED = TransportOutcome(success=False, rate_limited=True, error="Rate limited")


def http_error(status: int = 500) -> TransportOutcome:
    return TransportOutcome(success=False, error=f"HTTP_{status}")


class ScriptedTransport:
    """Returns queued outcomes in order and records every request sent."""

    def __init__(self, outcomes: list[TransportOutcome] | None = None) -> None:
        self.outcomes = list(outcomes or [])
        self.requests: list[BuiltRequest] = []

    async def send(self, request: BuiltRequest) -> TransportOutcome:
        self.requests.append(request)
        if not self.outcomes:
            return TransportOutcome(success=False, error="No scripted outcome")
        return self.outcomes.pop(0)


class RecordingSleep:
    """Instant sleep that records durations and can run a hook per call."""

    def __init__(self, hook: Callable[[int, float], None] | None = None) -> None:
        self.calls: list[float] = []
        self._hook = hook

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
        if self._hook is not None:
            self._hook(len(self.calls), seconds)


class FakeExporter:
    def __init__(self) -> None:
        self.exports: list[list[dict]] = []

    def export(self, results: list[dict], timestamp: int) -> str:
        self.exports.append(list(results))
        return f"export-{timestamp}.json"
