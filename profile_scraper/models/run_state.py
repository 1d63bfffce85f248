"""In-memory run state, scrape result shapes and the status snapshot model."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class RunPhase(str, Enum):
    """Lifecycle phase of the scrape loop."""

    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    STOPPED = "stopped"


@dataclass
class RunState:
    """Progress of a scrape run.

    ``current_index`` equals ``len(results)`` while running: exactly one
    result is appended per advance.
    """

    profile_data: list[dict] = field(default_factory=list)
    current_index: int = 0
    results: list[dict] = field(default_factory=list)
    is_running: bool = False
    is_paused: bool = False

    @property
    def total(self) -> int:
        return len(self.profile_data)

    @property
    def has_pending(self) -> bool:
        return self.current_index < len(self.profile_data)


def success_result(record: dict[str, Any], timestamp: int, index: int) -> dict[str, Any]:
    return {**record, "timestamp": timestamp, "index": index}


def error_result(person: dict, error: str, timestamp: int, index: int) -> dict[str, Any]:
    return {"inputData": person, "error": error, "timestamp": timestamp, "index": index}


def is_error_result(result: dict[str, Any]) -> bool:
    return bool(result.get("error"))


class StatusSnapshot(BaseModel):
    """Point-in-time view of the scraper, serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    is_running: bool
    is_paused: bool
    current_index: int
    total_profiles: int
    total_results: int
    success_count: int
    error_count: int
    api_config: dict[str, Any]

    @classmethod
    def from_state(cls, state: RunState, api_config: dict[str, Any]) -> StatusSnapshot:
        errors = sum(1 for r in state.results if is_error_result(r))
        return cls(
            is_running=state.is_running,
            is_paused=state.is_paused,
            current_index=state.current_index,
            total_profiles=state.total,
            total_results=len(state.results),
            success_count=len(state.results) - errors,
            error_count=errors,
            api_config=api_config,
        )

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)
