"""Orchestration state machine.

Idle -> Fetching -> Extracting -> Running(run, attempt) -> Selecting
     -> Done(result) | Failed(kind)
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from seoanalyzer.errors import ErrorKind
from seoanalyzer.models.analysis import AnalysisResult


@dataclass(frozen=True, slots=True)
class Idle:
    name = "idle"


@dataclass(frozen=True, slots=True)
class Fetching:
    name = "fetching"


@dataclass(frozen=True, slots=True)
class Extracting:
    name = "extracting"


@dataclass(frozen=True, slots=True)
class Running:
    run_index: int
    attempt_index: int = 0
    name = "running"


@dataclass(frozen=True, slots=True)
class Selecting:
    name = "selecting"


@dataclass(frozen=True, slots=True)
class Done:
    result: AnalysisResult
    name = "done"


@dataclass(frozen=True, slots=True)
class Failed:
    kind: ErrorKind
    message: str = ""
    name = "failed"


OrchestrationState = Union[Idle, Fetching, Extracting, Running, Selecting, Done, Failed]


def is_terminal(state: OrchestrationState) -> bool:
    return isinstance(state, (Done, Failed))


def is_active(state: OrchestrationState) -> bool:
    return not isinstance(state, Idle) and not is_terminal(state)


def describe_state(state: OrchestrationState) -> dict[str, Any]:
    data: dict[str, Any] = {"state": state.name}
    if isinstance(state, Running):
        data["run_index"] = state.run_index
        data["attempt_index"] = state.attempt_index
    elif isinstance(state, Done):
        data["score"] = state.result.score
    elif isinstance(state, Failed):
        data["kind"] = state.kind.value
        data["message"] = state.message
    return data
