from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field

from seoanalyzer.errors import ErrorKind


@dataclass(frozen=True, slots=True)
class AnalysisTarget:
    url: str

    @property
    def is_valid(self) -> bool:
        url = (self.url or "").strip()
        return bool(url) and url.startswith("http")


@dataclass(frozen=True, slots=True)
class ExtractedContent:
    url: str
    text: str
    raw_length: int = 0


@dataclass(frozen=True, slots=True)
class AnalysisRequest:
    """Prompt plus the structured-output contract sent to the reasoning service."""

    prompt: str
    response_schema: dict[str, Any] = field(default_factory=dict)

    def to_payload(self) -> dict[str, Any]:
        return {
            "contents": [{"role": "user", "parts": [{"text": self.prompt}]}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": self.response_schema,
            },
        }


class Section(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str
    description: str
    actionable_steps: list[str] = Field(default_factory=list, alias="actionableSteps")


class AnalysisResult(BaseModel):
    score: float
    summary: str
    analysis: list[Section]

    def to_public(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


@dataclass(frozen=True, slots=True)
class RunSuccess:
    run_index: int
    result: AnalysisResult


@dataclass(frozen=True, slots=True)
class RunFailure:
    run_index: int
    kind: ErrorKind
    message: str = ""


RunOutcome = Union[RunSuccess, RunFailure]
