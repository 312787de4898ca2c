from __future__ import annotations

from typing import Any

from pydantic import BaseModel


# --- Requests ---


class AnalyzeRequest(BaseModel):
    url: str


# --- Responses ---


class ErrorResponse(BaseModel):
    kind: str
    category: str
    message: str


class StateResponse(BaseModel):
    state: str
    busy: bool
    terminal: bool
    details: dict[str, Any] = {}
