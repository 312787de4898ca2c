from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class EventType(str, Enum):
    STAGE_STARTED = "stage_started"
    RUN_STARTED = "run_started"
    ATTEMPT_STARTED = "attempt_started"
    RUN_COMPLETED = "run_completed"
    ANALYSIS_COMPLETE = "analysis_complete"
    ERROR = "error"


TERMINAL_EVENTS = frozenset({EventType.ANALYSIS_COMPLETE, EventType.ERROR})


@dataclass
class ProgressEvent:
    event: EventType
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def message(self) -> str:
        return str(self.data.get("message", ""))

    @property
    def is_terminal(self) -> bool:
        return self.event in TERMINAL_EVENTS

    def format(self) -> str:
        return f"event: {self.event.value}\ndata: {json.dumps(self.data)}\n\n"
