from __future__ import annotations

from typing import Any

from seoanalyzer.errors import AnalysisError
from seoanalyzer.models.analysis import AnalysisResult
from seoanalyzer.models.events import EventType, ProgressEvent


def stage_started(stage: str, message: str, **kwargs: Any) -> ProgressEvent:
    return ProgressEvent(
        event=EventType.STAGE_STARTED,
        data={"stage": stage, "message": message, **kwargs},
    )


def run_started(run_index: int, run_count: int) -> ProgressEvent:
    return ProgressEvent(
        event=EventType.RUN_STARTED,
        data={
            "run_index": run_index,
            "run_count": run_count,
            "message": f"Running analysis {run_index + 1} of {run_count}...",
        },
    )


def attempt_started(run_index: int, attempt_index: int, max_attempts: int) -> ProgressEvent:
    if attempt_index == 0:
        message = f"Asking the AI for analysis {run_index + 1}..."
    else:
        message = (
            f"Retrying analysis {run_index + 1} "
            f"(attempt {attempt_index + 1} of {max_attempts})..."
        )
    return ProgressEvent(
        event=EventType.ATTEMPT_STARTED,
        data={
            "run_index": run_index,
            "attempt_index": attempt_index,
            "max_attempts": max_attempts,
            "message": message,
        },
    )


def run_completed(run_index: int, run_count: int, score: float) -> ProgressEvent:
    return ProgressEvent(
        event=EventType.RUN_COMPLETED,
        data={
            "run_index": run_index,
            "run_count": run_count,
            "score": score,
            "message": f"Analysis {run_index + 1} of {run_count} complete...",
        },
    )


def analysis_complete(
    result: AnalysisResult,
    *,
    runs: int,
    runtime_ms: int | None = None,
) -> ProgressEvent:
    data: dict[str, Any] = {
        "result": result.to_public(),
        "runs": runs,
        "message": f"Your report is ready! Score: {result.score:g}/10",
    }
    if runtime_ms is not None:
        data["runtime_ms"] = runtime_ms
    return ProgressEvent(event=EventType.ANALYSIS_COMPLETE, data=data)


def error(exc: AnalysisError, message: str) -> ProgressEvent:
    return ProgressEvent(
        event=EventType.ERROR,
        data={
            "kind": exc.kind.value,
            "category": exc.category.value,
            "message": message,
        },
    )
