from __future__ import annotations

from typing import Any, Callable

from loguru import logger

from seoanalyzer.config import settings
from seoanalyzer.errors import AnalysisError, raise_if_cancelled
from seoanalyzer.llm_client import GeminiClient
from seoanalyzer.models.analysis import (
    AnalysisRequest,
    AnalysisResult,
    RunFailure,
    RunOutcome,
    RunSuccess,
)

RequestBuilder = Callable[[], AnalysisRequest]


class RunCoordinator:
    """Runs the full analysis call ``run_count`` times, one after another.

    Every run gets a freshly composed request so the service's
    non-determinism can produce different scores. The first failed run
    aborts the rest and its error propagates unchanged.
    """

    def __init__(self, caller: GeminiClient, run_count: int | None = None):
        self.caller = caller
        self.run_count = max(int(run_count if run_count is not None else settings.analysis_runs), 1)
        self.outcomes: list[RunOutcome] = []

    async def run_all(
        self,
        build_request: RequestBuilder,
        *,
        on_run_start: Callable[[int], None] | None = None,
        on_attempt: Callable[[int, int], None] | None = None,
        on_run_complete: Callable[[int, AnalysisResult], None] | None = None,
        cancel: Any = None,
    ) -> list[AnalysisResult]:
        self.outcomes = []
        results: list[AnalysisResult] = []

        for run_index in range(self.run_count):
            raise_if_cancelled(cancel, f"run {run_index + 1}")
            if on_run_start is not None:
                on_run_start(run_index)

            def attempt_hook(attempt_index: int, _run: int = run_index) -> None:
                if on_attempt is not None:
                    on_attempt(_run, attempt_index)

            try:
                result = await self.caller.call(
                    build_request(),
                    on_attempt=attempt_hook,
                    cancel=cancel,
                )
            except AnalysisError as exc:
                self.outcomes.append(RunFailure(run_index=run_index, kind=exc.kind, message=exc.message))
                logger.warning(f"Analysis run {run_index + 1} of {self.run_count} failed: {exc.message}")
                raise

            self.outcomes.append(RunSuccess(run_index=run_index, result=result))
            results.append(result)
            logger.info(f"Analysis run {run_index + 1} of {self.run_count} scored {result.score:g}")
            if on_run_complete is not None:
                on_run_complete(run_index, result)

        return results
