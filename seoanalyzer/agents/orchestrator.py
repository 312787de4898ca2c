from __future__ import annotations

import asyncio
import time
from typing import Any, AsyncGenerator, AsyncIterator, Callable

from loguru import logger

from seoanalyzer.agents import request_composer
from seoanalyzer.agents.run_coordinator import RunCoordinator
from seoanalyzer.agents.selector import select_best
from seoanalyzer.errors import (
    AnalysisError,
    ErrorKind,
    InvalidTarget,
    MalformedResponse,
    OrchestrationBusy,
    raise_if_cancelled,
)
from seoanalyzer.llm_client import GeminiClient, client as llm_client
from seoanalyzer.models.analysis import AnalysisResult, AnalysisTarget
from seoanalyzer.models.events import ProgressEvent
from seoanalyzer.models.state import (
    Done,
    Extracting,
    Failed,
    Fetching,
    Idle,
    OrchestrationState,
    Running,
    Selecting,
    describe_state,
    is_active,
    is_terminal,
)
from seoanalyzer.services import logger as log_service
from seoanalyzer.services import streaming
from seoanalyzer.tools.relay_fetcher import RelayFetcher

ProgressCallback = Callable[[ProgressEvent], None]


class _LinkedCancel:
    """Cancel token for one stream, also set whenever the caller's token is."""

    def __init__(self, outer: Any = None):
        self._outer = outer
        self._event = asyncio.Event()

    def set(self) -> None:
        self._event.set()

    def is_set(self) -> bool:
        return self._event.is_set() or (self._outer is not None and self._outer.is_set())


ERROR_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.INVALID_TARGET: "Please enter a valid URL (starting with http or https).",
    ErrorKind.FETCH_FAILED: "We couldn't fetch your website. The site may be blocking access; please try again in a moment.",
    ErrorKind.CONTENT_TOO_SHORT: "Could not extract enough readable content from the URL. Please try a different URL, or one with more text content.",
    ErrorKind.API_EXHAUSTED: "The AI service didn't respond after several tries. Please try again in a moment.",
    ErrorKind.MALFORMED_RESPONSE: "An unexpected error occurred: the AI service returned a response we couldn't read.",
    ErrorKind.NO_RESULTS: "An unexpected error occurred: no analysis results were produced.",
    ErrorKind.CANCELLED: "The analysis was cancelled.",
}


def describe_error(exc: AnalysisError) -> str:
    """User-facing message for an error kind, with the component detail appended."""
    base = ERROR_MESSAGES[exc.kind]
    if exc.message and exc.message != exc.kind.value and exc.message not in base:
        return f"{base} ({exc.message})"
    return base


class AnalysisOrchestrator:
    """Sequences the whole analysis for one URL.

    Flow:
      1. Validate the target URL
      2. Fetch the page through the relay
      3. Extract readable text
      4. Run the scored analysis ``run_count`` times (each with retries)
      5. Keep the highest-scored result

    Only one analysis may be in flight per orchestrator. Progress is reported
    as ProgressEvents, and exactly one terminal event (complete or error) is
    emitted per invocation.
    """

    def __init__(
        self,
        *,
        fetcher: RelayFetcher | None = None,
        caller: GeminiClient | None = None,
        run_count: int | None = None,
    ):
        self.fetcher = fetcher or RelayFetcher()
        self.caller = caller or llm_client()
        self.coordinator = RunCoordinator(self.caller, run_count=run_count)
        self._state: OrchestrationState = Idle()
        self._emit_callback: ProgressCallback | None = None
        self._closed = True
        self._in_flight = False

    @property
    def state(self) -> OrchestrationState:
        return self._state

    @property
    def busy(self) -> bool:
        return self._in_flight or is_active(self._state)

    def reset(self) -> None:
        if self.busy:
            raise OrchestrationBusy("Cannot reset while an analysis is running.")
        self._state = Idle()

    def _set_state(self, state: OrchestrationState) -> None:
        logger.debug(f"Orchestration state: {self._state.name} -> {state.name}")
        self._state = state

    def _emit(self, event: ProgressEvent) -> None:
        if self._closed or self._emit_callback is None:
            return
        if event.is_terminal:
            self._closed = True
        self._emit_callback(event)

    def _begin(self, on_progress: ProgressCallback | None) -> None:
        if self.busy:
            raise OrchestrationBusy("An analysis is already running. Please wait for it to finish.")
        self._state = Idle()
        self._emit_callback = on_progress
        self._closed = False
        self._in_flight = True

    async def run(
        self,
        url: str,
        *,
        on_progress: ProgressCallback | None = None,
        cancel: Any = None,
    ) -> AnalysisResult:
        """Analyze ``url`` and return the best result, or raise AnalysisError."""
        self._begin(on_progress)
        return await self._run_begun(url, cancel)

    async def _run_begun(self, url: str, cancel: Any) -> AnalysisResult:
        started = time.monotonic()
        target = AnalysisTarget(url=(url or "").strip())
        try:
            result = await self._execute(target, cancel)
            runtime_ms = int((time.monotonic() - started) * 1000)
            self._set_state(Done(result=result))
        except AnalysisError as exc:
            self._fail(target, exc)
            raise
        except Exception as exc:
            logger.exception(f"Analysis failed with unexpected error: {exc}")
            wrapped = MalformedResponse()
            self._fail(target, wrapped)
            raise wrapped from exc
        except asyncio.CancelledError:
            # task cancellation still leaves a terminal state behind
            self._abandon()
            raise
        finally:
            self._in_flight = False

        log_service.log_analysis_step(target.url, "analysis", "complete", {"score": result.score, "runtime_ms": runtime_ms})
        self._emit(streaming.analysis_complete(result, runs=self.coordinator.run_count, runtime_ms=runtime_ms))
        return result

    def _abandon(self) -> None:
        if not is_terminal(self._state):
            self._set_state(Failed(kind=ErrorKind.CANCELLED, message=ERROR_MESSAGES[ErrorKind.CANCELLED]))
        self._closed = True
        self._in_flight = False

    def _fail(self, target: AnalysisTarget, exc: AnalysisError) -> None:
        message = describe_error(exc)
        self._set_state(Failed(kind=exc.kind, message=message))
        log_service.log_analysis_step(target.url, "analysis", "failed", {"kind": exc.kind.value, "detail": exc.message})
        self._emit(streaming.error(exc, message))

    async def _execute(self, target: AnalysisTarget, cancel: Any) -> AnalysisResult:
        if not target.is_valid:
            raise InvalidTarget(f"Not an http(s) URL: {target.url!r}")

        raise_if_cancelled(cancel, "fetching")
        self._set_state(Fetching())
        self._emit(streaming.stage_started("fetching", "Fetching your website..."))
        raw_html = await self.fetcher.fetch_html(target)

        self._set_state(Extracting())
        self._emit(streaming.stage_started("extracting", "Reading your content..."))
        content = self.fetcher.extract(target, raw_html)
        log_service.log_analysis_step(target.url, "extract", "complete", {"chars": len(content.text)})

        run_count = self.coordinator.run_count
        self._emit(
            streaming.stage_started(
                "analyzing",
                f"Running {run_count} analyses for a more stable score...",
                run_count=run_count,
            )
        )

        def on_run_start(run_index: int) -> None:
            self._set_state(Running(run_index=run_index, attempt_index=0))
            self._emit(streaming.run_started(run_index, run_count))

        def on_attempt(run_index: int, attempt_index: int) -> None:
            self._set_state(Running(run_index=run_index, attempt_index=attempt_index))
            self._emit(streaming.attempt_started(run_index, attempt_index, self.caller.max_attempts))

        def on_run_complete(run_index: int, result: AnalysisResult) -> None:
            self._emit(streaming.run_completed(run_index, run_count, result.score))

        results = await self.coordinator.run_all(
            lambda: request_composer.compose(content),
            on_run_start=on_run_start,
            on_attempt=on_attempt,
            on_run_complete=on_run_complete,
            cancel=cancel,
        )

        self._set_state(Selecting())
        self._emit(streaming.stage_started("selecting", "Picking the best of your reports..."))
        return select_best(results)

    def analyze(self, url: str, *, cancel: Any = None) -> AsyncIterator[ProgressEvent]:
        """Claim the orchestrator and stream progress events for one analysis.

        The slot is taken and the work started before this returns, so a
        concurrent ``run`` or ``analyze`` is rejected with OrchestrationBusy
        here rather than once the stream is first iterated. The last event
        yielded is always terminal.
        """
        queue: asyncio.Queue[ProgressEvent] = asyncio.Queue()
        stop = _LinkedCancel(cancel)
        self._begin(queue.put_nowait)

        async def worker() -> None:
            try:
                await self._run_begun(url, stop)
            except AnalysisError:
                pass  # already reported as the terminal error event

        try:
            task = asyncio.create_task(worker())
        except RuntimeError:
            self._abandon()
            raise
        return self._drain(queue, task, stop)

    async def _drain(
        self,
        queue: asyncio.Queue[ProgressEvent],
        task: asyncio.Task,
        stop: _LinkedCancel,
    ) -> AsyncGenerator[ProgressEvent, None]:
        try:
            while True:
                event = await queue.get()
                yield event
                if event.is_terminal:
                    break
            await task
        finally:
            if not task.done():
                stop.set()
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
            if self._in_flight:
                self._abandon()

    def snapshot(self) -> dict[str, Any]:
        data = describe_state(self._state)
        data["busy"] = self.busy
        data["terminal"] = is_terminal(self._state)
        return data
