from __future__ import annotations

import json

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sse_starlette.sse import EventSourceResponse

from seoanalyzer.agents.orchestrator import AnalysisOrchestrator, describe_error
from seoanalyzer.api.deps import get_orchestrator
from seoanalyzer.errors import AnalysisError, ErrorCategory, OrchestrationBusy
from seoanalyzer.models.schemas import AnalyzeRequest, ErrorResponse, StateResponse
from seoanalyzer.services import logger as log_service

router = APIRouter(prefix="/api/analyze", tags=["analyze"])

STATUS_BY_CATEGORY = {
    ErrorCategory.INPUT: 400,
    ErrorCategory.RETRYABLE: 502,
    ErrorCategory.UNEXPECTED: 500,
    ErrorCategory.CANCELLED: 499,
}


def _error_response(exc: AnalysisError) -> JSONResponse:
    body = ErrorResponse(
        kind=exc.kind.value,
        category=exc.category.value,
        message=describe_error(exc),
    )
    return JSONResponse(status_code=STATUS_BY_CATEGORY[exc.category], content=body.model_dump())


def _busy_response(exc: OrchestrationBusy) -> JSONResponse:
    body = ErrorResponse(kind="busy", category="busy", message=str(exc))
    return JSONResponse(status_code=409, content=body.model_dump())


@router.post("")
async def analyze(
    request: AnalyzeRequest,
    orchestrator: AnalysisOrchestrator = Depends(get_orchestrator),
):
    """Run one analysis and return the best-scored report."""
    try:
        result = await orchestrator.run(request.url)
    except OrchestrationBusy as exc:
        return _busy_response(exc)
    except AnalysisError as exc:
        return _error_response(exc)
    return result.to_public()


@router.get("/stream")
async def analyze_stream(
    url: str = Query(..., description="Page to analyze"),
    orchestrator: AnalysisOrchestrator = Depends(get_orchestrator),
):
    """SSE endpoint that streams progress events, ending with the report or an error."""
    try:
        events = orchestrator.analyze(url)
    except OrchestrationBusy as exc:
        return _busy_response(exc)

    async def event_generator():
        async for event in events:
            log_service.log_event(event.event.value, event.message, url=url)
            yield {"event": event.event.value, "data": json.dumps(event.data)}

    return EventSourceResponse(event_generator())


@router.get("/state", response_model=StateResponse)
async def analysis_state(orchestrator: AnalysisOrchestrator = Depends(get_orchestrator)):
    """Current orchestration state; the UI disables re-submission while busy."""
    snapshot = orchestrator.snapshot()
    return StateResponse(
        state=snapshot.pop("state"),
        busy=snapshot.pop("busy"),
        terminal=snapshot.pop("terminal"),
        details=snapshot,
    )
