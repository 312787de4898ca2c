from __future__ import annotations

from seoanalyzer.agents.orchestrator import AnalysisOrchestrator

_orchestrator: AnalysisOrchestrator | None = None


def get_orchestrator() -> AnalysisOrchestrator:
    """Process-wide orchestrator; it enforces one analysis at a time."""
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = AnalysisOrchestrator()
    return _orchestrator
