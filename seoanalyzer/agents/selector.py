from __future__ import annotations

from typing import Sequence

from seoanalyzer.errors import NoResults
from seoanalyzer.models.analysis import AnalysisResult


def select_best(results: Sequence[AnalysisResult]) -> AnalysisResult:
    """Highest score wins; on a tie the earliest result is kept."""
    if not results:
        raise NoResults("No analysis results were produced.")
    best = results[0]
    for candidate in results[1:]:
        if candidate.score > best.score:
            best = candidate
    return best
