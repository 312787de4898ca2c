from __future__ import annotations

from typing import Any

from seoanalyzer.models.analysis import AnalysisRequest, ExtractedContent
from seoanalyzer.services.prompt_store import render_prompt

ANALYSIS_AREAS = (
    "Clarity and Conciseness",
    "Structure and Summarizability",
    "Direct Answer Format",
    "Entity and Authority",
    "Tone and Conversationality",
)

SECTION_FIELDS = ("title", "description", "actionableSteps")
RESULT_FIELDS = ("score", "summary", "analysis")


def build_response_schema() -> dict[str, Any]:
    """Structured-output contract in the reasoning service's schema dialect."""
    return {
        "type": "OBJECT",
        "properties": {
            "score": {"type": "NUMBER"},
            "summary": {"type": "STRING"},
            "analysis": {
                "type": "ARRAY",
                "items": {
                    "type": "OBJECT",
                    "properties": {
                        "title": {"type": "STRING"},
                        "description": {"type": "STRING"},
                        "actionableSteps": {
                            "type": "ARRAY",
                            "items": {"type": "STRING"},
                        },
                    },
                    "propertyOrdering": list(SECTION_FIELDS),
                },
            },
        },
        "propertyOrdering": list(RESULT_FIELDS),
    }


def build_prompt(content_text: str) -> str:
    areas = "\n".join(f"{idx}. {area}" for idx, area in enumerate(ANALYSIS_AREAS, 1))
    tutor_prompt = render_prompt("analysis.tutor_prompt", areas=areas)
    return render_prompt("analysis.content_block", prompt=tutor_prompt, content=content_text)


def compose(content: ExtractedContent) -> AnalysisRequest:
    """Build a fresh analysis request for the extracted page text."""
    return AnalysisRequest(
        prompt=build_prompt(content.text),
        response_schema=build_response_schema(),
    )
