from __future__ import annotations

import pytest

from seoanalyzer.agents import request_composer
from seoanalyzer.models.analysis import ExtractedContent
from seoanalyzer.services.prompt_store import render_prompt


def test_compose_appends_content_to_tutor_prompt():
    content = ExtractedContent(url="https://example.com", text="We bake sourdough bread daily. $5 loaves.")
    request = request_composer.compose(content)

    assert request.prompt.startswith("You are a friendly and knowledgeable AI SEO tutor")
    assert request.prompt.endswith("\n\nWebsite Content:\n\nWe bake sourdough bread daily. $5 loaves.")
    for area in request_composer.ANALYSIS_AREAS:
        assert area in request.prompt
    assert "1. Clarity and Conciseness" in request.prompt


def test_compose_builds_fresh_identical_requests():
    content = ExtractedContent(url="https://example.com", text="text " * 60)
    first = request_composer.compose(content)
    second = request_composer.compose(content)

    assert first == second
    assert first is not second


def test_response_schema_field_order():
    schema = request_composer.build_response_schema()
    assert schema["propertyOrdering"] == ["score", "summary", "analysis"]
    section = schema["properties"]["analysis"]["items"]
    assert section["propertyOrdering"] == ["title", "description", "actionableSteps"]
    assert section["properties"]["actionableSteps"]["items"] == {"type": "STRING"}


def test_payload_matches_generate_content_shape():
    request = request_composer.compose(ExtractedContent(url="https://example.com", text="hello"))
    payload = request.to_payload()

    assert payload["contents"] == [{"role": "user", "parts": [{"text": request.prompt}]}]
    assert payload["generationConfig"]["responseMimeType"] == "application/json"
    assert payload["generationConfig"]["responseSchema"]["type"] == "OBJECT"


def test_render_prompt_raises_for_unknown_key():
    with pytest.raises(KeyError):
        render_prompt("missing.prompt.key")


def test_render_prompt_raises_for_missing_value():
    with pytest.raises(KeyError, match="areas"):
        render_prompt("analysis.tutor_prompt")
