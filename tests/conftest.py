from __future__ import annotations

import json
import os

os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.setdefault("GEMINI_API_KEY", "test-key")

import pytest  # noqa: E402


def result_payload(score: float, summary: str | None = None) -> dict:
    return {
        "score": score,
        "summary": summary or f"Summary for score {score}",
        "analysis": [
            {
                "title": "Clarity and Conciseness",
                "description": "Mostly clear.",
                "actionableSteps": ["Shorten intros", "Use plain words"],
            }
        ],
    }


def gemini_envelope(payload: dict | str) -> dict:
    text = payload if isinstance(payload, str) else json.dumps(payload)
    return {"candidates": [{"content": {"parts": [{"text": text}], "role": "model"}}]}


def page_html(text_length: int) -> str:
    body = ("word " * (text_length // 5 + 1))[:text_length].strip()
    body = body.ljust(text_length, "x")
    return f"<html><head><title>T</title><style>p{{color:red}}</style></head><body><p>{body}</p></body></html>"


@pytest.fixture
def recorded_sleeps():
    delays: list[float] = []

    async def fake_sleep(delay: float) -> None:
        delays.append(delay)

    fake_sleep.delays = delays
    return fake_sleep
