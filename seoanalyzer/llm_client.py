"""Gemini generateContent client with bounded retry and exponential backoff."""
from __future__ import annotations

import asyncio
import json
import time
from typing import Any, Awaitable, Callable

import httpx
from loguru import logger
from pydantic import ValidationError

from seoanalyzer.config import settings
from seoanalyzer.errors import ApiExhausted, MalformedResponse, raise_if_cancelled
from seoanalyzer.models.analysis import AnalysisRequest, AnalysisResult
from seoanalyzer.services import logger as log_service

Sleeper = Callable[[float], Awaitable[Any]]
AttemptHook = Callable[[int], None]


class GeminiClient:
    """One analysis call = up to ``max_attempts`` sequential POSTs.

    - transport error (connect, timeout, ...): wait ``backoff_base ** i`` seconds,
      then try again
    - non-2xx status: try again immediately, unless ``backoff_on_http_error``
    - first 2xx ends the loop; its body must carry
      ``candidates[0].content.parts[0].text`` holding the result JSON
    """

    def __init__(
        self,
        *,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        max_attempts: int | None = None,
        backoff_base: float | None = None,
        backoff_on_http_error: bool | None = None,
        timeout: float | None = None,
        http_client: httpx.AsyncClient | None = None,
        sleep: Sleeper = asyncio.sleep,
    ):
        self.api_key = settings.gemini_api_key if api_key is None else api_key
        self.base_url = (base_url or settings.gemini_base_url).rstrip("/")
        self.model = model or settings.gemini_model
        self.max_attempts = max(int(max_attempts if max_attempts is not None else settings.gemini_max_attempts), 1)
        self.backoff_base = float(backoff_base if backoff_base is not None else settings.backoff_base)
        self.backoff_on_http_error = bool(
            settings.backoff_on_http_error if backoff_on_http_error is None else backoff_on_http_error
        )
        self.timeout = float(timeout if timeout is not None else settings.request_timeout_seconds)
        self._http_client = http_client
        self._sleep = sleep

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    def backoff_delay(self, attempt: int) -> float:
        return self.backoff_base ** attempt

    async def call(
        self,
        request: AnalysisRequest,
        *,
        on_attempt: AttemptHook | None = None,
        cancel: Any = None,
    ) -> AnalysisResult:
        payload = request.to_payload()
        if self._http_client is None:
            async with httpx.AsyncClient() as client:
                response = await self._post_with_retries(client, payload, on_attempt, cancel)
        else:
            response = await self._post_with_retries(self._http_client, payload, on_attempt, cancel)

        try:
            envelope = response.json()
        except ValueError as exc:
            raise MalformedResponse("API response was not valid JSON.") from exc
        return self.parse_result(self.extract_text(envelope))

    async def _post_with_retries(
        self,
        client: httpx.AsyncClient,
        payload: dict[str, Any],
        on_attempt: AttemptHook | None,
        cancel: Any,
    ) -> httpx.Response:
        last_status: int | None = None
        last_error: Exception | None = None

        for attempt in range(self.max_attempts):
            raise_if_cancelled(cancel, f"attempt {attempt + 1}")
            if on_attempt is not None:
                on_attempt(attempt)

            is_last = attempt == self.max_attempts - 1
            t0 = time.monotonic()
            try:
                response = await client.post(
                    self.endpoint,
                    params={"key": self.api_key},
                    json=payload,
                    headers={"Content-Type": "application/json"},
                    timeout=self.timeout,
                )
            except httpx.RequestError as exc:
                last_error = exc
                log_service.log_llm_call(
                    model=self.model,
                    caller="gemini",
                    attempt=attempt + 1,
                    duration_ms=int((time.monotonic() - t0) * 1000),
                    status="network_error",
                    error=str(exc) or type(exc).__name__,
                )
                if not is_last:
                    delay = self.backoff_delay(attempt)
                    logger.warning(f"API call failed, retrying in {delay:g}s... Attempt {attempt + 1}")
                    await self._sleep(delay)
                continue

            elapsed_ms = int((time.monotonic() - t0) * 1000)
            if response.is_success:
                log_service.log_llm_call(
                    model=self.model,
                    caller="gemini",
                    attempt=attempt + 1,
                    duration_ms=elapsed_ms,
                    status_code=response.status_code,
                )
                return response

            last_status = response.status_code
            log_service.log_llm_call(
                model=self.model,
                caller="gemini",
                attempt=attempt + 1,
                duration_ms=elapsed_ms,
                status="http_error",
                status_code=response.status_code,
                error=f"HTTP {response.status_code}",
            )
            if self.backoff_on_http_error and not is_last:
                await self._sleep(self.backoff_delay(attempt))

        detail = f"last status {last_status}" if last_status is not None else f"last error: {last_error}"
        raise ApiExhausted(
            f"API call failed after {self.max_attempts} attempts ({detail}).",
            attempts=self.max_attempts,
        )

    @staticmethod
    def extract_text(envelope: Any) -> str:
        try:
            text = envelope["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as exc:
            raise MalformedResponse("API response was not in the expected format.") from exc
        if not isinstance(text, str) or not text.strip():
            raise MalformedResponse("API response was not in the expected format.")
        return text

    @staticmethod
    def parse_result(text: str) -> AnalysisResult:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise MalformedResponse(f"API response text is not valid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise MalformedResponse("API response JSON is not an object.")
        try:
            return AnalysisResult.model_validate(data)
        except ValidationError as exc:
            raise MalformedResponse(f"API response is missing required fields: {exc.error_count()} error(s)") from exc


_client: GeminiClient | None = None


def client() -> GeminiClient:
    """Get or create the shared Gemini client."""
    global _client
    if _client is None:
        _client = GeminiClient()
    return _client
