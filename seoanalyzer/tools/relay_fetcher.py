from __future__ import annotations

import httpx
from loguru import logger

from seoanalyzer.config import settings
from seoanalyzer.errors import ContentTooShort, FetchFailed
from seoanalyzer.models.analysis import AnalysisTarget, ExtractedContent
from seoanalyzer.tools import web_utils


def relay_url(target_url: str, relay_base: str | None = None) -> str:
    base = settings.relay_base_url if relay_base is None else relay_base
    base = (base or "").strip()
    if not base:
        return target_url
    return f"{base}{target_url}"


class RelayFetcher:
    """Fetches a page through the content relay and reduces it to plain text.

    API: GET <relay_base><target_url>
    A single request is made; there is no retry at this layer.
    """

    def __init__(
        self,
        *,
        relay_base: str | None = None,
        timeout: float | None = None,
        min_content_length: int | None = None,
        max_content_chars: int | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.relay_base = relay_base
        self.timeout = float(timeout if timeout is not None else settings.fetch_timeout_seconds)
        self.min_content_length = int(
            min_content_length if min_content_length is not None else settings.min_content_length
        )
        self.max_content_chars = int(
            max_content_chars if max_content_chars is not None else settings.max_content_chars
        )
        if 0 < self.max_content_chars < self.min_content_length:
            raise ValueError(
                f"max_content_chars ({self.max_content_chars}) must be 0 or at least "
                f"min_content_length ({self.min_content_length})"
            )
        self._http_client = http_client

    async def fetch_html(self, target: AnalysisTarget) -> str:
        url = relay_url(target.url, self.relay_base)
        logger.info(f"Fetching content from URL: {target.url} (via {url})")

        async def _do_request(client: httpx.AsyncClient) -> httpx.Response:
            return await client.get(
                url,
                headers={"User-Agent": settings.user_agent},
                timeout=self.timeout,
            )

        try:
            if self._http_client is None:
                async with httpx.AsyncClient(follow_redirects=True) as client:
                    response = await _do_request(client)
            else:
                response = await _do_request(self._http_client)
        except httpx.HTTPError as exc:
            raise FetchFailed(f"Failed to fetch content: {exc}") from exc

        if not response.is_success:
            raise FetchFailed(
                "Failed to fetch content. The proxy returned a "
                f"{response.status_code} status. The target website may be blocking access.",
                status_code=response.status_code,
            )
        return response.text

    async def fetch(self, target: AnalysisTarget) -> ExtractedContent:
        raw_html = await self.fetch_html(target)
        return self.extract(target, raw_html)

    def extract(self, target: AnalysisTarget, raw_html: str) -> ExtractedContent:
        text = web_utils.html_to_text(raw_html)
        logger.info(f"Extracted content length: {len(text)}")

        if len(text) < self.min_content_length:
            raise ContentTooShort(
                "Could not extract enough readable content from the URL. "
                "Please try a different URL, or one with more text content.",
                length=len(text),
            )

        return ExtractedContent(
            url=target.url,
            text=web_utils.truncate(text, self.max_content_chars),
            raw_length=len(raw_html),
        )
