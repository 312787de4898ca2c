from __future__ import annotations

import re

from bs4 import BeautifulSoup

NON_VISIBLE_TAGS = ("script", "style", "noscript", "template", "head")


def collapse_whitespace(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


def truncate(text: str, max_chars: int) -> str:
    if max_chars <= 0 or len(text) <= max_chars:
        return text
    return text[:max_chars]


def html_to_text(raw_html: str) -> str:
    """Best-effort visible text from an HTML document.

    Never raises on malformed markup; returns "" when nothing is readable.
    """
    if not raw_html:
        return ""
    soup = BeautifulSoup(raw_html, "html.parser")
    for tag in soup(NON_VISIBLE_TAGS):
        tag.decompose()
    return collapse_whitespace(soup.get_text(" "))
