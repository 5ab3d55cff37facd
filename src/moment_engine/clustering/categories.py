"""Keyword-table category classification for raw items."""

from __future__ import annotations

import re
from urllib.parse import urlparse

from moment_engine.config.constants import DEFAULT_CATEGORY

# Checked in order; first match wins.
_CATEGORY_PATTERNS = [
    ("ai", re.compile(r"\b(ai|llm|gpt|model|agent|diffusion|transformer)\b")),
    ("security", re.compile(r"\b(security|jwt|oauth|vuln|cve|owasp|attack)\b")),
    ("data", re.compile(r"\b(database|postgres|mysql|sqlite|index|query)\b")),
    ("mobile", re.compile(r"\b(android|ios|iphone|pixel|mobile)\b")),
    ("web", re.compile(r"\b(chrome|browser|web|http|hls|css|react|next)\b")),
    ("devtools", re.compile(r"\b(devtools|cli|sdk|api|framework|library)\b")),
    ("startup", re.compile(r"\b(startup|founder|funding|yc|pricing|saas)\b")),
]


def hostname_from_url(url: str | None) -> str:
    if not url or not isinstance(url, str):
        return ""
    try:
        host = urlparse(url).hostname or ""
    except ValueError:
        return ""
    return host[4:] if host.startswith("www.") else host


def classify_category(title: str | None, url: str | None = None) -> str:
    text = f"{title or ''} {url or ''}".lower()
    for category, pattern in _CATEGORY_PATTERNS:
        if pattern.search(text):
            return category
    return DEFAULT_CATEGORY
