"""Text normalization shared by clustering and every scorer."""

from __future__ import annotations

import re

from moment_engine.config.constants import MAX_TOKEN_LENGTH, MIN_TOKEN_LENGTH, STOPWORDS

_URL_RE = re.compile(r"https?://\S+")
_NON_TOKEN_RE = re.compile(r"[^a-z0-9\s-]")
_WS_RE = re.compile(r"\s+")


def stem(token: str) -> str:
    """Crude suffix stripper: -ing, -ed, -s, at most one of them."""
    if token.endswith("ing") and len(token) > 5:
        return token[:-3]
    if token.endswith("ed") and len(token) > 4:
        return token[:-2]
    if token.endswith("s") and len(token) > 4:
        return token[:-1]
    return token


def normalize(text: str) -> list[str]:
    """Tokenize text: lowercase, strip URLs and punctuation, drop stopwords, stem."""
    if not isinstance(text, str) or not text:
        return []
    text = text.lower()
    text = _URL_RE.sub(" ", text)
    text = _NON_TOKEN_RE.sub(" ", text)
    text = _WS_RE.sub(" ", text).strip()
    if not text:
        return []
    tokens = []
    for t in text.split(" "):
        if not MIN_TOKEN_LENGTH <= len(t) <= MAX_TOKEN_LENGTH:
            continue
        if t in STOPWORDS or not t.strip("-"):
            continue
        tokens.append(stem(t))
    return tokens


def token_set(text: str) -> list[str]:
    """Deduplicated tokens in first-seen order."""
    return list(dict.fromkeys(normalize(text)))
