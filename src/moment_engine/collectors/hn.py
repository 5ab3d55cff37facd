"""Hacker News collector: newest story ids, then per-item hydration."""

from __future__ import annotations

import asyncio

import httpx

from moment_engine.clustering.categories import classify_category
from moment_engine.exceptions import CollectionError
from moment_engine.models.domain import RawItem
from moment_engine.observability.logger import get_logger

logger = get_logger("collectors.hn")

DEFAULT_BASE_URL = "https://hacker-news.firebaseio.com/v0"
MAX_LIMIT = 30
DEFAULT_CONCURRENCY = 10


def item_to_raw(d: dict) -> RawItem | None:
    """Map an HN item payload to a RawItem. Items without a title are dropped."""
    if not isinstance(d, dict):
        return None
    title = str(d.get("title") or "").strip()
    if not title:
        return None
    url = str(d["url"]) if d.get("url") else None
    score = d.get("score")
    created = d.get("time")
    return RawItem(
        source="hn",
        id=f"hn:{d.get('id')}",
        title=title,
        url=url,
        created_at=created * 1000 if isinstance(created, (int, float)) else None,
        category=classify_category(title, url),
        weight=float(score) if isinstance(score, (int, float)) else 0.0,
    )


class HackerNewsCollector:
    name = "hn"

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        limit: int = 20,
        timeout: float = 8.0,
        concurrency: int = DEFAULT_CONCURRENCY,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.limit = max(1, min(MAX_LIMIT, int(limit)))
        self.timeout = timeout
        self.concurrency = concurrency
        self._transport = transport

    async def _fetch_item(
        self, client: httpx.AsyncClient, item_id: int, semaphore: asyncio.Semaphore
    ) -> dict | None:
        async with semaphore:
            try:
                response = await client.get(f"/item/{item_id}.json")
                response.raise_for_status()
                return response.json()
            except (httpx.HTTPError, ValueError) as e:
                logger.warning("hn_item_fetch_failed", item_id=item_id, error=str(e))
                return None

    async def collect(self) -> list[RawItem]:
        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.timeout),
            transport=self._transport,
        ) as client:
            try:
                response = await client.get("/newstories.json")
                response.raise_for_status()
                ids = response.json()
            except httpx.TimeoutException as e:
                raise CollectionError(f"HN listing timed out: {e}") from e
            except (httpx.HTTPError, ValueError) as e:
                raise CollectionError(f"HN listing failed: {e}") from e

            if not isinstance(ids, list) or not ids:
                return []

            semaphore = asyncio.Semaphore(self.concurrency)
            payloads = await asyncio.gather(
                *(self._fetch_item(client, i, semaphore) for i in ids[: self.limit])
            )

        items = [r for r in (item_to_raw(p) for p in payloads if p) if r is not None]
        logger.info("hn_collected", requested=min(len(ids), self.limit), collected=len(items))
        return items
