"""Collector that replays a fixed list of items (fixtures, scripts, tests)."""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path

from moment_engine.models.domain import RawItem
from moment_engine.models.schemas import to_raw_item


class StaticCollector:
    def __init__(self, items: Iterable[RawItem], name: str = "static") -> None:
        self.name = name
        self._items = list(items)

    @property
    def items(self) -> list[RawItem]:
        return list(self._items)

    async def collect(self) -> list[RawItem]:
        return list(self._items)

    @classmethod
    def from_json_file(cls, path: str | Path, name: str | None = None) -> StaticCollector:
        """Load a JSON array of raw item payloads (or {"items": [...]})."""
        p = Path(path)
        with open(p) as f:
            data = json.load(f)
        if isinstance(data, dict):
            data = data.get("items", [])
        items = [to_raw_item(d) for d in data if isinstance(d, dict)]
        return cls(items, name=name or p.stem)
