"""Protocol for upstream signal collectors."""

from __future__ import annotations

from typing import Protocol

from moment_engine.models.domain import RawItem


class SignalCollector(Protocol):
    name: str

    async def collect(self) -> list[RawItem]: ...
