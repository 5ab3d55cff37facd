"""Protocol for write-once moment stores."""

from __future__ import annotations

from typing import Protocol

from moment_engine.models.domain import MomentRecord


class MomentStore(Protocol):
    async def get(self, moment_id: str) -> MomentRecord | None: ...

    async def put_if_absent(self, record: MomentRecord) -> bool:
        """Store the record unless the id is taken. True when this call wrote it."""
        ...

    async def contains(self, moment_id: str) -> bool: ...
