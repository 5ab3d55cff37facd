"""In-memory write-once moment store. First write wins; no update, no delete."""

from __future__ import annotations

import asyncio

from moment_engine.exceptions import StoreError
from moment_engine.models.domain import MomentRecord
from moment_engine.observability.logger import get_logger

logger = get_logger("memory_store")


class InMemoryMomentStore:
    def __init__(self) -> None:
        self._records: dict[str, MomentRecord] = {}
        self._lock = asyncio.Lock()

    async def get(self, moment_id: str) -> MomentRecord | None:
        if not moment_id:
            return None
        return self._records.get(moment_id)

    async def put_if_absent(self, record: MomentRecord) -> bool:
        if not record.moment_id:
            raise StoreError("moment record has no moment_id")
        async with self._lock:
            if record.moment_id in self._records:
                logger.debug("moment_already_stored", moment_id=record.moment_id)
                return False
            self._records[record.moment_id] = record
        logger.info("moment_stored", moment_id=record.moment_id, name=record.name)
        return True

    async def contains(self, moment_id: str) -> bool:
        return bool(moment_id) and moment_id in self._records

    def __len__(self) -> int:
        return len(self._records)
