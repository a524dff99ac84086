"""Per-collection record identifier sequences."""

import asyncio
import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


class IdSequence:
    """
    Hands out strictly increasing integer ids, one counter per table.

    A counter is seeded from MAX(id) + 1 the first time its table is used,
    then incremented in memory. The lock covers both the seeding query and
    the increment so concurrent coroutines never receive the same id.
    Counters are process-local; several processes writing to one database
    must not share a table.
    """

    def __init__(self):
        self._next: dict[str, int] = {}
        self._lock = asyncio.Lock()

    async def next_id(self, db: AsyncSession, model) -> int:
        """Reserve the next id for the model's table."""
        table = model.__tablename__
        async with self._lock:
            if table not in self._next:
                current = (await db.execute(select(func.max(model.id)))).scalar()
                self._next[table] = (current or 0) + 1
                logger.debug(f"Seeded id sequence for {table} at {self._next[table]}")
            record_id = self._next[table]
            self._next[table] = record_id + 1
        return record_id
