"""
Focus Scheduling Engine - History sources
Read-only access to a user's placed and completed time blocks
"""

import logging
from datetime import date
from typing import Dict, Iterable, List, Optional, Protocol

from .database import Database, fetch_time_blocks
from .models import TimeBlock

logger = logging.getLogger(__name__)


class HistorySource(Protocol):
    async def get_blocks(self, user_id: str, from_date: date, to_date: date) -> List[TimeBlock]:
        """Blocks dated from_date..to_date inclusive."""
        ...


class InMemoryHistorySource:
    """History kept in process memory (guest mode, tests, offline cache)."""

    def __init__(self, blocks_by_user: Optional[Dict[str, Iterable[TimeBlock]]] = None):
        self._blocks: Dict[str, List[TimeBlock]] = {
            user_id: list(blocks) for user_id, blocks in (blocks_by_user or {}).items()
        }

    def add(self, user_id: str, *blocks: TimeBlock) -> None:
        self._blocks.setdefault(user_id, []).extend(blocks)

    async def get_blocks(self, user_id: str, from_date: date, to_date: date) -> List[TimeBlock]:
        return [
            block.model_copy()
            for block in self._blocks.get(user_id, [])
            if from_date <= block.date <= to_date
        ]


class PostgresHistorySource:
    """History read from the ``time_blocks`` table."""

    def __init__(self, database: Database):
        self.database = database

    async def get_blocks(self, user_id: str, from_date: date, to_date: date) -> List[TimeBlock]:
        rows = await fetch_time_blocks(self.database, user_id, from_date, to_date)
        blocks = []
        for row in rows:
            row["start_minute"] = row.get("start_minute") or 0
            row["duration_minutes"] = row.get("duration_minutes") or 25
            blocks.append(TimeBlock.model_validate(row))
        logger.debug("Loaded %d blocks for %s (%s..%s)", len(blocks), user_id, from_date, to_date)
        return blocks
