"""In-memory PatternRepository used by the runner and the test-suite.

Keeps every saved version of a pattern under its id. A single asyncio.Lock
guards the store; this is not meant for multi-process use.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone

from loguru import logger

from patternevo.database.pattern_repository import PatternRepository
from patternevo.events.event_bus import EventSink
from patternevo.patterns.pattern import Pattern


class MemoryPatternRepository(PatternRepository):
    """Dict-backed versioned storage."""

    def __init__(self, events: EventSink | None = None) -> None:
        # id -> versions, oldest first
        self._versions: dict[str, list[Pattern]] = {}
        self._events = events
        self._lock = asyncio.Lock()

    async def save_pattern(self, pattern: Pattern) -> None:
        stored = pattern.model_copy(
            update={"timestamp": datetime.now(timezone.utc)}, deep=True
        )
        async with self._lock:
            self._versions.setdefault(pattern.id, []).append(stored)
            version = len(self._versions[pattern.id])

        logger.debug(
            "[MemoryPatternRepository] Saved {} (version {})", pattern.id, version
        )
        if self._events is not None:
            self._events.emit("pattern:saved", stored)

    async def get_pattern(self, pattern_id: str) -> Pattern | None:
        async with self._lock:
            versions = self._versions.get(pattern_id)
            return versions[-1].model_copy(deep=True) if versions else None

    async def get_pattern_history(self, pattern_id: str) -> list[Pattern]:
        async with self._lock:
            return [p.model_copy(deep=True) for p in self._versions.get(pattern_id, [])]

    async def get_all_patterns(self) -> list[Pattern]:
        async with self._lock:
            return [
                versions[-1].model_copy(deep=True)
                for versions in self._versions.values()
                if versions
            ]
