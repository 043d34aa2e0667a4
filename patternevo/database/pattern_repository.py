from __future__ import annotations

from abc import ABC, abstractmethod

from patternevo.patterns.pattern import Pattern


class PatternRepository(ABC):
    """Abstract interface for persisting versioned :class:`Pattern` objects."""

    @abstractmethod
    async def save_pattern(self, pattern: Pattern) -> None:
        """Store *pattern* as the newest version of ``pattern.id``."""

    @abstractmethod
    async def get_pattern(self, pattern_id: str) -> Pattern | None:
        """Latest version of a pattern, or None if it was never saved."""

    @abstractmethod
    async def get_pattern_history(self, pattern_id: str) -> list[Pattern]:
        """All saved versions of a pattern, oldest first."""

    @abstractmethod
    async def get_all_patterns(self) -> list[Pattern]: ...
