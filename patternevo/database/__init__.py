from patternevo.database.memory_pattern_repository import MemoryPatternRepository
from patternevo.database.pattern_repository import PatternRepository

__all__ = ["MemoryPatternRepository", "PatternRepository"]
