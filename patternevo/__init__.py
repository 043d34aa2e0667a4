from patternevo.database import MemoryPatternRepository, PatternRepository
from patternevo.events import EventBus, EventSink
from patternevo.evolution.engine import (
    EvolutionConfig,
    EvolutionResult,
    EvolutionStatus,
    EvolutionStrategy,
    PatternEvolutionEngine,
)
from patternevo.patterns import Pattern, PatternType

__all__ = [
    "EventBus",
    "EventSink",
    "EvolutionConfig",
    "EvolutionResult",
    "EvolutionStatus",
    "EvolutionStrategy",
    "MemoryPatternRepository",
    "Pattern",
    "PatternEvolutionEngine",
    "PatternRepository",
    "PatternType",
]
