from patternevo.patterns.pattern import (
    EvolutionSnapshot,
    Pattern,
    PatternMetrics,
    PatternType,
    clamp_unit,
)

__all__ = [
    "EvolutionSnapshot",
    "Pattern",
    "PatternMetrics",
    "PatternType",
    "clamp_unit",
]
