from patternevo.evolution.strategies.crossover import (
    CrossoverOperator,
    MultiPointCrossover,
    SinglePointCrossover,
    UniformCrossover,
    build_crossover,
)
from patternevo.evolution.strategies.selectors import (
    ParentSelector,
    RankSelector,
    RouletteSelector,
    TournamentSelector,
    build_selector,
)

__all__ = [
    "CrossoverOperator",
    "MultiPointCrossover",
    "ParentSelector",
    "RankSelector",
    "RouletteSelector",
    "SinglePointCrossover",
    "TournamentSelector",
    "UniformCrossover",
    "build_crossover",
    "build_selector",
]
