from __future__ import annotations

from patternevo.evolution.engine.config import (
    CrossoverStrategy,
    EvolutionConfig,
    EvolutionStrategy,
    MutationStrategy,
    OptimizationWeights,
    SelectionStrategy,
    StrategyParameters,
)
from patternevo.evolution.engine.core import PatternEvolutionEngine
from patternevo.evolution.engine.fitness import FitnessEvaluator, PatternFitness
from patternevo.evolution.engine.lineage import Generation, Lineage, LineageTracker
from patternevo.evolution.engine.metrics import (
    METRICS_EVENT,
    MetricsRecorder,
    PatternEvolutionMetrics,
)
from patternevo.evolution.engine.state import (
    EvolutionResult,
    EvolutionStatus,
    PatternEvolutionState,
)
