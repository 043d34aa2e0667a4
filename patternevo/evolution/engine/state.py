from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from patternevo.evolution.engine.config import EvolutionConfig, EvolutionStrategy
from patternevo.evolution.engine.lineage import Generation, Lineage
from patternevo.evolution.engine.metrics import PatternEvolutionMetrics
from patternevo.evolution.mutation.base import Mutation
from patternevo.patterns.pattern import Pattern


class EvolutionStatus(str, Enum):
    """Lifecycle state of a PatternEvolutionEngine run."""

    IDLE = "idle"
    EVOLVING = "evolving"
    PAUSED = "paused"
    COMPLETED = "completed"
    FAILED = "failed"


ACTIVE_STATES = frozenset({EvolutionStatus.EVOLVING, EvolutionStatus.PAUSED})


class PatternEvolutionState(BaseModel):
    """Snapshot of an engine's run, as returned by ``get_state()``."""

    status: EvolutionStatus = EvolutionStatus.IDLE
    iteration: int = Field(default=0, ge=0, description="Completed loop iterations")
    current_generation: Generation | None = None
    lineage: Lineage | None = None
    config: EvolutionConfig
    strategy: EvolutionStrategy
    metrics: list[PatternEvolutionMetrics] = Field(default_factory=list)


class ResultMetrics(BaseModel):
    confidence: float = 0.0
    improvement: float = 0.0
    generation_number: int = 0


class EvolutionResult(BaseModel):
    success: bool
    new_pattern: Pattern | None = None
    mutation: Mutation | None = Field(
        default=None, description="Mutation that produced new_pattern, if any"
    )
    metrics: ResultMetrics = Field(default_factory=ResultMetrics)
    error: str | None = None
