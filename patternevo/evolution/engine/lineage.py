from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone
import uuid

import numpy as np
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from patternevo.evolution.engine.config import OptimizationWeights
from patternevo.evolution.engine.fitness import PatternFitness
from patternevo.evolution.mutation.base import Mutation
from patternevo.evolution.strategies.utils import confidence_diversity
from patternevo.patterns.pattern import Pattern


class GenerationMetrics(BaseModel):
    average_confidence: float = 0.0
    best_confidence: float = 0.0
    diversity: float = Field(default=0.0, description="Std. dev. of confidence")
    generation_number: int = Field(default=0, ge=0)

    model_config = ConfigDict(frozen=True)


class Generation(BaseModel):
    """Immutable snapshot of one improving generation."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    patterns: list[Pattern] = Field(default_factory=list)
    mutations: list[Mutation] = Field(default_factory=list)
    metrics: GenerationMetrics = Field(default_factory=GenerationMetrics)

    model_config = ConfigDict(frozen=True)

    @classmethod
    def build(
        cls,
        population: Sequence[Pattern],
        mutations: Sequence[Mutation],
        best: PatternFitness | None,
        generation_number: int,
    ) -> "Generation":
        confidences = [p.confidence for p in population]
        return cls(
            patterns=list(population),
            mutations=list(mutations),
            metrics=GenerationMetrics(
                average_confidence=float(np.mean(confidences)) if confidences else 0.0,
                best_confidence=best.pattern.confidence if best else 0.0,
                diversity=confidence_diversity(population),
                generation_number=generation_number,
            ),
        )


class Improvements(BaseModel):
    efficiency: float = 0.0
    reliability: float = 0.0
    complexity: float = 0.0


class LineageMetadata(BaseModel):
    start_time: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    last_evolution: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    total_generations: int = 0
    improvements: Improvements = Field(default_factory=Improvements)


class Lineage(BaseModel):
    """Ancestry of one evolution run, rooted at its seed pattern."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    root_pattern: Pattern
    generations: list[Generation] = Field(default_factory=list)
    current_generation: int = Field(default=0, ge=0)
    metadata: LineageMetadata = Field(default_factory=LineageMetadata)

    @property
    def best_confidence(self) -> float:
        if self.generations:
            return self.generations[-1].metrics.best_confidence
        return self.root_pattern.confidence


class LineageTracker:
    """Owns the lineage of the current run; generations are append-only."""

    def __init__(self) -> None:
        self._lineage: Lineage | None = None

    @property
    def lineage(self) -> Lineage | None:
        return self._lineage

    def start(self, root: Pattern) -> Lineage:
        self._lineage = Lineage(root_pattern=root)
        logger.debug("[LineageTracker] New lineage {} for {}", self._lineage.id, root.id)
        return self._lineage

    def record_generation(
        self,
        population: Sequence[Pattern],
        mutations: Sequence[Mutation],
        best: PatternFitness,
        weights: OptimizationWeights,
    ) -> Generation:
        lineage = self._require()
        previous_best = lineage.best_confidence

        generation = Generation.build(
            population, mutations, best, lineage.current_generation + 1
        )
        lineage.generations.append(generation)
        lineage.current_generation += 1

        meta = lineage.metadata
        meta.last_evolution = generation.timestamp
        meta.total_generations += 1

        gain = generation.metrics.best_confidence - previous_best
        if gain > 0 and weights.total > 0:
            meta.improvements.efficiency += gain * weights.efficiency_weight / weights.total
            meta.improvements.reliability += gain * weights.reliability_weight / weights.total
            meta.improvements.complexity += gain * weights.complexity_weight / weights.total

        logger.debug(
            "[LineageTracker] Generation {} | best_confidence={:.4f}, gain={:+.4f}",
            generation.metrics.generation_number,
            generation.metrics.best_confidence,
            gain,
        )
        return generation

    def _require(self) -> Lineage:
        if self._lineage is None:
            raise RuntimeError("LineageTracker.start() must be called first")
        return self._lineage
