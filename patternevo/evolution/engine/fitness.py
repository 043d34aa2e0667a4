from __future__ import annotations

from collections.abc import Sequence

import numpy as np
from pydantic import BaseModel, ConfigDict, Field

from patternevo.evolution.engine.config import OptimizationWeights
from patternevo.patterns.pattern import Pattern


class FitnessBreakdown(BaseModel):
    efficiency: float
    reliability: float
    complexity: float

    model_config = ConfigDict(frozen=True)


class PatternFitness(BaseModel):
    """Score of one pattern; recomputed every generation, never persisted."""

    pattern: Pattern
    score: float
    metrics: FitnessBreakdown = Field(description="Unweighted sub-metrics")

    model_config = ConfigDict(frozen=True)


class FitnessEvaluator:
    """Weighted sum of efficiency, reliability and complexity."""

    def __init__(self, weights: OptimizationWeights):
        self.weights = weights

    @staticmethod
    def efficiency(pattern: Pattern) -> float:
        return pattern.confidence * 0.7 + pattern.impact * 0.3

    @staticmethod
    def reliability(pattern: Pattern) -> float:
        return pattern.confidence

    @staticmethod
    def complexity(pattern: Pattern) -> float:
        # fewer tags/attributes score higher
        return max(0.0, 1.0 - pattern.attribute_count / 10)

    def evaluate_pattern(self, pattern: Pattern) -> PatternFitness:
        breakdown = FitnessBreakdown(
            efficiency=self.efficiency(pattern),
            reliability=self.reliability(pattern),
            complexity=self.complexity(pattern),
        )
        score = (
            breakdown.efficiency * self.weights.efficiency_weight
            + breakdown.reliability * self.weights.reliability_weight
            + breakdown.complexity * self.weights.complexity_weight
        )
        return PatternFitness(pattern=pattern, score=score, metrics=breakdown)

    def score_population(self, population: Sequence[Pattern]) -> np.ndarray:
        return np.array(
            [self.evaluate_pattern(p).score for p in population], dtype=float
        )

    def evaluate_population(
        self, population: Sequence[Pattern]
    ) -> PatternFitness | None:
        """Fitness of the fittest member (first one wins ties), None if empty."""
        best: PatternFitness | None = None
        for pattern in population:
            fitness = self.evaluate_pattern(pattern)
            if best is None or fitness.score > best.score:
                best = fitness
        return best

    def rank(self, population: Sequence[Pattern]) -> list[Pattern]:
        """Population sorted by descending fitness score (stable)."""
        scores = self.score_population(population)
        order = np.argsort(-scores, kind="stable")
        return [population[i] for i in order]
