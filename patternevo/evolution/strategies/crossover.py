from abc import ABC, abstractmethod
import random

from patternevo.evolution.engine.config import CrossoverStrategy
from patternevo.patterns.pattern import Pattern


class CrossoverOperator(ABC):
    """Combines two parents into two children."""

    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or random.Random()

    @abstractmethod
    def cross(self, parent1: Pattern, parent2: Pattern) -> tuple[Pattern, Pattern]:
        """Child 1 derives from *parent1*, child 2 from *parent2*."""

    def apply(self, parents: list[Pattern], probability: float) -> list[Pattern]:
        """Cross consecutive pairs, wrapping to the first parent for an odd count.

        Pairs that miss the *probability* roll pass through unchanged.
        """
        offspring: list[Pattern] = []
        for i in range(0, len(parents), 2):
            parent1 = parents[i]
            parent2 = parents[i + 1] if i + 1 < len(parents) else parents[0]
            if self.rng.random() < probability:
                offspring.extend(self.cross(parent1, parent2))
            else:
                offspring.extend((parent1, parent2))
        return offspring


class SinglePointCrossover(CrossoverOperator):
    def cross(self, parent1: Pattern, parent2: Pattern) -> tuple[Pattern, Pattern]:
        average = (parent1.confidence + parent2.confidence) / 2
        return parent1.derive(confidence=average), parent2.derive(confidence=average)


class MultiPointCrossover(CrossoverOperator):
    """0.7/0.3 blend of both traits, each child favouring its own parent."""

    DOMINANT = 0.7

    def cross(self, parent1: Pattern, parent2: Pattern) -> tuple[Pattern, Pattern]:
        w = self.DOMINANT
        child1 = parent1.derive(
            confidence=parent1.confidence * w + parent2.confidence * (1 - w),
            impact=parent1.impact * w + parent2.impact * (1 - w),
        )
        child2 = parent2.derive(
            confidence=parent2.confidence * w + parent1.confidence * (1 - w),
            impact=parent2.impact * w + parent1.impact * (1 - w),
        )
        return child1, child2


class UniformCrossover(CrossoverOperator):
    def cross(self, parent1: Pattern, parent2: Pattern) -> tuple[Pattern, Pattern]:
        children = []
        for base in (parent1, parent2):
            children.append(
                base.derive(
                    confidence=self._pick(parent1, parent2).confidence,
                    impact=self._pick(parent1, parent2).impact,
                )
            )
        return children[0], children[1]

    def _pick(self, parent1: Pattern, parent2: Pattern) -> Pattern:
        return parent1 if self.rng.random() > 0.5 else parent2


def build_crossover(
    strategy: CrossoverStrategy, rng: random.Random | None = None
) -> CrossoverOperator:
    if strategy is CrossoverStrategy.SINGLE_POINT:
        return SinglePointCrossover(rng)
    if strategy is CrossoverStrategy.MULTI_POINT:
        return MultiPointCrossover(rng)
    if strategy is CrossoverStrategy.UNIFORM:
        return UniformCrossover(rng)
    raise ValueError(f"Unknown crossover strategy: {strategy}")
