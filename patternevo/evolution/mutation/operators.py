from __future__ import annotations

import random

from loguru import logger

from patternevo.database.pattern_repository import PatternRepository
from patternevo.evolution.engine.config import MutationStrategy
from patternevo.evolution.mutation.base import Mutation, MutationOperator
from patternevo.exceptions import MutationError
from patternevo.patterns.pattern import Pattern

NOISE = 0.1


class RandomMutation(MutationOperator):
    """Adds uniform noise in [-0.1, 0.1] to each trait with probability 0.5."""

    name = "random"

    async def mutate(self, pattern: Pattern) -> Mutation:
        confidence, impact = pattern.confidence, pattern.impact
        if self.rng.random() > 0.5:
            confidence += self.rng.uniform(-NOISE, NOISE)
        if self.rng.random() > 0.5:
            impact += self.rng.uniform(-NOISE, NOISE)

        return self._record(pattern, pattern.derive(confidence=confidence, impact=impact))


class GuidedMutation(MutationOperator):
    """Moves a pattern halfway towards a historically more confident version."""

    name = "guided"

    def __init__(self, repository: PatternRepository, rng: random.Random | None = None):
        super().__init__(rng)
        self.repository = repository

    async def mutate(self, pattern: Pattern) -> Mutation:
        try:
            history = await self.repository.get_pattern_history(pattern.id)
        except Exception as exc:
            raise MutationError(
                f"History lookup failed for pattern {pattern.id}: {exc}"
            ) from exc

        successful = [p for p in history if p.confidence > pattern.confidence]
        if not successful:
            logger.debug(
                "[GuidedMutation] No better history for {} ({} versions)",
                pattern.id,
                len(history),
            )
            return self._record(pattern, pattern.derive())

        target = self.rng.choice(successful)
        mutated = pattern.derive(
            confidence=(pattern.confidence + target.confidence) / 2,
            impact=(pattern.impact + target.impact) / 2,
        )
        return self._record(pattern, mutated)


class HybridMutation(MutationOperator):
    """Chooses random or guided mutation with equal probability per call."""

    name = "hybrid"

    def __init__(self, repository: PatternRepository, rng: random.Random | None = None):
        super().__init__(rng)
        self.random = RandomMutation(self.rng)
        self.guided = GuidedMutation(repository, self.rng)

    async def mutate(self, pattern: Pattern) -> Mutation:
        delegate = self.random if self.rng.random() > 0.5 else self.guided
        return await delegate.mutate(pattern)


def build_mutation_operator(
    strategy: MutationStrategy,
    repository: PatternRepository,
    rng: random.Random | None = None,
) -> MutationOperator:
    if strategy is MutationStrategy.RANDOM:
        return RandomMutation(rng)
    if strategy is MutationStrategy.GUIDED:
        return GuidedMutation(repository, rng)
    if strategy is MutationStrategy.HYBRID:
        return HybridMutation(repository, rng)
    raise ValueError(f"Unknown mutation strategy: {strategy}")
