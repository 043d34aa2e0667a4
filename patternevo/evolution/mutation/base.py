from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from enum import Enum
import random

from pydantic import BaseModel, ConfigDict, Field

from patternevo.patterns.pattern import Pattern


class MutationType(str, Enum):
    MERGE = "merge"
    SPLIT = "split"
    MODIFY = "modify"
    COMBINE = "combine"


class Mutation(BaseModel):
    """Record of one successful mutation, immutable once created."""

    type: MutationType
    operator: str = Field(description="Name of the operator that produced it")
    parents: list[Pattern]
    result: Pattern
    impact: float = Field(ge=0, description="Absolute change of the impact trait")
    confidence_delta: float = Field(
        default=0.0, description="Signed change of the confidence trait"
    )
    reason: str = Field(default="Evolution mutation")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = ConfigDict(frozen=True)


class MutationOperator(ABC):
    """Perturbs a single pattern's traits."""

    name: str = "mutation"

    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or random.Random()

    @abstractmethod
    async def mutate(self, pattern: Pattern) -> Mutation:
        """Produce a mutated variant of *pattern*.

        Raises on failure; callers treat an exception as "no mutation".
        """

    def _record(self, parent: Pattern, result: Pattern) -> Mutation:
        return Mutation(
            type=self.rng.choice(list(MutationType)),
            operator=self.name,
            parents=[parent],
            result=result,
            impact=abs(result.impact - parent.impact),
            confidence_delta=result.confidence - parent.confidence,
        )
