from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any
import uuid

from pydantic import BaseModel, ConfigDict, Field, field_validator

MAX_EVOLUTION_HISTORY = 100


def clamp_unit(value: float) -> float:
    """Clamp *value* into the closed unit interval."""
    return max(0.0, min(1.0, float(value)))


class PatternType(str, Enum):
    """Kind of behaviour a pattern captures."""

    WORKFLOW = "workflow"
    COMMAND = "command"
    DOCUMENT = "document"
    AUTOMATION = "automation"
    INTERACTION = "interaction"
    LEARNING = "learning"
    INTEGRATION = "integration"
    TEMPORAL = "temporal"
    PREDICTIVE = "predictive"


class PatternMetrics(BaseModel):
    """Usage statistics tracked by the repository for a pattern."""

    usage_count: int = Field(default=0, ge=0)
    success_rate: float = Field(default=0.0, ge=0, le=1)
    average_execution_time: float = Field(
        default=0.0, ge=0, description="Average execution time in seconds"
    )
    complexity_score: float = Field(default=0.0, ge=0)

    model_config = ConfigDict(frozen=True)


class EvolutionSnapshot(BaseModel):
    """Trait values of a pattern at the moment a variant was derived from it."""

    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    confidence: float = Field(ge=0, le=1)
    impact: float = Field(ge=0, le=1)

    model_config = ConfigDict(frozen=True)


class Pattern(BaseModel):
    """A reusable behavioural template with two fitness-relevant traits.

    Patterns are values: operators never modify one in place, they call
    :meth:`derive` and get a new instance back. Variants keep the ``id`` of the
    pattern they descend from, so the repository history of a pattern covers
    every variant that was saved for it.
    """

    id: str = Field(
        default_factory=lambda: str(uuid.uuid4()),
        description="Unique pattern identifier",
    )
    type: PatternType = Field(default=PatternType.WORKFLOW)
    name: str = Field(..., min_length=1, description="Human-readable name")
    description: str = Field(default="")

    confidence: float = Field(..., ge=0, le=1)
    impact: float = Field(..., ge=0, le=1)

    tags: list[str] = Field(default_factory=list)
    attributes: dict[str, Any] = Field(
        default_factory=dict,
        description="Implementation details (commands, template slots, ...)",
    )
    metrics: PatternMetrics = Field(default_factory=PatternMetrics)
    evolution: list[EvolutionSnapshot] = Field(
        default_factory=list,
        description="Trait history, oldest first, capped at MAX_EVOLUTION_HISTORY",
    )

    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        str_strip_whitespace=True,
        validate_default=True,
    )

    @field_validator("id")
    @classmethod
    def validate_uuid(cls, v: str) -> str:
        """Validate that the ID is a valid UUID."""
        try:
            uuid.UUID(v)
            return v
        except ValueError:
            raise ValueError("Invalid UUID format")

    @property
    def attribute_count(self) -> int:
        """Size proxy used by the complexity sub-metric."""
        return len(self.tags) + len(self.attributes)

    def snapshot(self) -> EvolutionSnapshot:
        return EvolutionSnapshot(confidence=self.confidence, impact=self.impact)

    def derive(
        self,
        *,
        confidence: float | None = None,
        impact: float | None = None,
    ) -> "Pattern":
        """Return a new variant with the given traits clamped into [0, 1]."""
        return self.model_copy(
            update={
                "confidence": clamp_unit(
                    self.confidence if confidence is None else confidence
                ),
                "impact": clamp_unit(self.impact if impact is None else impact),
                "evolution": [*self.evolution, self.snapshot()][-MAX_EVOLUTION_HISTORY:],
                "timestamp": datetime.now(timezone.utc),
            }
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert the pattern to a dictionary."""
        return self.model_dump(mode="json")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Pattern":
        """Create a Pattern from a dictionary."""
        return cls.model_validate(data)
