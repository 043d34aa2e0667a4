from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone

import numpy as np
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from patternevo.events.event_bus import EventSink
from patternevo.evolution.strategies.utils import confidence_diversity, mean_delta
from patternevo.patterns.pattern import Pattern

METRICS_EVENT = "patternEvolution:metrics"
RATE_WINDOW = 5


class PatternEvolutionMetrics(BaseModel):
    """Run-level statistics recorded once per generation."""

    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    generation: int = Field(ge=0)
    population_size: int = Field(ge=0)
    average_fitness: float = 0.0
    best_fitness: float = Field(default=0.0, description="Best fitness of the run so far")
    worst_fitness: float = 0.0
    diversity: float = Field(default=0.0, description="Std. dev. of confidence")
    improvement_rate: float = Field(
        default=0.0, description="Mean best-fitness delta over recent generations"
    )
    convergence_rate: float = Field(
        default=0.0, description="Absolute mean diversity delta over recent generations"
    )
    execution_time: float = Field(default=0.0, description="Seconds since run start")

    model_config = ConfigDict(frozen=True)


class MetricsRecorder:
    """Computes, stores and emits per-generation statistics."""

    def __init__(self, events: EventSink | None = None):
        self.events = events
        self._history: list[PatternEvolutionMetrics] = []

    @property
    def history(self) -> list[PatternEvolutionMetrics]:
        return list(self._history)

    def reset(self) -> None:
        self._history = []

    def record(
        self,
        *,
        generation: int,
        population: Sequence[Pattern],
        scores: np.ndarray,
        best_fitness: float,
        elapsed: float,
    ) -> PatternEvolutionMetrics:
        diversity = confidence_diversity(population)
        recent = self._history[-(RATE_WINDOW - 1):]

        entry = PatternEvolutionMetrics(
            generation=generation,
            population_size=len(population),
            average_fitness=float(np.mean(scores)) if len(scores) else 0.0,
            best_fitness=best_fitness,
            worst_fitness=float(np.min(scores)) if len(scores) else 0.0,
            diversity=diversity,
            improvement_rate=mean_delta([m.best_fitness for m in recent] + [best_fitness]),
            convergence_rate=abs(mean_delta([m.diversity for m in recent] + [diversity])),
            execution_time=elapsed,
        )
        self._history.append(entry)

        if self.events is not None:
            self.events.emit(METRICS_EVENT, entry)
        logger.debug(
            "[MetricsRecorder] gen={} best={:.4f} avg={:.4f} diversity={:.4f}",
            entry.generation,
            entry.best_fitness,
            entry.average_fitness,
            entry.diversity,
        )
        return entry

    def improvement_rate(self) -> float:
        return self._history[-1].improvement_rate if self._history else 0.0

    def has_converged(self, window: int, threshold: float) -> bool:
        """True once the last *window* entries improve by less than *threshold* on average."""
        if len(self._history) < window:
            return False
        recent = [m.best_fitness for m in self._history[-window:]]
        return mean_delta(recent) < threshold
