from __future__ import annotations

import asyncio
from collections.abc import Mapping, Sequence
import random
import time
from typing import Any, TypeVar

from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from patternevo.database.pattern_repository import PatternRepository
from patternevo.events.event_bus import EventBus, EventSink
from patternevo.evolution.engine.config import (
    EvolutionConfig,
    EvolutionStrategy,
    check_runnable,
)
from patternevo.evolution.engine.fitness import FitnessEvaluator, PatternFitness
from patternevo.evolution.engine.lineage import Generation, LineageTracker
from patternevo.evolution.engine.metrics import MetricsRecorder
from patternevo.evolution.engine.state import (
    ACTIVE_STATES,
    EvolutionResult,
    EvolutionStatus,
    PatternEvolutionState,
    ResultMetrics,
)
from patternevo.evolution.mutation.base import Mutation, MutationOperator
from patternevo.evolution.mutation.operators import build_mutation_operator
from patternevo.evolution.strategies.crossover import build_crossover
from patternevo.evolution.strategies.selectors import build_selector
from patternevo.exceptions import (
    EvolutionInProgressError,
    InvalidConfigurationError,
    PopulationInitializationError,
)
from patternevo.patterns.pattern import Pattern

__all__ = ["PatternEvolutionEngine"]

ModelT = TypeVar("ModelT", EvolutionConfig, EvolutionStrategy)


class PatternEvolutionEngine:
    """
    Generational search for fitter variants of a seed pattern:
    - One run at a time per instance; use separate instances for parallel runs.
    - Control calls (pause/resume/stop/update_*) take effect at the top of the
      next generation, never in the middle of one.
    """

    def __init__(
        self,
        repository: PatternRepository,
        events: EventSink | None = None,
        config: EvolutionConfig | None = None,
        strategy: EvolutionStrategy | None = None,
        rng: random.Random | None = None,
    ):
        self.repository = repository
        self.events = events if events is not None else EventBus()
        self.rng = rng or random.Random()

        self._config = config or EvolutionConfig()
        self._strategy = strategy or EvolutionStrategy()
        self._status = EvolutionStatus.IDLE
        self._iteration = 0
        self._current_generation: Generation | None = None
        self._started_at = 0.0

        self._lineage = LineageTracker()
        self._metrics = MetricsRecorder(self.events)
        self._resume = asyncio.Event()
        self._resume.set()

        logger.info(
            "[PatternEvolutionEngine] Init | mutation={}, selection={}, crossover={}",
            self._strategy.mutation.value,
            self._strategy.selection.value,
            self._strategy.crossover.value,
        )

    @property
    def status(self) -> EvolutionStatus:
        return self._status

    async def evolve(self, seed: Pattern) -> EvolutionResult:
        """Run a full evolution from *seed* and return the best variant found.

        Raises EvolutionInProgressError if this engine already has an active
        run and InvalidConfigurationError if the configuration cannot drive a
        run. Failures after the run has started are reported through the
        result, with the status set to ``failed``.
        """
        if self._status in ACTIVE_STATES:
            raise EvolutionInProgressError(
                f"Evolution already {self._status.value}; use another engine instance"
            )
        _ensure_runnable(self._config, self._strategy)

        self._begin(seed)
        try:
            best, mutation = await self._run(seed)
            self._status = EvolutionStatus.COMPLETED
        except Exception as exc:
            self._status = EvolutionStatus.FAILED
            logger.error("[PatternEvolutionEngine] Run failed: {}", exc)
            return EvolutionResult(
                success=False,
                error=str(exc),
                metrics=ResultMetrics(generation_number=self._generation_number()),
            )
        finally:
            # cancelled from outside
            if self._status in ACTIVE_STATES:
                self._status = EvolutionStatus.FAILED
            self._resume.set()

        logger.info(
            "[PatternEvolutionEngine] Done | iterations={}, generations={}, best={:.4f}",
            self._iteration,
            self._generation_number(),
            best.score,
        )
        return EvolutionResult(
            success=True,
            new_pattern=best.pattern,
            mutation=mutation,
            metrics=ResultMetrics(
                confidence=best.pattern.confidence,
                improvement=self._metrics.improvement_rate(),
                generation_number=self._generation_number(),
            ),
        )

    def _begin(self, seed: Pattern) -> None:
        self._status = EvolutionStatus.EVOLVING
        self._iteration = 0
        self._current_generation = None
        self._started_at = time.monotonic()
        self._metrics.reset()
        self._lineage.start(seed)
        self._resume.set()
        logger.info(
            "[PatternEvolutionEngine] Start | seed={}, population={}, max_generations={}",
            seed.id,
            self._config.population_size,
            self._config.max_generations,
        )

    async def _run(self, seed: Pattern) -> tuple[PatternFitness, Mutation | None]:
        evaluator = FitnessEvaluator(self._config.optimization_metrics)
        population, mutations = await self._initial_population(seed)

        best = evaluator.evaluate_population(population)
        best_mutation = _origin(best.pattern, mutations)
        self._current_generation = Generation.build(population, mutations, best, 0)

        while self._iteration < self._config.max_generations:
            while self._status is EvolutionStatus.PAUSED:
                logger.info("[PatternEvolutionEngine] Paused at iteration {}", self._iteration)
                await self._resume.wait()
            if self._status is not EvolutionStatus.EVOLVING:
                logger.info("[PatternEvolutionEngine] Stop requested ({})", self._status.value)
                break

            config = self._config
            evaluator = FitnessEvaluator(config.optimization_metrics)
            best = evaluator.evaluate_pattern(best.pattern)

            population, offspring, mutations = await self._breed(population, evaluator)

            generation = None
            candidate = evaluator.evaluate_population(offspring)
            if candidate is not None and candidate.score > best.score:
                best = candidate
                best_mutation = _origin(best.pattern, mutations)
                generation = self._lineage.record_generation(
                    population, mutations, best, config.optimization_metrics
                )
            self._current_generation = generation or Generation.build(
                population, mutations, best, self._generation_number()
            )

            if self._metrics.has_converged(
                config.convergence_window, config.convergence_threshold
            ):
                logger.info(
                    "[PatternEvolutionEngine] Converged after {} iterations", self._iteration
                )
                break

            self._iteration += 1
            self._metrics.record(
                generation=self._iteration,
                population=population,
                scores=evaluator.score_population(population),
                best_fitness=best.score,
                elapsed=time.monotonic() - self._started_at,
            )
            await asyncio.sleep(config.generation_interval)

        return best, best_mutation

    async def _initial_population(
        self, seed: Pattern
    ) -> tuple[list[Pattern], list[Mutation]]:
        config, params = self._config, self._strategy.parameters
        mutator = build_mutation_operator(self._strategy.mutation, self.repository, self.rng)

        population: list[Pattern] = [seed]
        mutations: list[Mutation] = []
        attempts = 0
        while len(population) < config.population_size:
            if attempts >= config.max_initialization_attempts:
                raise PopulationInitializationError(
                    f"Initial population stuck at {len(population)}/"
                    f"{config.population_size} after {attempts} mutation attempts"
                )
            attempts += 1
            mutation = await self._try_mutate(mutator, seed, params.mutation_probability)
            if mutation is not None:
                mutations.append(mutation)
                population.append(mutation.result)

        logger.debug(
            "[PatternEvolutionEngine] Initial population of {} after {} attempts",
            len(population),
            attempts,
        )
        return population, mutations

    async def _breed(
        self, population: list[Pattern], evaluator: FitnessEvaluator
    ) -> tuple[list[Pattern], list[Pattern], list[Mutation]]:
        """One select -> crossover -> mutate pass.

        Returns the next population, the offspring and the mutations applied.
        """
        config, strategy = self._config, self._strategy
        params = strategy.parameters
        selector = build_selector(strategy.selection, params, self.rng)
        crossover = build_crossover(strategy.crossover, self.rng)
        mutator = build_mutation_operator(strategy.mutation, self.repository, self.rng)

        parents = selector.select(population)
        children = crossover.apply(parents, params.crossover_probability)

        offspring: list[Pattern] = []
        mutations: list[Mutation] = []
        for child in children:
            mutation = await self._try_mutate(mutator, child, params.mutation_probability)
            if mutation is not None:
                mutations.append(mutation)
                offspring.append(mutation.result)
            elif config.retain_unmutated_offspring:
                offspring.append(child)

        next_population = _replace(
            evaluator.rank(population),
            offspring,
            size=config.population_size,
            elitism=params.elitism_count,
        )
        return next_population, offspring, mutations

    async def _try_mutate(
        self, mutator: MutationOperator, pattern: Pattern, probability: float
    ) -> Mutation | None:
        if self.rng.random() >= probability:
            return None
        try:
            return await mutator.mutate(pattern)
        except Exception as exc:
            logger.warning(
                "[PatternEvolutionEngine] {} mutation failed for {}: {}",
                mutator.name,
                pattern.id,
                exc,
            )
            return None

    def _generation_number(self) -> int:
        lineage = self._lineage.lineage
        return lineage.current_generation if lineage else 0

    def pause_evolution(self) -> None:
        """Pause at the next generation boundary; no-op unless evolving."""
        if self._status is EvolutionStatus.EVOLVING:
            self._status = EvolutionStatus.PAUSED
            self._resume.clear()
            logger.info("[PatternEvolutionEngine] Pause requested")

    def resume_evolution(self) -> None:
        """Resume from a paused state."""
        if self._status is EvolutionStatus.PAUSED:
            self._status = EvolutionStatus.EVOLVING
            self._resume.set()
            logger.info("[PatternEvolutionEngine] Resumed")

    def stop_evolution(self) -> None:
        """End an active run early; evolve() returns the best pattern so far."""
        if self._status in ACTIVE_STATES:
            self._status = EvolutionStatus.COMPLETED
            self._resume.set()
            logger.info("[PatternEvolutionEngine] Stop requested")

    def get_state(self) -> PatternEvolutionState:
        return PatternEvolutionState(
            status=self._status,
            iteration=self._iteration,
            current_generation=self._current_generation,
            lineage=self._lineage.lineage,
            config=self._config,
            strategy=self._strategy,
            metrics=self._metrics.history,
        ).model_copy(deep=True)

    def update_config(
        self, partial: Mapping[str, Any] | None = None, **changes: Any
    ) -> EvolutionConfig:
        """Shallow-merge into the configuration; applies from the next generation.

        Raises InvalidConfigurationError, keeping the current configuration, if
        the result could not drive a run with the current strategy.
        """
        config = _merge(EvolutionConfig, self._config, partial, changes)
        if config is not self._config:
            _ensure_runnable(config, self._strategy)
            self._config = config
            logger.info(
                "[PatternEvolutionEngine] Config updated: {}", _keys(partial, changes)
            )
        return self._config

    def update_strategy(
        self, partial: Mapping[str, Any] | None = None, **changes: Any
    ) -> EvolutionStrategy:
        """Shallow-merge into the strategy; applies from the next generation."""
        strategy = _merge(EvolutionStrategy, self._strategy, partial, changes)
        if strategy is not self._strategy:
            _ensure_runnable(self._config, strategy)
            self._strategy = strategy
            logger.info(
                "[PatternEvolutionEngine] Strategy updated: {}", _keys(partial, changes)
            )
        return self._strategy


def _merge(
    model_cls: type[ModelT],
    current: ModelT,
    partial: Mapping[str, Any] | None,
    changes: Mapping[str, Any],
) -> ModelT:
    update = {**(partial or {}), **changes}
    if not update:
        return current
    try:
        return model_cls.model_validate({**current.model_dump(), **update})
    except PydanticValidationError as exc:
        raise InvalidConfigurationError(str(exc)) from exc


def _ensure_runnable(config: EvolutionConfig, strategy: EvolutionStrategy) -> None:
    problems = check_runnable(config, strategy)
    if problems:
        raise InvalidConfigurationError("; ".join(problems))


def _keys(partial: Mapping[str, Any] | None, changes: Mapping[str, Any]) -> list[str]:
    return sorted({**(partial or {}), **changes})


def _origin(pattern: Pattern, mutations: Sequence[Mutation]) -> Mutation | None:
    return next((m for m in mutations if m.result is pattern), None)


def _replace(
    ranked: list[Pattern], offspring: list[Pattern], *, size: int, elitism: int
) -> list[Pattern]:
    """Elites first, then offspring, then the fittest remaining members."""
    return (ranked[:elitism] + offspring + ranked[elitism:])[:size]
