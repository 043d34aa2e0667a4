from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class MutationStrategy(str, Enum):
    RANDOM = "random"
    GUIDED = "guided"
    HYBRID = "hybrid"


class SelectionStrategy(str, Enum):
    TOURNAMENT = "tournament"
    ROULETTE = "roulette"
    RANK = "rank"


class CrossoverStrategy(str, Enum):
    SINGLE_POINT = "single-point"
    MULTI_POINT = "multi-point"
    UNIFORM = "uniform"


class OptimizationWeights(BaseModel):
    """Per-metric weights of the fitness function (conventionally sum to 1)."""

    efficiency_weight: float = Field(default=0.4, ge=0)
    reliability_weight: float = Field(default=0.4, ge=0)
    complexity_weight: float = Field(default=0.2, ge=0)

    model_config = ConfigDict(extra="forbid")

    @property
    def total(self) -> float:
        return self.efficiency_weight + self.reliability_weight + self.complexity_weight


class EvolutionConfig(BaseModel):
    """Run-level options controlling PatternEvolutionEngine behaviour."""

    max_generations: int = Field(default=100, gt=0)
    population_size: int = Field(default=50, ge=0)
    convergence_threshold: float = Field(
        default=0.001,
        ge=0,
        description="Mean best-fitness delta below which the run has converged",
    )
    convergence_window: int = Field(
        default=10,
        ge=2,
        description="Number of recent metrics entries inspected for convergence",
    )
    optimization_metrics: OptimizationWeights = Field(
        default_factory=OptimizationWeights
    )
    retain_unmutated_offspring: bool = Field(
        default=True,
        description="Keep crossover offspring whose mutation was skipped "
        "(False drops them, shrinking the offspring set)",
    )
    max_initialization_attempts: int = Field(
        default=10_000,
        gt=0,
        description="Mutation attempts allowed while filling the initial population",
    )
    generation_interval: float = Field(
        default=0.0,
        ge=0,
        description="Seconds to yield to other tasks after each generation",
    )

    model_config = ConfigDict(extra="forbid")


class StrategyParameters(BaseModel):
    mutation_probability: float = Field(default=0.2, ge=0, le=1)
    crossover_probability: float = Field(default=0.8, ge=0, le=1)
    tournament_size: int = Field(default=5, ge=0)
    elitism_count: int = Field(default=2, ge=0)

    model_config = ConfigDict(extra="forbid")


class EvolutionStrategy(BaseModel):
    """Which operators the engine uses and how often they fire."""

    mutation: MutationStrategy = MutationStrategy.HYBRID
    selection: SelectionStrategy = SelectionStrategy.TOURNAMENT
    crossover: CrossoverStrategy = CrossoverStrategy.MULTI_POINT
    parameters: StrategyParameters = Field(default_factory=StrategyParameters)

    model_config = ConfigDict(extra="forbid")


def check_runnable(config: EvolutionConfig, strategy: EvolutionStrategy) -> list[str]:
    """Return the reasons a configuration cannot drive a run (empty if it can)."""
    problems: list[str] = []
    params = strategy.parameters

    if config.population_size < 2:
        problems.append(
            f"population_size must be at least 2 (got {config.population_size})"
        )
    if config.optimization_metrics.total <= 0:
        problems.append("at least one optimization weight must be positive")
    if params.tournament_size < 1 and strategy.selection is SelectionStrategy.TOURNAMENT:
        problems.append("tournament_size must be at least 1")
    if params.elitism_count >= config.population_size:
        problems.append(
            f"elitism_count ({params.elitism_count}) must be smaller than "
            f"population_size ({config.population_size})"
        )
    if params.mutation_probability == 0 and config.population_size > 1:
        problems.append(
            "mutation_probability is 0, the initial population can never be filled"
        )
    return problems
