from abc import ABC, abstractmethod
import random

from patternevo.evolution.engine.config import SelectionStrategy, StrategyParameters
from patternevo.evolution.strategies.utils import selection_quota
from patternevo.patterns.pattern import Pattern


class ParentSelector(ABC):
    """Chooses the breeding subset (about half) of a population."""

    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or random.Random()

    @abstractmethod
    def select(self, population: list[Pattern]) -> list[Pattern]:
        """Return ``ceil(len(population) / 2)`` parents, repeats allowed."""


class TournamentSelector(ParentSelector):
    def __init__(self, tournament_size: int = 5, rng: random.Random | None = None):
        super().__init__(rng)
        if tournament_size < 1:
            raise ValueError("tournament_size must be at least 1")
        self.tournament_size = tournament_size

    def select(self, population: list[Pattern]) -> list[Pattern]:
        if not population:
            return []
        size = min(self.tournament_size, len(population))
        selected = []
        while len(selected) < selection_quota(len(population)):
            tournament = self.rng.sample(population, size)
            selected.append(max(tournament, key=lambda p: p.confidence))
        return selected


class RouletteSelector(ParentSelector):
    """Selection probability proportional to confidence."""

    def select(self, population: list[Pattern]) -> list[Pattern]:
        if not population:
            return []
        quota = selection_quota(len(population))
        weights = [p.confidence for p in population]
        if sum(weights) <= 0:
            return [self.rng.choice(population) for _ in range(quota)]
        return self.rng.choices(population, weights=weights, k=quota)


class RankSelector(ParentSelector):
    """Sorts by confidence and favours the front with a squared-random index."""

    def select(self, population: list[Pattern]) -> list[Pattern]:
        ranked = sorted(population, key=lambda p: p.confidence, reverse=True)
        selected = []
        for _ in range(selection_quota(len(ranked))):
            rank = int(self.rng.random() * self.rng.random() * len(ranked))
            selected.append(ranked[rank])
        return selected


def build_selector(
    strategy: SelectionStrategy,
    parameters: StrategyParameters,
    rng: random.Random | None = None,
) -> ParentSelector:
    if strategy is SelectionStrategy.TOURNAMENT:
        return TournamentSelector(parameters.tournament_size, rng)
    if strategy is SelectionStrategy.ROULETTE:
        return RouletteSelector(rng)
    if strategy is SelectionStrategy.RANK:
        return RankSelector(rng)
    raise ValueError(f"Unknown selection strategy: {strategy}")
