"""Tests for parent selection strategies."""

import random

import pytest

from patternevo.evolution.engine import SelectionStrategy, StrategyParameters
from patternevo.evolution.strategies import (
    RankSelector,
    RouletteSelector,
    TournamentSelector,
    build_selector,
)
from tests.conftest import make_pattern


@pytest.fixture
def population():
    return [make_pattern(confidence=c) for c in (0.1, 0.3, 0.5, 0.7, 0.9, 0.2, 0.6)]


ALL_SELECTORS = [
    lambda: TournamentSelector(3, random.Random(1)),
    lambda: RouletteSelector(random.Random(1)),
    lambda: RankSelector(random.Random(1)),
]


class TestQuota:
    @pytest.mark.parametrize("factory", ALL_SELECTORS)
    def test_selects_half_rounded_up(self, factory, population):
        selected = factory().select(population)
        assert len(selected) == 4
        assert all(any(s is p for p in population) for s in selected)

    @pytest.mark.parametrize("factory", ALL_SELECTORS)
    def test_empty_population(self, factory):
        assert factory().select([]) == []


class TestTournament:
    def test_full_tournament_picks_best(self, population):
        selected = TournamentSelector(len(population) + 3, random.Random(0)).select(
            population
        )
        assert all(p.confidence == 0.9 for p in selected)

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            TournamentSelector(0)


class TestRoulette:
    def test_zero_total_confidence(self):
        population = [make_pattern(confidence=0.0) for _ in range(4)]
        assert len(RouletteSelector(random.Random(0)).select(population)) == 2

    def test_zero_confidence_never_chosen(self):
        zero = make_pattern(confidence=0.0)
        population = [zero, make_pattern(confidence=0.8), make_pattern(confidence=0.4)]
        selector = RouletteSelector(random.Random(2))
        for _ in range(200):
            assert all(p is not zero for p in selector.select(population))


class TestRank:
    def test_biased_towards_front(self, population):
        selector = RankSelector(random.Random(4))
        picks = [p.confidence for _ in range(500) for p in selector.select(population)]
        assert picks.count(0.9) > picks.count(0.1)

    def test_single_member(self):
        only = make_pattern()
        assert RankSelector(random.Random(0)).select([only]) == [only]


def test_build_selector_uses_tournament_size():
    selector = build_selector(
        SelectionStrategy.TOURNAMENT, StrategyParameters(tournament_size=7)
    )
    assert isinstance(selector, TournamentSelector)
    assert selector.tournament_size == 7
