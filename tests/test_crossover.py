"""Tests for crossover strategies."""

import random

import pytest

from patternevo.evolution.engine import CrossoverStrategy
from patternevo.evolution.strategies import (
    MultiPointCrossover,
    SinglePointCrossover,
    UniformCrossover,
    build_crossover,
)
from tests.conftest import make_pattern


@pytest.fixture
def parents():
    return make_pattern(0.8, 0.2), make_pattern(0.4, 0.6)


def test_single_point_averages_confidence(parents):
    p1, p2 = parents
    c1, c2 = SinglePointCrossover(random.Random(0)).cross(p1, p2)

    assert c1.confidence == pytest.approx(0.6)
    assert c2.confidence == pytest.approx(0.6)
    assert c1.impact == 0.2
    assert c2.impact == 0.6
    assert c1.id == p1.id and c2.id == p2.id


def test_multi_point_blends(parents):
    p1, p2 = parents
    c1, c2 = MultiPointCrossover(random.Random(0)).cross(p1, p2)

    assert c1.confidence == pytest.approx(0.8 * 0.7 + 0.4 * 0.3)
    assert c1.impact == pytest.approx(0.2 * 0.7 + 0.6 * 0.3)
    assert c2.confidence == pytest.approx(0.4 * 0.7 + 0.8 * 0.3)
    assert c2.impact == pytest.approx(0.6 * 0.7 + 0.2 * 0.3)


def test_uniform_copies_parent_traits(parents):
    p1, p2 = parents
    operator = UniformCrossover(random.Random(9))
    for _ in range(50):
        for child in operator.cross(p1, p2):
            assert child.confidence in (p1.confidence, p2.confidence)
            assert child.impact in (p1.impact, p2.impact)


def test_parents_untouched(parents):
    p1, p2 = parents
    MultiPointCrossover(random.Random(0)).cross(p1, p2)
    assert (p1.confidence, p1.impact, p2.confidence, p2.impact) == (0.8, 0.2, 0.4, 0.6)
    assert p1.evolution == [] and p2.evolution == []


class TestApply:
    def test_odd_parent_count_wraps_around(self):
        parents = [make_pattern(c) for c in (0.2, 0.4, 0.6)]
        offspring = SinglePointCrossover(random.Random(0)).apply(parents, probability=1.0)

        assert len(offspring) == 4
        # last pair is (parents[2], parents[0])
        assert offspring[2].confidence == pytest.approx(0.4)
        assert offspring[3].confidence == pytest.approx(0.4)

    def test_zero_probability_passes_parents_through(self):
        parents = [make_pattern(c) for c in (0.2, 0.4)]
        offspring = MultiPointCrossover(random.Random(0)).apply(parents, probability=0.0)
        assert offspring[0] is parents[0]
        assert offspring[1] is parents[1]

    def test_empty(self):
        assert UniformCrossover(random.Random(0)).apply([], probability=1.0) == []


@pytest.mark.parametrize(
    "strategy,expected",
    [
        (CrossoverStrategy.SINGLE_POINT, SinglePointCrossover),
        (CrossoverStrategy.MULTI_POINT, MultiPointCrossover),
        (CrossoverStrategy.UNIFORM, UniformCrossover),
    ],
)
def test_build_crossover(strategy, expected):
    assert isinstance(build_crossover(strategy), expected)
