import random

import pytest

from patternevo.database import MemoryPatternRepository
from patternevo.events import EventBus
from patternevo.evolution.engine import (
    EvolutionConfig,
    EvolutionStrategy,
    PatternEvolutionEngine,
)
from patternevo.patterns import Pattern, PatternType


def make_pattern(confidence: float = 0.5, impact: float = 0.5, **kwargs) -> Pattern:
    kwargs.setdefault("name", "Test Pattern")
    kwargs.setdefault("type", PatternType.WORKFLOW)
    kwargs.setdefault("description", "A test pattern for evolution")
    kwargs.setdefault("tags", ["test", "evolution"])
    return Pattern(confidence=confidence, impact=impact, **kwargs)


@pytest.fixture
def seed_pattern():
    return make_pattern()


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def event_bus():
    return EventBus()


@pytest.fixture
def repository(event_bus):
    return MemoryPatternRepository(event_bus)


@pytest.fixture
def small_config():
    return EvolutionConfig(population_size=10, max_generations=5)


@pytest.fixture
def engine(repository, event_bus, small_config, rng):
    return PatternEvolutionEngine(
        repository,
        events=event_bus,
        config=small_config,
        strategy=EvolutionStrategy(),
        rng=rng,
    )
