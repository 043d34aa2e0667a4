from collections.abc import Sequence
import math

import numpy as np

from patternevo.patterns.pattern import Pattern


def selection_quota(population_size: int) -> int:
    """Number of parents drawn from a population: half of it, rounded up."""
    return math.ceil(population_size / 2)


def confidence_diversity(population: Sequence[Pattern]) -> float:
    """Population standard deviation of the confidence trait."""
    if not population:
        return 0.0
    return float(np.std([p.confidence for p in population]))


def mean_delta(values: Sequence[float]) -> float:
    """Mean of consecutive differences, 0 for fewer than two values."""
    if len(values) < 2:
        return 0.0
    return float(np.mean(np.diff(values)))
