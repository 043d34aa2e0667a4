"""Tests for per-generation statistics and convergence detection."""

import numpy as np
import pytest

from patternevo.events import EventBus
from patternevo.evolution.engine import METRICS_EVENT, MetricsRecorder
from patternevo.evolution.strategies.utils import (
    confidence_diversity,
    mean_delta,
    selection_quota,
)
from tests.conftest import make_pattern


def _record(recorder, generation, best, confidences=(0.4, 0.6)):
    population = [make_pattern(confidence=c) for c in confidences]
    return recorder.record(
        generation=generation,
        population=population,
        scores=np.array([0.3, 0.5]),
        best_fitness=best,
        elapsed=0.01 * generation,
    )


class TestHelpers:
    def test_diversity_is_population_std(self):
        population = [make_pattern(confidence=c) for c in (0.2, 0.4, 0.6)]
        assert confidence_diversity(population) == pytest.approx(np.std([0.2, 0.4, 0.6]))

    def test_diversity_empty(self):
        assert confidence_diversity([]) == 0.0

    def test_mean_delta(self):
        assert mean_delta([0.1, 0.2, 0.4]) == pytest.approx(0.15)
        assert mean_delta([0.5]) == 0.0

    @pytest.mark.parametrize("size,quota", [(1, 1), (2, 1), (7, 4), (10, 5)])
    def test_selection_quota(self, size, quota):
        assert selection_quota(size) == quota


class TestMetricsRecorder:
    def test_record_fields(self):
        recorder = MetricsRecorder()
        entry = _record(recorder, 1, best=0.5)

        assert entry.generation == 1
        assert entry.population_size == 2
        assert entry.average_fitness == pytest.approx(0.4)
        assert entry.worst_fitness == pytest.approx(0.3)
        assert entry.best_fitness == 0.5
        assert entry.diversity == pytest.approx(0.1)
        assert entry.improvement_rate == 0.0
        assert recorder.history == [entry]

    def test_improvement_rate_uses_recent_window(self):
        recorder = MetricsRecorder()
        for generation, best in enumerate([0.1, 0.1, 0.2, 0.3, 0.4, 0.5, 0.6], start=1):
            _record(recorder, generation, best)
        # last five bests: 0.2 .. 0.6
        assert recorder.improvement_rate() == pytest.approx(0.1)

    def test_emits_event(self):
        bus = EventBus()
        received = []
        bus.subscribe(METRICS_EVENT, received.append)
        recorder = MetricsRecorder(bus)

        entry = _record(recorder, 1, best=0.5)

        assert received == [entry]

    def test_reset(self):
        recorder = MetricsRecorder()
        _record(recorder, 1, best=0.5)
        recorder.reset()
        assert recorder.history == []
        assert recorder.improvement_rate() == 0.0


class TestConvergence:
    def test_needs_full_window(self):
        recorder = MetricsRecorder()
        for generation in range(1, 10):
            _record(recorder, generation, best=0.5)
        assert not recorder.has_converged(window=10, threshold=0.001)

    def test_flat_history_converges(self):
        recorder = MetricsRecorder()
        for generation in range(1, 11):
            _record(recorder, generation, best=0.5)
        assert recorder.has_converged(window=10, threshold=0.001)

    def test_steady_improvement_does_not_converge(self):
        recorder = MetricsRecorder()
        for generation in range(1, 15):
            _record(recorder, generation, best=0.3 + 0.01 * generation)
        assert not recorder.has_converged(window=10, threshold=0.001)

    def test_zero_threshold_never_converges(self):
        recorder = MetricsRecorder()
        for generation in range(1, 21):
            _record(recorder, generation, best=0.5)
        assert not recorder.has_converged(window=10, threshold=0.0)
