import threading
import time

import pytest

from complexity_estimator.domain.models.growth import GrowthClass
from complexity_estimator.domain.services.sampling import (
    CostModelFactory,
    CostSampler,
    DeterministicCostModel,
    SyntheticCostModel,
    iterations_for,
)
from complexity_estimator.infrastructure.parser.language_parser import build_source_view

SIZES = [10, 50, 100, 500, 1000]


@pytest.mark.parametrize(
    "size, expected",
    [(1, 10), (10, 10), (100, 10), (200, 5), (500, 3), (10000, 3)],
)
def test_iterations_for(size, expected):
    assert iterations_for(size) == expected


def test_one_sample_per_size_in_ascending_order(bubble_sort):
    result = CostSampler().sample(build_source_view(bubble_sort), SIZES, seed=7)
    assert result.succeeded
    assert result.sizes == SIZES
    assert all(sample.cost > 0 for sample in result.samples)
    assert all(sample.iterations >= 3 for sample in result.samples)
    assert result.model_name == "synthetic"


def test_same_seed_reproduces_costs(bubble_sort):
    view = build_source_view(bubble_sort)
    first = CostSampler().sample(view, SIZES, seed=42)
    second = CostSampler().sample(view, SIZES, seed=42)
    assert first.costs == second.costs
    assert first.base_factor == second.base_factor


def test_parallel_sampling_matches_sequential(bubble_sort):
    view = build_source_view(bubble_sort)
    sequential = CostSampler().sample(view, SIZES, seed=3)
    parallel = CostSampler().sample(view, SIZES, seed=3, max_workers=4)
    assert parallel.sizes == sequential.sizes
    assert parallel.costs == sequential.costs


def test_synthetic_bucket_follows_source(bubble_sort, array_sum):
    model = SyntheticCostModel()
    assert model.bucket(build_source_view(bubble_sort)) is GrowthClass.QUADRATIC
    assert model.bucket(build_source_view(array_sum)) is GrowthClass.LINEAR


def test_deterministic_model_is_exact(array_sum):
    sampler = CostSampler(DeterministicCostModel(GrowthClass.QUADRATIC, coefficient=2.0))
    result = sampler.sample(build_source_view(array_sum), [10, 20, 30])
    assert result.costs == [200.0, 800.0, 1800.0]
    assert result.bucket is GrowthClass.QUADRATIC


def test_too_few_sizes_is_insufficient(array_sum):
    result = CostSampler().sample(build_source_view(array_sum), [10, 20], seed=1)
    assert not result.succeeded
    assert "Insufficient data points" in result.error_message
    assert len(result.samples) == 2


def test_exhausted_ceiling_truncates(array_sum):
    result = CostSampler().sample(
        build_source_view(array_sum), SIZES, seed=1, time_ceiling_ms=0
    )
    assert result.truncated
    assert result.samples == []
    assert not result.succeeded


def test_factory():
    assert CostModelFactory.available() == ["deterministic", "synthetic"]
    assert isinstance(CostModelFactory.create("synthetic"), SyntheticCostModel)
    with pytest.raises(ValueError):
        CostModelFactory.create("stopwatch")


def test_deterministic_model_rejects_unknown_class():
    with pytest.raises(ValueError):
        DeterministicCostModel(GrowthClass.UNKNOWN)


class _SlowLinearModel(DeterministicCostModel):
    """Counts iterations in flight and memory lookups."""

    def __init__(self, delay: float = 0.0):
        super().__init__(GrowthClass.LINEAR, coefficient=1.0)
        self.delay = delay
        self.in_flight = 0
        self.memory_calls = 0
        self._lock = threading.Lock()

    def cost(self, size, bucket, base_factor, rng):
        with self._lock:
            self.in_flight += 1
        time.sleep(self.delay)
        with self._lock:
            self.in_flight -= 1
        return super().cost(size, bucket, base_factor, rng)

    def memory(self, size, view):
        with self._lock:
            self.memory_calls += 1
        return super().memory(size, view)


def test_parallel_truncation_joins_running_workers(array_sum):
    model = _SlowLinearModel(delay=0.02)
    result = CostSampler(model).sample(
        build_source_view(array_sum),
        SIZES,
        seed=1,
        time_ceiling_ms=5,
        max_workers=2,
    )
    assert result.truncated
    assert not result.succeeded
    assert model.in_flight == 0


def test_memory_estimated_once_per_size(array_sum):
    model = _SlowLinearModel()
    result = CostSampler(model).sample(build_source_view(array_sum), SIZES, seed=1)
    assert model.memory_calls == len(SIZES)
    assert sum(sample.iterations for sample in result.samples) > len(SIZES)
    assert [sample.memory_estimate for sample in result.samples] == [
        model.memory(size, build_source_view(array_sum)) for size in SIZES
    ]
