"""
Cost sampler producing one synthetic cost sample per nominal input size.

Each size draws from its own child seed so results do not depend on the
order in which sizes are processed; sizes may be sampled in parallel.
"""

import logging
import time
from concurrent.futures import FIRST_COMPLETED, ThreadPoolExecutor, wait
from typing import List, Optional, Sequence

import numpy as np

from complexity_estimator.domain.models.analysis import CostSample, SamplingResult
from complexity_estimator.domain.models.growth import GrowthClass
from complexity_estimator.domain.models.source import SourceView
from complexity_estimator.domain.services.sampling.base_model import CostModel
from complexity_estimator.domain.services.sampling.synthetic_model import SyntheticCostModel

logger = logging.getLogger(__name__)

MIN_ITERATIONS = 3
MAX_ITERATIONS = 10
MIN_SAMPLES = 3


def iterations_for(size: int) -> int:
    """Fewer iterations for larger sizes, bounded to [3, 10]."""

    return min(MAX_ITERATIONS, max(MIN_ITERATIONS, 1000 // max(size, 1)))


class CostSampler:
    """
    Produces a synthetic cost-vs-size sequence for one source view.

    The sampler holds no per-run state; every call builds its own RNG.
    """

    def __init__(self, cost_model: Optional[CostModel] = None):
        self.cost_model = cost_model or SyntheticCostModel()

    def sample(
        self,
        view: SourceView,
        sizes: Sequence[int],
        *,
        seed: Optional[int] = None,
        time_ceiling_ms: Optional[float] = None,
        max_workers: int = 1,
        min_samples: int = MIN_SAMPLES,
    ) -> SamplingResult:
        """
        Sample costs for every size, in ascending order.

        Args:
            view: Normalized source view
            sizes: Strictly ascending positive sizes
            seed: Seed for the run; ``None`` draws fresh entropy
            time_ceiling_ms: Wall-clock budget; exceeding it truncates sampling
            max_workers: Thread count used across sizes
            min_samples: Minimum samples required for a usable result

        Returns:
            SamplingResult, with ``error_message`` set when fewer than
            ``min_samples`` samples were collected
        """
        started = time.perf_counter()
        deadline = (
            started + time_ceiling_ms / 1000.0 if time_ceiling_ms is not None else None
        )

        sizes = [int(size) for size in sizes]
        seed_sequence = np.random.SeedSequence(seed)
        children = seed_sequence.spawn(len(sizes) + 1)
        base_factor = self.cost_model.base_factor(np.random.default_rng(children[0]))
        bucket = self.cost_model.bucket(view)

        result = SamplingResult(
            bucket=bucket,
            model_name=self.cost_model.name,
            base_factor=base_factor,
        )

        if max_workers > 1 and len(sizes) > 1:
            samples, truncated = self._sample_parallel(
                view, sizes, children[1:], bucket, base_factor, deadline, max_workers
            )
        else:
            samples, truncated = self._sample_sequential(
                view, sizes, children[1:], bucket, base_factor, deadline
            )

        result.samples = sorted(samples, key=lambda sample: sample.size)
        result.truncated = truncated
        result.elapsed_ms = (time.perf_counter() - started) * 1000.0

        if truncated:
            logger.warning(
                "Sampling ceiling of %.0f ms reached after %d of %d sizes",
                time_ceiling_ms,
                len(result.samples),
                len(sizes),
            )
        if len(result.samples) < min_samples:
            result.error_message = (
                "Insufficient data points for empirical analysis "
                f"(collected {len(result.samples)}, need {min_samples})"
            )
        return result

    def _sample_sequential(
        self,
        view: SourceView,
        sizes: List[int],
        seeds: List[np.random.SeedSequence],
        bucket: GrowthClass,
        base_factor: float,
        deadline: Optional[float],
    ):
        samples: List[CostSample] = []
        for size, child in zip(sizes, seeds):
            if deadline is not None and time.perf_counter() >= deadline:
                return samples, True
            samples.append(self._sample_size(view, size, child, bucket, base_factor))
        return samples, False

    def _sample_parallel(
        self,
        view: SourceView,
        sizes: List[int],
        seeds: List[np.random.SeedSequence],
        bucket: GrowthClass,
        base_factor: float,
        deadline: Optional[float],
        max_workers: int,
    ):
        samples: List[CostSample] = []
        # Leaving the block joins workers already running; queued sizes are
        # cancelled first so truncation waits for at most one size per worker.
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            pending = {
                executor.submit(self._sample_size, view, size, child, bucket, base_factor)
                for size, child in zip(sizes, seeds)
            }
            while pending:
                timeout = None
                if deadline is not None:
                    timeout = max(0.0, deadline - time.perf_counter())
                done, pending = wait(pending, timeout=timeout, return_when=FIRST_COMPLETED)
                if not done:
                    for future in pending:
                        future.cancel()
                    return samples, True
                samples.extend(future.result() for future in done)
        return samples, False

    def _sample_size(
        self,
        view: SourceView,
        size: int,
        seed: np.random.SeedSequence,
        bucket: GrowthClass,
        base_factor: float,
    ) -> CostSample:
        rng = np.random.default_rng(seed)
        iterations = iterations_for(size)
        costs = [
            self.cost_model.cost(size, bucket, base_factor, rng)
            for _ in range(iterations)
        ]
        memory = self.cost_model.memory(size, view)
        return CostSample(
            size=size,
            cost=float(np.mean(costs)),
            iterations=iterations,
            memory_estimate=memory,
        )
