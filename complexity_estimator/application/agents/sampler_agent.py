"""
Sampler Agent - Collects synthetic cost samples for the requested sizes.
"""

import logging
from typing import Optional

from complexity_estimator.application.agents.base import BaseAgent
from complexity_estimator.application.agents.state import AnalysisState
from complexity_estimator.domain.services.sampling import (
    CostModel,
    CostModelFactory,
    CostSampler,
)
from complexity_estimator.shared.config import settings
from complexity_estimator.shared.exceptions import (
    InsufficientSamplesError,
    SamplingTimeoutError,
)

logger = logging.getLogger(__name__)


class SamplerAgent(BaseAgent):
    """
    Agent driving the cost sampler.

    A run-level cost model in the state wins over the model named in the
    options; a fresh sampler is built per run.
    """

    stage = "sampling"

    def __init__(self, min_samples: Optional[int] = None):
        super().__init__("SamplerAgent")
        self.min_samples = settings.min_samples if min_samples is None else min_samples

    def execute(self, state: AnalysisState) -> AnalysisState:
        state["current_stage"] = self.stage
        options = state["options"]
        parse_result = state.get("parse_result")
        if parse_result is None:
            self._append_error(state, "No parse result available for sampling")
            return state

        sampler = CostSampler(self._cost_model(state))
        result = sampler.sample(
            parse_result.view,
            options.sample_sizes,
            seed=options.seed,
            time_ceiling_ms=options.sampling_time_ceiling_ms,
            max_workers=options.max_workers,
            min_samples=self.min_samples,
        )
        state["sampling"] = result

        if result.error_message:
            error_class = (
                SamplingTimeoutError if result.truncated else InsufficientSamplesError
            )
            self._record_error(
                state,
                error_class(
                    result.error_message,
                    details={"collected": len(result.samples), "required": self.min_samples},
                ),
            )
        elif result.truncated:
            self._append_error(
                state,
                f"Sampling truncated after {len(result.samples)} of "
                f"{len(options.sample_sizes)} sizes",
            )

        logger.info(
            f"{self.name}: {len(result.samples)} sample(s) with {result.model_name} model "
            f"(bucket {result.bucket.label}, {result.elapsed_ms:.1f} ms)"
        )
        return state

    def _cost_model(self, state: AnalysisState) -> CostModel:
        model = state.get("cost_model")
        if model is not None:
            return model
        return CostModelFactory.create(state["options"].cost_model)
