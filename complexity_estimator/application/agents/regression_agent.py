"""
Regression Agent - Fits the sampled costs against the growth classes.
"""

import logging

from complexity_estimator.application.agents.base import BaseAgent
from complexity_estimator.application.agents.state import AnalysisState
from complexity_estimator.domain.services.regression_engine import RegressionEngine
from complexity_estimator.shared.exceptions import NumericDegeneracyError

logger = logging.getLogger(__name__)


class RegressionAgent(BaseAgent):
    stage = "regression"

    def __init__(self):
        super().__init__("RegressionAgent")

    def execute(self, state: AnalysisState) -> AnalysisState:
        state["current_stage"] = self.stage
        sampling = state.get("sampling")
        if sampling is None or not sampling.succeeded:
            return state

        engine = RegressionEngine(sampling.sizes, sampling.costs)
        analysis = engine.analyze()
        state["regression"] = analysis
        state["complexity_change"] = engine.detect_complexity_changes()

        if analysis.best_fit is None:
            self._record_error(state, NumericDegeneracyError(analysis.error_message))
            return state

        logger.info(
            f"{self.name}: best fit {analysis.best_class.label} "
            f"(R²={analysis.best_fit.r_squared:.3f}, reliability {analysis.reliability.value})"
        )
        return state
