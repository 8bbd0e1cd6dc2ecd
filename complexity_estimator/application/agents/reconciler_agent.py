"""
Reconciler Agent - Merges the collected signals into the final verdict.
"""

import logging
from typing import Optional

from complexity_estimator.application.agents.base import BaseAgent
from complexity_estimator.application.agents.state import AnalysisState
from complexity_estimator.domain.models.analysis import FinalVerdict
from complexity_estimator.domain.services.reconciler import Reconciler

logger = logging.getLogger(__name__)


class ReconcilerAgent(BaseAgent):
    """Agent producing the :class:`FinalVerdict` for a run."""

    stage = "reconciliation"

    def __init__(self, reconciler: Optional[Reconciler] = None):
        super().__init__("ReconcilerAgent")
        self.reconciler = reconciler or Reconciler()

    def execute(self, state: AnalysisState) -> AnalysisState:
        state["current_stage"] = self.stage
        structural = state.get("structural")
        if structural is None:
            failed = state.get("failed_stage") or "aggregation"
            state["verdict"] = FinalVerdict.unknown(
                f"No structural estimate available ({failed} stage did not complete)"
            )
            return state

        options = state["options"]
        state["verdict"] = self.reconciler.reconcile(
            structural,
            regression=state.get("regression"),
            sampling=state.get("sampling"),
            sampling_enabled=options.enable_sampling,
            include_case_analysis=options.include_case_analysis,
        )
        return state
