"""
Classifier Agent - Matches the source against the algorithm catalogue.
"""

import logging
from typing import Optional

from complexity_estimator.application.agents.base import BaseAgent
from complexity_estimator.application.agents.state import AnalysisState
from complexity_estimator.domain.services.pattern_detectors import PatternMatcher

logger = logging.getLogger(__name__)


class ClassifierAgent(BaseAgent):
    """Agent responsible for recognizing catalogued algorithms."""

    stage = "pattern_matching"

    def __init__(self, matcher: Optional[PatternMatcher] = None):
        super().__init__("ClassifierAgent")
        self.matcher = matcher or PatternMatcher()

    def execute(self, state: AnalysisState) -> AnalysisState:
        state["current_stage"] = self.stage
        parse_result = state.get("parse_result")
        if parse_result is None:
            state["matches"] = []
            return state

        matches = self.matcher.detect_all(parse_result.view)
        state["matches"] = matches
        logger.info(
            f"{self.name}: {len(matches)} catalogue match(es)"
            + (f": {', '.join(match.name for match in matches)}" if matches else "")
        )
        return state
