"""
Validator Agent - Guards the pipeline entry.
Rejects oversized input, and blank input when configured to do so.
"""

import logging

from complexity_estimator.application.agents.base import BaseAgent
from complexity_estimator.application.agents.state import AnalysisState
from complexity_estimator.domain.models.analysis import AnalysisStatus
from complexity_estimator.shared.config import settings
from complexity_estimator.shared.exceptions import (
    AnalysisError,
    EmptyInputError,
    InputTooLargeError,
)

logger = logging.getLogger(__name__)


class ValidatorAgent(BaseAgent):
    """
    Agent responsible for enforcing input bounds before any parsing happens.
    A rejected run carries no partial signals.
    """

    stage = "validation"

    def __init__(
        self,
        max_input_length: int = None,
        reject_empty_input: bool = None,
    ):
        super().__init__("ValidatorAgent")
        self.max_input_length = (
            settings.max_input_length if max_input_length is None else max_input_length
        )
        self.reject_empty_input = (
            settings.reject_empty_input
            if reject_empty_input is None
            else reject_empty_input
        )

    def execute(self, state: AnalysisState) -> AnalysisState:
        source = state.get("source") or ""
        state["current_stage"] = self.stage

        try:
            self.check(source)
        except AnalysisError as e:
            self._record_error(state, e)
            state["status"] = AnalysisStatus.REJECTED.value
            return state

        logger.info(f"{self.name}: accepted {len(source)} characters")
        return state

    def check(self, source: str) -> None:
        """
        Validate raw source text.

        Raises:
            InputTooLargeError: If the text exceeds the configured length
            EmptyInputError: If the text is blank and blank input is rejected
        """
        if len(source) > self.max_input_length:
            raise InputTooLargeError(
                f"Input of {len(source)} characters exceeds the limit of "
                f"{self.max_input_length}",
                details={"length": len(source), "limit": self.max_input_length},
            )
        if self.reject_empty_input and not source.strip():
            raise EmptyInputError("Input contains no code")
