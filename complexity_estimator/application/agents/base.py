"""Shared helpers for stage agent implementations."""

import logging
from abc import ABC, abstractmethod

from complexity_estimator.application.agents.state import AnalysisState
from complexity_estimator.domain.models.analysis import AnalysisIssue
from complexity_estimator.shared.exceptions import AnalysisError, ErrorKind

logger = logging.getLogger(__name__)


class BaseAgent(ABC):
    """Provide issue tracking helpers for stage agents."""

    stage: str = ""

    def __init__(self, name: str):
        self.name = name

    @abstractmethod
    def execute(self, state: AnalysisState) -> AnalysisState:
        """Run the stage and return the updated state."""

    def _record_issue(
        self, state: AnalysisState, kind: ErrorKind, message: str
    ) -> None:
        """Accumulate a structured issue on the shared state."""

        issues = state.get("issues", [])
        issues.append(AnalysisIssue(kind=kind, stage=self.stage, message=message))
        state["issues"] = issues

    def _record_error(self, state: AnalysisState, error: AnalysisError) -> None:
        logger.warning("%s: %s", self.name, error)
        self._record_issue(state, error.kind, str(error))
        self._append_error(state, str(error))

    def _append_error(self, state: AnalysisState, message: str) -> None:
        """Utility to accumulate human-readable errors."""

        errors = state.get("errors", [])
        errors.append(message)
        state["errors"] = errors
