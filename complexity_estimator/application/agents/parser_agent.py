"""
Parser Agent - Parses source text into the syntax tree.
Implements Single Responsibility Principle.
"""

import logging
from typing import Optional

from complexity_estimator.application.agents.base import BaseAgent
from complexity_estimator.application.agents.state import AnalysisState
from complexity_estimator.infrastructure.parser.language_parser import (
    LanguageParser,
    ParserResult,
)
from complexity_estimator.shared.exceptions import ErrorKind

logger = logging.getLogger(__name__)


class ParserAgent(BaseAgent):
    """
    Agent responsible for the tolerant structural parse.
    Unrecognised constructs become parse-tolerance issues, never failures.
    """

    stage = "parsing"

    def __init__(self, parser: Optional[LanguageParser] = None):
        super().__init__("ParserAgent")
        self.parser = parser or LanguageParser()

    def execute(self, state: AnalysisState) -> AnalysisState:
        """
        Execute parsing of the source text.

        Args:
            state: Current pipeline state

        Returns:
            Updated state with the parse result
        """
        logger.info(f"{self.name}: Starting parsing")
        state["current_stage"] = self.stage

        parse_result: ParserResult = self.parser.parse(state.get("source") or "")
        state["parse_result"] = parse_result

        diagnostics = parse_result.diagnostics
        for warning in diagnostics.warnings:
            location = f"line {warning.line}: " if warning.line else ""
            self._record_issue(state, ErrorKind.PARSE_TOLERANCE, location + warning.message)

        logger.info(
            f"{self.name}: Parsing completed. "
            f"Functions: {len(parse_result.functions)}, "
            f"logical lines: {diagnostics.logical_lines}, "
            f"warnings: {len(diagnostics.warnings)}"
        )
        return state
