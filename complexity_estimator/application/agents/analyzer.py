"""
Analyzer Agent - Aggregates the tree and catalogue matches.
Produces the structural verdict consumed by the reconciler.
"""

import logging
from typing import Optional

from complexity_estimator.application.agents.base import BaseAgent
from complexity_estimator.application.agents.state import AnalysisState
from complexity_estimator.domain.services.complexity_service import ComplexityAggregator

logger = logging.getLogger(__name__)


class AnalyzerAgent(BaseAgent):
    """Agent reducing the syntax tree into a structural verdict."""

    stage = "aggregation"

    def __init__(self, aggregator: Optional[ComplexityAggregator] = None):
        super().__init__("AnalyzerAgent")
        self.aggregator = aggregator or ComplexityAggregator()

    def execute(self, state: AnalysisState) -> AnalysisState:
        state["current_stage"] = self.stage
        parse_result = state.get("parse_result")
        if parse_result is None:
            self._append_error(state, "No parse result available for aggregation")
            return state

        options = state["options"]
        graph = parse_result.call_graph
        structural = self.aggregator.aggregate(
            parse_result.tree,
            state.get("matches", []),
            view=parse_result.view,
            call_counts=graph.call_counts,
            mutual_recursion=graph.mutual_recursion(),
            parser_warnings=[w.message for w in parse_result.diagnostics.warnings],
            precedence=options.pattern_precedence,
        )
        state["structural"] = structural

        logger.info(
            f"{self.name}: structural estimate {structural.time_class.label} "
            f"(tree {structural.tree_class.label}, source {structural.class_source.value}, "
            f"confidence {structural.confidence:.2f})"
        )
        return state
