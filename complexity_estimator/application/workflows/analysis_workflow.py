"""
Analysis Workflow orchestrating the estimation stages.
"""

import logging
import uuid
from typing import Any, Callable, Dict, Optional

from langgraph.graph import END, StateGraph

from complexity_estimator.application.agents.analyzer import AnalyzerAgent
from complexity_estimator.application.agents.classifier import ClassifierAgent
from complexity_estimator.application.agents.parser_agent import ParserAgent
from complexity_estimator.application.agents.reconciler_agent import ReconcilerAgent
from complexity_estimator.application.agents.regression_agent import RegressionAgent
from complexity_estimator.application.agents.sampler_agent import SamplerAgent
from complexity_estimator.application.agents.state import AnalysisState
from complexity_estimator.application.agents.validator import ValidatorAgent
from complexity_estimator.application.options import AnalysisOptions
from complexity_estimator.application.workflows.handlers import (
    EventCallback,
    StageNodeHandler,
)
from complexity_estimator.domain.models.analysis import AnalysisIssue, AnalysisStatus
from complexity_estimator.domain.services.sampling import CostModel
from complexity_estimator.shared.di import get_container
from complexity_estimator.shared.exceptions import ErrorKind

logger = logging.getLogger(__name__)

CONTINUE = "continue"
CANCEL = "cancel"
STOP = "stop"
SKIP = "skip"


class AnalysisWorkflow:
    """
    Main workflow orchestrating all stages using LangGraph.

    Stages run strictly in order. The only cancellation point is the edge
    between two stages; a stage that started always completes.
    """

    def __init__(self, event_callback: Optional[EventCallback] = None):
        container = get_container()

        self.validator = ValidatorAgent()
        self.parser = ParserAgent(container.get_language_parser())
        self.classifier = ClassifierAgent(container.get_pattern_matcher())
        self.analyzer = AnalyzerAgent(container.get_aggregator())
        self.sampler = SamplerAgent()
        self.regression = RegressionAgent()
        self.reconciler = ReconcilerAgent(container.get_reconciler())

        self._stage_handler = StageNodeHandler(event_callback=event_callback)
        self.event_callback = event_callback

        self.graph = self._build_graph()

    def _build_graph(self):
        """Build LangGraph state graph."""
        workflow = StateGraph(AnalysisState)

        workflow.add_node("validator", self._validator_node)
        workflow.add_node("parser", self._parser_node)
        workflow.add_node("pattern_matcher", self._pattern_matcher_node)
        workflow.add_node("aggregator", self._aggregator_node)
        workflow.add_node("sampler", self._sampler_node)
        workflow.add_node("regression", self._regression_node)
        workflow.add_node("reconciler", self._reconciler_node)
        workflow.add_node("cancelled", self._cancelled_node)

        workflow.set_entry_point("validator")

        workflow.add_conditional_edges(
            "validator",
            self._after_validation,
            {CONTINUE: "parser", STOP: END, CANCEL: "cancelled"},
        )
        workflow.add_conditional_edges(
            "parser",
            self._after_stage,
            {CONTINUE: "pattern_matcher", SKIP: "reconciler", CANCEL: "cancelled"},
        )
        workflow.add_conditional_edges(
            "pattern_matcher",
            self._after_stage,
            {CONTINUE: "aggregator", SKIP: "reconciler", CANCEL: "cancelled"},
        )
        workflow.add_conditional_edges(
            "aggregator",
            self._after_aggregation,
            {CONTINUE: "sampler", SKIP: "reconciler", CANCEL: "cancelled"},
        )
        workflow.add_conditional_edges(
            "sampler",
            self._after_sampling,
            {CONTINUE: "regression", SKIP: "reconciler", CANCEL: "cancelled"},
        )
        workflow.add_conditional_edges(
            "regression",
            self._after_stage,
            {CONTINUE: "reconciler", SKIP: "reconciler", CANCEL: "cancelled"},
        )
        workflow.add_edge("reconciler", END)
        workflow.add_edge("cancelled", END)

        return workflow.compile()

    # ----- nodes -----------------------------------------------------------

    def _validator_node(self, state: AnalysisState) -> AnalysisState:
        """Execute Validator agent node."""
        logger.info("Executing Validator Agent")
        return self._stage_handler.execute_stage(
            stage="validation",
            agent_name=self.validator.name,
            agent_fn=self.validator.execute,
            state=state,
            payload_builder=lambda updated: {"status": updated.get("status")},
        )

    def _parser_node(self, state: AnalysisState) -> AnalysisState:
        """Execute Parser agent node."""
        logger.info("Executing Parser Agent")
        return self._stage_handler.execute_stage(
            stage="parsing",
            agent_name=self.parser.name,
            agent_fn=self.parser.execute,
            state=state,
            payload_builder=lambda updated: self._build_stage_payload("parsing", updated),
        )

    def _pattern_matcher_node(self, state: AnalysisState) -> AnalysisState:
        """Execute Classifier agent node."""
        logger.info("Executing Classifier Agent")
        return self._stage_handler.execute_stage(
            stage="pattern_matching",
            agent_name=self.classifier.name,
            agent_fn=self.classifier.execute,
            state=state,
            payload_builder=lambda updated: self._build_stage_payload(
                "pattern_matching", updated
            ),
        )

    def _aggregator_node(self, state: AnalysisState) -> AnalysisState:
        """Execute Analyzer agent node."""
        logger.info("Executing Analyzer Agent")
        return self._stage_handler.execute_stage(
            stage="aggregation",
            agent_name=self.analyzer.name,
            agent_fn=self.analyzer.execute,
            state=state,
            payload_builder=lambda updated: self._build_stage_payload("aggregation", updated),
        )

    def _sampler_node(self, state: AnalysisState) -> AnalysisState:
        """Execute Sampler agent node."""
        logger.info("Executing Sampler Agent")
        return self._stage_handler.execute_stage(
            stage="sampling",
            agent_name=self.sampler.name,
            agent_fn=self.sampler.execute,
            state=state,
            payload_builder=lambda updated: self._build_stage_payload("sampling", updated),
        )

    def _regression_node(self, state: AnalysisState) -> AnalysisState:
        """Execute Regression agent node."""
        logger.info("Executing Regression Agent")
        return self._stage_handler.execute_stage(
            stage="regression",
            agent_name=self.regression.name,
            agent_fn=self.regression.execute,
            state=state,
            payload_builder=lambda updated: self._build_stage_payload("regression", updated),
        )

    def _reconciler_node(self, state: AnalysisState) -> AnalysisState:
        """Execute Reconciler agent node."""
        logger.info("Executing Reconciler Agent")
        return self._stage_handler.execute_stage(
            stage="reconciliation",
            agent_name=self.reconciler.name,
            agent_fn=self.reconciler.execute,
            state=state,
            payload_builder=lambda updated: self._build_stage_payload(
                "reconciliation", updated
            ),
        )

    def _cancelled_node(self, state: AnalysisState) -> AnalysisState:
        stage = state.get("current_stage", "initialization")
        logger.info("Analysis %s cancelled after %s", state.get("analysis_id"), stage)
        issues = state.get("issues", [])
        issues.append(
            AnalysisIssue(
                kind=ErrorKind.CANCELLED,
                stage=stage,
                message=f"Analysis cancelled after the {stage} stage",
            )
        )
        state["issues"] = issues
        state["status"] = AnalysisStatus.CANCELLED.value
        return state

    # ----- routing ---------------------------------------------------------

    def _is_cancelled(self, state: AnalysisState) -> bool:
        check = state.get("cancel_requested")
        return bool(check and check())

    def _after_validation(self, state: AnalysisState) -> str:
        if state.get("status") == AnalysisStatus.REJECTED.value:
            return STOP
        if self._is_cancelled(state):
            return CANCEL
        return CONTINUE

    def _after_stage(self, state: AnalysisState) -> str:
        if self._is_cancelled(state):
            return CANCEL
        if state.get("failed_stage"):
            return SKIP
        return CONTINUE

    def _after_aggregation(self, state: AnalysisState) -> str:
        route = self._after_stage(state)
        if route != CONTINUE:
            return route
        structural = state.get("structural")
        if not state["options"].enable_sampling or structural is None or structural.is_trivial:
            return SKIP
        return CONTINUE

    def _after_sampling(self, state: AnalysisState) -> str:
        route = self._after_stage(state)
        if route != CONTINUE:
            return route
        sampling = state.get("sampling")
        if sampling is None or not sampling.succeeded:
            return SKIP
        return CONTINUE

    def _build_stage_payload(self, stage: str, state: AnalysisState) -> Dict[str, Any]:
        """Assemble payload metadata for each stage."""
        if stage == "parsing":
            parse_result = state.get("parse_result")
            if parse_result is None:
                return {}
            return {
                "functions": [span.name for span in parse_result.functions],
                "warnings": [w.message for w in parse_result.diagnostics.warnings],
                "skipped_lines": parse_result.diagnostics.skipped_lines,
            }

        if stage == "pattern_matching":
            return {"output": [match.name for match in state.get("matches", [])]}

        if stage == "aggregation":
            structural = state.get("structural")
            if structural is None:
                return {}
            return {
                "output": structural.time_class.label,
                "confidence": structural.confidence,
                "class_source": structural.class_source.value,
            }

        if stage == "sampling":
            sampling = state.get("sampling")
            if sampling is None:
                return {}
            return {
                "output": len(sampling.samples),
                "truncated": sampling.truncated,
                "error": sampling.error_message,
            }

        if stage == "regression":
            regression = state.get("regression")
            if regression is None:
                return {}
            return {
                "output": regression.best_class.label,
                "reliability": regression.reliability.value,
            }

        if stage == "reconciliation":
            verdict = state.get("verdict")
            if verdict is None:
                return {}
            return {
                "output": verdict.time_label,
                "confidence": verdict.confidence,
                "agreement": verdict.agreement.level.value,
            }

        return {}

    def run(
        self,
        source: str,
        options: AnalysisOptions,
        *,
        analysis_id: Optional[str] = None,
        cost_model: Optional[CostModel] = None,
        cancel_requested: Optional[Callable[[], bool]] = None,
    ) -> AnalysisState:
        """
        Run the complete analysis workflow and return the final state.
        """
        analysis_id = analysis_id or str(uuid.uuid4())
        logger.info(f"Starting workflow for analysis: {analysis_id}")

        initial_state: AnalysisState = {
            "analysis_id": analysis_id,
            "source": source,
            "options": options,
            "cost_model": cost_model,
            "cancel_requested": cancel_requested,
            "parse_result": None,
            "matches": [],
            "structural": None,
            "sampling": None,
            "regression": None,
            "complexity_change": None,
            "verdict": None,
            "issues": [],
            "errors": [],
            "failed_stage": None,
            "current_stage": "initialization",
            "status": "processing",
        }

        final_state = self.graph.invoke(initial_state)
        if final_state.get("status") == "processing":
            final_state["status"] = AnalysisStatus.COMPLETED.value

        logger.info(
            f"Workflow completed for analysis: {analysis_id}. "
            f"Status: {final_state.get('status')}"
        )
        return final_state
