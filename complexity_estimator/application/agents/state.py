"""
Pipeline state definitions for the LangGraph workflow.
Defines the shared state passed between stage agents.
"""

from typing import Callable, List, Optional, TypedDict

from complexity_estimator.application.options import AnalysisOptions
from complexity_estimator.domain.models.analysis import (
    AlgorithmMatch,
    AnalysisIssue,
    ComplexityChange,
    FinalVerdict,
    RegressionAnalysis,
    SamplingResult,
    StructuralVerdict,
)
from complexity_estimator.domain.services.sampling.base_model import CostModel
from complexity_estimator.infrastructure.parser.language_parser import ParserResult

# Shared workflow state definition used across stage agents.
AnalysisState = TypedDict(
    "AnalysisState",
    {
        # Run information
        "analysis_id": str,
        "source": str,
        "options": AnalysisOptions,
        "cost_model": Optional[CostModel],
        "cancel_requested": Optional[Callable[[], bool]],
        # Parsing stage
        "parse_result": Optional[ParserResult],
        # Pattern matching stage
        "matches": List[AlgorithmMatch],
        # Aggregation stage
        "structural": Optional[StructuralVerdict],
        # Sampling and regression stages
        "sampling": Optional[SamplingResult],
        "regression": Optional[RegressionAnalysis],
        "complexity_change": Optional[ComplexityChange],
        # Reconciliation stage
        "verdict": Optional[FinalVerdict],
        # Error handling
        "issues": List[AnalysisIssue],
        "errors": List[str],
        "failed_stage": Optional[str],
        # Status
        "current_stage": str,
        "status": str,
    },
    total=False,
)
