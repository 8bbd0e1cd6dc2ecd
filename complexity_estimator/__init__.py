"""Heuristic time/space complexity estimation for source code snippets."""

from complexity_estimator.application.options import AnalysisOptions
from complexity_estimator.application.use_cases.analysis_use_cases import analyze
from complexity_estimator.domain.models.analysis import (
    AnalysisReport,
    AnalysisStatus,
    ExternalOpinion,
    FinalVerdict,
    OpinionPolicy,
)
from complexity_estimator.domain.models.growth import GrowthClass, GrowthLattice
from complexity_estimator.domain.services.reconciler import merge_external_opinion

__all__ = [
    "AnalysisOptions",
    "AnalysisReport",
    "AnalysisStatus",
    "ExternalOpinion",
    "FinalVerdict",
    "GrowthClass",
    "GrowthLattice",
    "OpinionPolicy",
    "analyze",
    "merge_external_opinion",
]
