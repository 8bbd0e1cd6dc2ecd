"""
Domain models describing estimation signals, fits, and verdicts.

This module defines the records passed between pipeline stages:
    - AlgorithmMatch: catalogue hit produced by the pattern matcher
    - StructuralVerdict: aggregated static estimate (tree + patterns)
    - CostSample / SamplingResult: synthetic cost observations
    - FitResult / RegressionAnalysis: curve fitting output
    - FinalVerdict: reconciled answer returned to callers
    - AnalysisReport: verdict plus every intermediate signal and issue

All records are created fresh per analysis call and never shared.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Tuple

from complexity_estimator.domain.models.growth import GrowthClass
from complexity_estimator.domain.models.syntax import (
    ComplexityInfo,
    RecursionType,
    SyntaxNode,
)
from complexity_estimator.shared.exceptions import ErrorKind


class AgreementLevel(str, Enum):
    """
    How closely the independent signals agree.

    Ordering from strongest to weakest: HIGH, MEDIUM, LOW, CONFLICT.
    """

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    CONFLICT = "conflict"


class Reliability(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ClassSource(str, Enum):
    """Which signal produced the structural verdict's time class."""

    PATTERN = "pattern"
    STRUCTURE = "structure"


class PatternPrecedence(str, Enum):
    """When a catalogue match overrides the tree-derived time class."""

    ALWAYS = "always"
    WHEN_CONFIDENT = "when_confident"
    NEVER = "never"


class OpinionPolicy(str, Enum):
    """How an external opinion is merged into a final verdict."""

    PREFER_EXTERNAL = "prefer_external"
    CORROBORATE = "corroborate"


class AnalysisStatus(str, Enum):
    """
    Terminal states of an analysis call.

    Invariants:
        - REJECTED analyses carry no partial signals
        - CANCELLED analyses keep the signals computed before cancellation
    """

    COMPLETED = "completed"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class CaseSplit:
    """Best/average/worst case classes."""

    best: GrowthClass
    average: GrowthClass
    worst: GrowthClass

    @classmethod
    def uniform(cls, growth: GrowthClass) -> "CaseSplit":
        return cls(best=growth, average=growth, worst=growth)


@dataclass
class AlgorithmMatch:
    """
    Catalogue entry whose evidence predicates all hold for a source text.

    Example:
        >>> match = AlgorithmMatch(
        ...     name="Binary Search",
        ...     description="Divide search space in half each iteration",
        ...     time_class=GrowthClass.LOGARITHMIC,
        ...     space_class=GrowthClass.CONSTANT,
        ...     confidence=0.95,
        ... )
    """

    name: str
    description: str
    time_class: GrowthClass
    space_class: GrowthClass
    confidence: float
    cases: Optional[CaseSplit] = None
    time_label: Optional[str] = None
    evidence: List[str] = field(default_factory=list)
    line_start: Optional[int] = None
    line_end: Optional[int] = None


@dataclass
class FunctionSummary:
    name: str
    complexity: ComplexityInfo
    is_recursive: bool = False
    recursion_type: RecursionType = RecursionType.NONE
    recursive_sites: int = 0
    call_count: int = 0
    line_start: int = 0
    line_end: int = 0


@dataclass
class LoopSummary:
    kind: str
    complexity: ComplexityInfo
    body_complexity: ComplexityInfo
    nesting_level: int
    iteration_pattern: str
    line_start: int = 0
    line_end: int = 0


@dataclass
class StructuralVerdict:
    """
    Static estimate combining the syntax tree with pattern matches.

    ``tree_class`` is what the tree alone implies; ``time_class`` is the
    class after the pattern precedence policy was applied.
    """

    time_class: GrowthClass
    space_class: GrowthClass
    confidence: float
    tree_class: GrowthClass
    tree_confidence: float
    class_source: ClassSource = ClassSource.STRUCTURE
    matches: List[AlgorithmMatch] = field(default_factory=list)
    functions: List[FunctionSummary] = field(default_factory=list)
    loops: List[LoopSummary] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    is_trivial: bool = False

    @property
    def best_match(self) -> Optional[AlgorithmMatch]:
        """Highest-confidence match; ties go to the higher class."""

        if not self.matches:
            return None
        return max(
            self.matches,
            key=lambda match: (match.confidence, match.time_class.rank),
        )

    @property
    def pattern_confidence(self) -> Optional[float]:
        if not self.matches:
            return None
        return sum(match.confidence for match in self.matches) / len(self.matches)


@dataclass(frozen=True)
class CostSample:
    """
    One synthetic cost observation.

    Invariants:
        - size > 0, cost > 0, iterations >= 1
        - one sample per distinct nominal size
    """

    size: int
    cost: float
    iterations: int
    memory_estimate: float


@dataclass
class SamplingResult:
    samples: List[CostSample] = field(default_factory=list)
    bucket: GrowthClass = GrowthClass.UNKNOWN
    model_name: str = ""
    base_factor: Optional[float] = None
    truncated: bool = False
    elapsed_ms: float = 0.0
    error_message: Optional[str] = None

    @property
    def sizes(self) -> List[int]:
        return [sample.size for sample in self.samples]

    @property
    def costs(self) -> List[float]:
        return [sample.cost for sample in self.samples]

    @property
    def memory_estimates(self) -> List[float]:
        return [sample.memory_estimate for sample in self.samples]

    @property
    def average_cost(self) -> float:
        if not self.samples:
            return 0.0
        return sum(self.costs) / len(self.samples)

    @property
    def succeeded(self) -> bool:
        return self.error_message is None


@dataclass
class FitResult:
    """
    Least-squares fit of ``cost ≈ c · f(size)`` for one growth class.

    ``standard_error`` is the residual standard error; ``p_value`` is the
    bucketed approximation derived from the F statistic.
    """

    growth_class: GrowthClass
    coefficient: float
    r_squared: float
    standard_error: float
    p_value: float
    confidence: float
    residuals: List[float] = field(default_factory=list)
    predicted: List[float] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        values = (self.coefficient, self.r_squared, self.standard_error)
        return self.r_squared > 0 and all(
            value == value and abs(value) != float("inf") for value in values
        )


@dataclass
class DataQuality:
    sample_size: int
    variance: float
    outliers: List[int] = field(default_factory=list)
    monotonicity: float = 0.0


@dataclass
class RegressionAnalysis:
    best_fit: Optional[FitResult]
    all_fits: List[FitResult] = field(default_factory=list)
    recommendation: str = ""
    reliability: Reliability = Reliability.LOW
    data_quality: Optional[DataQuality] = None
    error_message: Optional[str] = None

    @property
    def best_class(self) -> GrowthClass:
        if self.best_fit is None:
            return GrowthClass.UNKNOWN
        return self.best_fit.growth_class

    @property
    def sample_size(self) -> int:
        return self.data_quality.sample_size if self.data_quality else 0


@dataclass
class ComplexityChange:
    has_change: bool
    change_point: Optional[int] = None
    before_class: Optional[GrowthClass] = None
    after_class: Optional[GrowthClass] = None


@dataclass
class ConfidenceBreakdown:
    """Per-signal confidences; ``None`` marks an absent signal."""

    structural: float
    pattern: Optional[float] = None
    regression: Optional[float] = None


@dataclass
class AgreementAssessment:
    level: AgreementLevel
    explanation: str
    consensus: bool


@dataclass
class ValidationFlags:
    structural_valid: bool
    regression_valid: bool
    cross_valid: bool
    overall_reliability: float


@dataclass
class ExternalOpinion:
    """Opinion produced outside the core, e.g. by a remote model."""

    time_label: str
    space_label: Optional[str] = None
    confidence: float = 0.0
    best_case: Optional[str] = None
    average_case: Optional[str] = None
    worst_case: Optional[str] = None
    explanation: str = ""
    source: str = "external"


@dataclass
class FinalVerdict:
    """
    Reconciled complexity estimate.

    Invariants:
        - lower_bound <= upper_bound whenever both are known
        - confidence == 0.3 and time_class is UNKNOWN for conflicts
    """

    time_class: GrowthClass
    time_label: str
    space_class: GrowthClass
    confidence: float
    breakdown: ConfidenceBreakdown
    lower_bound: GrowthClass
    upper_bound: GrowthClass
    agreement: AgreementAssessment
    validation: ValidationFlags
    cases: Optional[CaseSplit] = None
    case_explanation: Optional[str] = None
    recommendations: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    external_opinion: Optional[ExternalOpinion] = None

    @property
    def bounds(self) -> Tuple[GrowthClass, GrowthClass]:
        return self.lower_bound, self.upper_bound

    @classmethod
    def unknown(cls, reason: str, *, structural_confidence: float = 0.0) -> "FinalVerdict":
        """Verdict used when the pipeline could not produce an estimate."""

        return cls(
            time_class=GrowthClass.UNKNOWN,
            time_label=GrowthClass.UNKNOWN.label,
            space_class=GrowthClass.UNKNOWN,
            confidence=0.0,
            breakdown=ConfidenceBreakdown(structural=structural_confidence),
            lower_bound=GrowthClass.UNKNOWN,
            upper_bound=GrowthClass.UNKNOWN,
            agreement=AgreementAssessment(
                level=AgreementLevel.LOW, explanation=reason, consensus=False
            ),
            validation=ValidationFlags(
                structural_valid=False,
                regression_valid=False,
                cross_valid=False,
                overall_reliability=0.0,
            ),
            warnings=[reason],
        )


@dataclass
class AnalysisIssue:
    kind: ErrorKind
    stage: str
    message: str


@dataclass
class AnalysisMetadata:
    analysis_id: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    processing_time_ms: float = 0.0
    code_length: int = 0
    lines_of_code: int = 0


@dataclass
class AnalysisReport:
    """
    Complete output of one ``analyze`` call.

    Example:
        >>> report = analyze("int f(int n) { return n; }")
        >>> report.status
        <AnalysisStatus.COMPLETED: 'completed'>
    """

    status: AnalysisStatus
    verdict: FinalVerdict
    metadata: AnalysisMetadata
    structural: Optional[StructuralVerdict] = None
    sampling: Optional[SamplingResult] = None
    regression: Optional[RegressionAnalysis] = None
    complexity_change: Optional[ComplexityChange] = None
    tree: Optional[SyntaxNode] = None
    issues: List[AnalysisIssue] = field(default_factory=list)
