"""
Reconciliation of the structural, pattern and regression signals.

The reconciler never re-derives a signal: it compares the labels each stage
produced, grades their agreement and turns that grade into one final class,
confidence, bound pair, case split and advisory set.
"""

import logging
from dataclasses import replace
from typing import List, Optional, Sequence, Tuple

from complexity_estimator.domain.models.analysis import (
    AgreementAssessment,
    AgreementLevel,
    CaseSplit,
    ConfidenceBreakdown,
    ExternalOpinion,
    FinalVerdict,
    OpinionPolicy,
    RegressionAnalysis,
    SamplingResult,
    StructuralVerdict,
    ValidationFlags,
)
from complexity_estimator.domain.models.growth import GrowthClass, GrowthLattice
from complexity_estimator.domain.models.syntax import RecursionType

logger = logging.getLogger(__name__)

MAX_CONFIDENCE = 0.95
CONFLICT_CONFIDENCE = 0.3
MEDIUM_PENALTY = 0.8
LOW_REGRESSION_WEIGHT = 0.6
LOW_CONFIDENCE_CAP = 0.5
COMPATIBLE_STEPS = 2
CONFLICT_STEPS = 3

_CASE_TABLE = {
    "Quick Sort": (
        CaseSplit(GrowthClass.LINEARITHMIC, GrowthClass.LINEARITHMIC, GrowthClass.QUADRATIC),
        "Quick Sort: Best and average case when pivot splits array evenly, worst case "
        "when pivot is always min/max.",
    ),
    "Insertion Sort": (
        CaseSplit(GrowthClass.LINEAR, GrowthClass.QUADRATIC, GrowthClass.QUADRATIC),
        "Insertion Sort: Best case for already sorted array, quadratic for "
        "random/reverse sorted arrays.",
    ),
    "Binary Search": (
        CaseSplit(GrowthClass.CONSTANT, GrowthClass.LOGARITHMIC, GrowthClass.LOGARITHMIC),
        "Binary Search: Best case when target is at middle, logarithmic for other cases.",
    ),
}

_EXPLANATIONS = {
    AgreementLevel.HIGH: "Perfect agreement between {signals}.",
    AgreementLevel.MEDIUM: "Partial agreement between analyses. {detail}",
    AgreementLevel.LOW: "Limited agreement between analyses. Results suggest different "
    "complexity behaviors.",
    AgreementLevel.CONFLICT: "Significant disagreement between analyses. Manual review "
    "recommended.",
}


class Signal:
    """One labelled estimate taking part in the agreement vote."""

    __slots__ = ("source", "growth", "confidence")

    def __init__(self, source: str, growth: GrowthClass, confidence: float):
        self.source = source
        self.growth = growth
        self.confidence = confidence

    def __repr__(self) -> str:
        return f"Signal({self.source}, {self.growth.label}, {self.confidence:.2f})"


class Reconciler:
    """
    Service merging independent estimates into a :class:`FinalVerdict`.

    The service is stateless; one instance can reconcile any number of runs.
    """

    def __init__(self, include_case_analysis: bool = True):
        self.include_case_analysis = include_case_analysis

    def reconcile(
        self,
        structural: StructuralVerdict,
        regression: Optional[RegressionAnalysis] = None,
        sampling: Optional[SamplingResult] = None,
        *,
        sampling_enabled: bool = True,
        include_case_analysis: Optional[bool] = None,
    ) -> FinalVerdict:
        """
        Produce the final verdict for one analysis run.

        Args:
            structural: Aggregated structural verdict
            regression: Curve-fitting result, ``None`` when regression did not run
            sampling: Sampler output, ``None`` when sampling did not run
            sampling_enabled: Whether the caller asked for sampling
            include_case_analysis: Overrides the instance setting

        Returns:
            FinalVerdict with confidence breakdown, bounds and advisories
        """
        with_cases = (
            self.include_case_analysis
            if include_case_analysis is None
            else include_case_analysis
        )
        breakdown = self._breakdown(structural, regression)

        if structural.is_trivial:
            return self._trivial_verdict(structural, breakdown, with_cases)

        if sampling_enabled and sampling is not None and not sampling.succeeded:
            logger.warning("Reconciliation aborted: %s", sampling.error_message)
            verdict = FinalVerdict.unknown(
                f"Empirical analysis error: {sampling.error_message}",
                structural_confidence=structural.confidence,
            )
            verdict.breakdown = breakdown
            verdict.space_class = structural.space_class
            verdict.recommendations = list(structural.recommendations)
            verdict.warnings = _unique(list(structural.warnings) + verdict.warnings)
            return verdict

        signals = self.collect_signals(structural, regression)
        agreement = self.assess_agreement(signals)
        time_class, time_label, confidence, lower, upper = self.determine_final(
            agreement.level, signals, structural
        )

        verdict = FinalVerdict(
            time_class=time_class,
            time_label=time_label,
            space_class=structural.space_class,
            confidence=round(confidence, 4),
            breakdown=breakdown,
            lower_bound=lower,
            upper_bound=upper,
            agreement=agreement,
            validation=self.validate(structural, regression, sampling, agreement.level),
        )

        if with_cases:
            verdict.cases, verdict.case_explanation = self.analyze_cases(structural)

        verdict.recommendations = self.generate_recommendations(
            structural, regression, agreement.level, time_class
        )
        verdict.warnings = self.generate_warnings(
            structural,
            regression,
            sampling,
            verdict.validation,
            agreement.level,
            sampling_enabled,
        )

        logger.info(
            "Reconciled %s (agreement=%s, confidence=%.2f)",
            verdict.time_label,
            agreement.level.value,
            verdict.confidence,
        )
        return verdict

    def _trivial_verdict(
        self,
        structural: StructuralVerdict,
        breakdown: ConfidenceBreakdown,
        with_cases: bool,
    ) -> FinalVerdict:
        verdict = FinalVerdict(
            time_class=GrowthClass.CONSTANT,
            time_label=GrowthClass.CONSTANT.label,
            space_class=GrowthClass.CONSTANT,
            confidence=structural.confidence,
            breakdown=breakdown,
            lower_bound=GrowthClass.CONSTANT,
            upper_bound=GrowthClass.CONSTANT,
            agreement=AgreementAssessment(
                level=AgreementLevel.HIGH,
                explanation="Empty program: no statements contribute to running time.",
                consensus=True,
            ),
            validation=ValidationFlags(
                structural_valid=False,
                regression_valid=False,
                cross_valid=True,
                overall_reliability=0.2,
            ),
            recommendations=list(structural.recommendations),
            warnings=list(structural.warnings),
        )
        if with_cases:
            verdict.cases = CaseSplit.uniform(GrowthClass.CONSTANT)
            verdict.case_explanation = "Empty program: constant in every case."
        return verdict

    # ----- signals ---------------------------------------------------------

    @staticmethod
    def _breakdown(
        structural: StructuralVerdict, regression: Optional[RegressionAnalysis]
    ) -> ConfidenceBreakdown:
        best = structural.best_match
        return ConfidenceBreakdown(
            structural=structural.confidence,
            pattern=best.confidence if best is not None else None,
            regression=(
                regression.best_fit.confidence
                if regression is not None and regression.best_fit is not None
                else None
            ),
        )

    def collect_signals(
        self,
        structural: StructuralVerdict,
        regression: Optional[RegressionAnalysis],
    ) -> List[Signal]:
        """Known labels only; UNKNOWN and absent signals abstain."""

        signals: List[Signal] = []
        structural_class = GrowthLattice.parse_label(structural.time_class)
        if structural_class.is_known:
            signals.append(Signal("structural", structural_class, structural.confidence))

        best = structural.best_match
        if best is not None:
            pattern_class = GrowthLattice.parse_label(best.time_class)
            if pattern_class.is_known:
                signals.append(Signal("pattern", pattern_class, best.confidence))

        if regression is not None and regression.best_fit is not None:
            fitted = GrowthLattice.parse_label(regression.best_class)
            if fitted.is_known:
                signals.append(Signal("regression", fitted, regression.best_fit.confidence))
        return signals

    # ----- agreement -------------------------------------------------------

    def assess_agreement(self, signals: Sequence[Signal]) -> AgreementAssessment:
        if len(signals) < 2:
            return AgreementAssessment(
                level=AgreementLevel.LOW,
                explanation="Fewer than two independent estimates available - "
                "agreement cannot be assessed.",
                consensus=False,
            )

        classes = [signal.growth for signal in signals]
        spread = GrowthLattice.steps(min(classes), max(classes))

        if len(set(classes)) == 1:
            sources = ", ".join(signal.source for signal in signals)
            return AgreementAssessment(
                level=AgreementLevel.HIGH,
                explanation=_EXPLANATIONS[AgreementLevel.HIGH].format(signals=sources),
                consensus=True,
            )

        if len(set(classes)) < len(classes):
            return AgreementAssessment(
                level=AgreementLevel.MEDIUM,
                explanation=_EXPLANATIONS[AgreementLevel.MEDIUM].format(
                    detail="Two methods agree."
                ),
                consensus=True,
            )

        if spread <= COMPATIBLE_STEPS:
            return AgreementAssessment(
                level=AgreementLevel.MEDIUM,
                explanation=_EXPLANATIONS[AgreementLevel.MEDIUM].format(
                    detail="Compatible complexity classes within reasonable bounds."
                ),
                consensus=True,
            )

        level = AgreementLevel.CONFLICT if spread > CONFLICT_STEPS else AgreementLevel.LOW
        return AgreementAssessment(
            level=level, explanation=_EXPLANATIONS[level], consensus=False
        )

    # ----- final class -----------------------------------------------------

    def determine_final(
        self,
        level: AgreementLevel,
        signals: Sequence[Signal],
        structural: StructuralVerdict,
    ) -> Tuple[GrowthClass, str, float, GrowthClass, GrowthClass]:
        """Final class, label, confidence and bound pair for an agreement level."""

        by_source = {signal.source: signal for signal in signals}
        structural_signal = by_source.get("structural")
        regression_signal = by_source.get("regression")

        if level is AgreementLevel.CONFLICT:
            if structural_signal is not None and regression_signal is not None:
                pair = (structural_signal.growth, regression_signal.growth)
            else:
                classes = [signal.growth for signal in signals]
                pair = (min(classes), max(classes))
            label = f"Between {pair[0].label} and {pair[1].label}"
            return (
                GrowthClass.UNKNOWN,
                label,
                CONFLICT_CONFIDENCE,
                GrowthLattice.min(*pair),
                GrowthLattice.max(*pair),
            )

        if level is AgreementLevel.HIGH:
            agreed = signals[0].growth
            confidences = [MAX_CONFIDENCE]
            if structural_signal is not None:
                confidences.append(structural_signal.confidence)
            if regression_signal is not None:
                confidences.append(regression_signal.confidence)
            return agreed, agreed.label, min(confidences), agreed, agreed

        lower, upper = self._bounds(signals, structural.time_class)

        if level is AgreementLevel.MEDIUM:
            chosen = max(signals, key=lambda signal: signal.confidence)
            return (
                chosen.growth,
                chosen.growth.label,
                chosen.confidence * MEDIUM_PENALTY,
                lower,
                upper,
            )

        if regression_signal is not None:
            chosen_class = regression_signal.growth
            confidence = regression_signal.confidence
        elif structural_signal is not None:
            chosen_class = structural_signal.growth
            confidence = structural_signal.confidence
        elif signals:
            chosen_class = signals[0].growth
            confidence = signals[0].confidence
        else:
            chosen_class = structural.time_class
            confidence = 0.0
        confidence = min(LOW_REGRESSION_WEIGHT * confidence, LOW_CONFIDENCE_CAP)
        if not signals:
            lower = upper = chosen_class
        return chosen_class, chosen_class.label, confidence, lower, upper

    @staticmethod
    def _bounds(
        signals: Sequence[Signal], fallback: GrowthClass
    ) -> Tuple[GrowthClass, GrowthClass]:
        classes = [signal.growth for signal in signals] or [fallback]
        return GrowthLattice.min(*classes), GrowthLattice.max(*classes)

    # ----- cases -----------------------------------------------------------

    def analyze_cases(self, structural: StructuralVerdict) -> Tuple[CaseSplit, str]:
        """Best/average/worst split with a short explanation."""

        base = structural.time_class
        names = {match.name: match for match in structural.matches}

        for name, (cases, explanation) in _CASE_TABLE.items():
            if name in names:
                return cases, explanation

        for match in structural.matches:
            if match.cases is not None:
                return match.cases, f"{match.name}: case split of the recognized algorithm."

        recursive = [func for func in structural.functions if func.is_recursive]
        if recursive:
            recursion_type = recursive[0].recursion_type
            if recursion_type is RecursionType.BINARY_TREE:
                return (
                    CaseSplit.uniform(GrowthClass.EXPONENTIAL),
                    "Binary tree recursion: Exponential complexity in all cases due to "
                    "overlapping subproblems.",
                )
            if recursion_type is RecursionType.DIVIDE_AND_CONQUER:
                return (
                    CaseSplit.uniform(GrowthClass.LINEARITHMIC),
                    "Divide and conquer: Consistent logarithmic depth with linear work "
                    "per level.",
                )
            return (
                CaseSplit.uniform(base),
                "Recursive algorithm: Complexity depends on recursion depth and work "
                "per call.",
            )

        has_conditionals = any(
            "conditional" in func.complexity.factors for func in structural.functions
        )
        if has_conditionals and structural.loops:
            return (
                CaseSplit(
                    best=GrowthLattice.simplify(base),
                    average=base,
                    worst=GrowthLattice.complicate(base),
                ),
                "Algorithm with conditionals: Complexity varies based on input "
                "characteristics and branch execution.",
            )

        return (
            CaseSplit.uniform(base),
            "Consistent complexity across all cases based on algorithm structure.",
        )

    # ----- validation ------------------------------------------------------

    def validate(
        self,
        structural: StructuralVerdict,
        regression: Optional[RegressionAnalysis],
        sampling: Optional[SamplingResult],
        level: AgreementLevel,
    ) -> ValidationFlags:
        structural_valid = (
            structural.confidence > 0.7
            and len(structural.functions) > 0
            and structural.time_class.is_known
        )
        regression_valid = (
            regression is not None
            and regression.best_fit is not None
            and regression.best_fit.r_squared > 0.5
            and regression.sample_size >= 5
            and (sampling is None or sampling.succeeded)
        )
        cross_valid = level in (AgreementLevel.HIGH, AgreementLevel.MEDIUM)
        reliability = (
            (0.4 if structural_valid else 0.0)
            + (0.4 if regression_valid else 0.0)
            + (0.2 if cross_valid else 0.0)
        )
        return ValidationFlags(
            structural_valid=structural_valid,
            regression_valid=regression_valid,
            cross_valid=cross_valid,
            overall_reliability=round(reliability, 4),
        )

    # ----- advisories ------------------------------------------------------

    def generate_recommendations(
        self,
        structural: StructuralVerdict,
        regression: Optional[RegressionAnalysis],
        level: AgreementLevel,
        final_class: GrowthClass,
    ) -> List[str]:
        recommendations = list(structural.recommendations)

        if regression is not None:
            if regression.best_fit is not None and regression.best_fit.r_squared < 0.7:
                recommendations.append(
                    "Consider running more test iterations to improve empirical confidence."
                )
            if regression.recommendation:
                recommendations.append(regression.recommendation)

        if level is AgreementLevel.CONFLICT:
            recommendations.append(
                "Significant disagreement detected - verify algorithm implementation "
                "and test conditions."
            )
        if level is AgreementLevel.LOW:
            recommendations.append(
                "Consider profiling with larger input sizes to better identify "
                "complexity behavior."
            )

        if final_class in (GrowthClass.QUADRATIC, GrowthClass.CUBIC):
            recommendations.append(
                "Consider algorithmic optimizations to reduce polynomial complexity."
            )
        if final_class in (GrowthClass.EXPONENTIAL, GrowthClass.FACTORIAL):
            recommendations.append(
                "Exponential complexity detected - consider dynamic programming or "
                "memoization."
            )
        return _unique(recommendations)

    def generate_warnings(
        self,
        structural: StructuralVerdict,
        regression: Optional[RegressionAnalysis],
        sampling: Optional[SamplingResult],
        validation: ValidationFlags,
        level: AgreementLevel,
        sampling_enabled: bool,
    ) -> List[str]:
        warnings = list(structural.warnings)

        if sampling is not None:
            if sampling.error_message:
                warnings.append(f"Empirical analysis error: {sampling.error_message}")
            if sampling.truncated:
                warnings.append(
                    f"Sampling stopped at the time ceiling after {len(sampling.samples)} "
                    "sizes - regression used a truncated sample sequence."
                )
        if regression is not None and regression.error_message:
            warnings.append(f"Regression analysis error: {regression.error_message}")

        if not validation.structural_valid:
            warnings.append("Static analysis validation failed - results may be unreliable.")
        if sampling_enabled and not validation.regression_valid:
            warnings.append(
                "Empirical analysis validation failed - insufficient or poor quality data."
            )
        if validation.overall_reliability < 0.5:
            warnings.append(
                "Low overall reliability - results should be interpreted with caution."
            )
        if level is AgreementLevel.CONFLICT:
            warnings.append(
                "Conflicting complexity estimates - manual verification recommended."
            )
        return _unique(warnings)


def merge_external_opinion(
    verdict: FinalVerdict,
    opinion: ExternalOpinion,
    policy: OpinionPolicy = OpinionPolicy.CORROBORATE,
) -> FinalVerdict:
    """
    Fold an externally produced opinion into a verdict.

    ``prefer_external`` replaces class, cases and bounds with the opinion's;
    ``corroborate`` only raises confidence on agreement and widens the bounds
    on disagreement. The input verdict is left untouched.

    Raises:
        ValueError: If ``policy`` is not a known policy
    """
    policy = OpinionPolicy(policy)
    external = GrowthLattice.parse_label(opinion.time_label)
    merged = replace(
        verdict,
        recommendations=list(verdict.recommendations),
        warnings=list(verdict.warnings),
        external_opinion=opinion,
    )

    if not external.is_known:
        merged.warnings.append(
            f"External opinion label '{opinion.time_label}' could not be normalized - ignored."
        )
        return merged

    if policy is OpinionPolicy.PREFER_EXTERNAL:
        merged.time_class = external
        merged.time_label = external.label
        merged.confidence = min(opinion.confidence, MAX_CONFIDENCE)
        merged.lower_bound = merged.upper_bound = external
        space = GrowthLattice.parse_label(opinion.space_label)
        if space.is_known:
            merged.space_class = space
        merged.cases = _external_cases(opinion, external)
        if opinion.explanation:
            merged.case_explanation = opinion.explanation
        return merged

    if external is verdict.time_class:
        merged.confidence = min(MAX_CONFIDENCE, max(verdict.confidence, opinion.confidence))
        return merged

    merged.lower_bound = GrowthLattice.min(verdict.lower_bound, external)
    merged.upper_bound = GrowthLattice.max(verdict.upper_bound, external)
    merged.warnings.append(
        f"External opinion ({external.label}) disagrees with the estimate "
        f"({verdict.time_label}) - bounds widened."
    )
    return merged


def _external_cases(opinion: ExternalOpinion, fallback: GrowthClass) -> CaseSplit:
    labels = (opinion.best_case, opinion.average_case, opinion.worst_case)
    parsed = [GrowthLattice.parse_label(label) for label in labels]
    if all(growth.is_known for growth in parsed):
        return CaseSplit(*parsed)
    return CaseSplit.uniform(fallback)


def _unique(items: Sequence[str]) -> List[str]:
    return list(dict.fromkeys(items))
