import pytest

from complexity_estimator.domain.models.analysis import (
    AgreementLevel,
    AlgorithmMatch,
    CaseSplit,
    DataQuality,
    ExternalOpinion,
    FitResult,
    FunctionSummary,
    LoopSummary,
    OpinionPolicy,
    RegressionAnalysis,
    SamplingResult,
    StructuralVerdict,
)
from complexity_estimator.domain.models.growth import GrowthClass
from complexity_estimator.domain.models.syntax import ComplexityInfo, RecursionType
from complexity_estimator.domain.services.reconciler import (
    Reconciler,
    Signal,
    merge_external_opinion,
)


def structural(time_class, confidence=0.9, **kwargs):
    kwargs.setdefault("space_class", GrowthClass.CONSTANT)
    return StructuralVerdict(
        time_class=time_class,
        confidence=confidence,
        tree_class=time_class,
        tree_confidence=confidence,
        **kwargs,
    )


def regression(growth_class, confidence=0.8, r_squared=0.98, sample_size=7):
    fit = FitResult(
        growth_class=growth_class,
        coefficient=0.002,
        r_squared=r_squared,
        standard_error=0.1,
        p_value=0.001,
        confidence=confidence,
    )
    return RegressionAnalysis(
        best_fit=fit,
        all_fits=[fit],
        data_quality=DataQuality(sample_size=sample_size, variance=1.0, monotonicity=1.0),
    )


def match(name, time_class, confidence=0.9, cases=None):
    return AlgorithmMatch(
        name=name,
        description=name,
        time_class=time_class,
        space_class=GrowthClass.CONSTANT,
        confidence=confidence,
        cases=cases,
    )


def summary(name="f", factors=None, recursive=False, recursion_type=RecursionType.NONE):
    return FunctionSummary(
        name=name,
        complexity=ComplexityInfo(
            time_class=GrowthClass.QUADRATIC, confidence=0.9, factors=factors or []
        ),
        is_recursive=recursive,
        recursion_type=recursion_type,
    )


def loop():
    return LoopSummary(
        kind="for",
        complexity=ComplexityInfo(time_class=GrowthClass.LINEAR),
        body_complexity=ComplexityInfo(),
        nesting_level=1,
        iteration_pattern="linear",
    )


@pytest.fixture
def reconciler():
    return Reconciler()


def test_full_agreement_is_high(reconciler):
    verdict = reconciler.reconcile(
        structural(GrowthClass.LINEAR, 0.9), regression(GrowthClass.LINEAR, 0.8)
    )
    assert verdict.agreement.level is AgreementLevel.HIGH
    assert verdict.time_class is GrowthClass.LINEAR
    assert verdict.confidence == pytest.approx(0.8)
    assert verdict.bounds == (GrowthClass.LINEAR, GrowthClass.LINEAR)
    assert verdict.breakdown.regression == 0.8


def test_high_confidence_is_capped(reconciler):
    verdict = reconciler.reconcile(
        structural(GrowthClass.LINEAR, 1.0), regression(GrowthClass.LINEAR, 1.0)
    )
    assert verdict.confidence == pytest.approx(0.95)


def test_adjacent_classes_are_medium(reconciler):
    verdict = reconciler.reconcile(
        structural(GrowthClass.LINEAR, 0.9), regression(GrowthClass.LINEARITHMIC, 0.6)
    )
    assert verdict.agreement.level is AgreementLevel.MEDIUM
    assert verdict.time_class is GrowthClass.LINEAR
    assert verdict.confidence == pytest.approx(0.72)
    assert verdict.bounds == (GrowthClass.LINEAR, GrowthClass.LINEARITHMIC)


def test_three_steps_apart_is_low(reconciler):
    verdict = reconciler.reconcile(
        structural(GrowthClass.LINEAR, 0.9), regression(GrowthClass.CUBIC, 0.8)
    )
    assert verdict.agreement.level is AgreementLevel.LOW
    assert verdict.time_class is GrowthClass.CUBIC
    assert verdict.confidence == pytest.approx(0.48)
    assert verdict.bounds == (GrowthClass.LINEAR, GrowthClass.CUBIC)
    assert any("larger input sizes" in text for text in verdict.recommendations)


def test_distant_classes_conflict(reconciler):
    verdict = reconciler.reconcile(
        structural(GrowthClass.LINEAR, 0.9), regression(GrowthClass.EXPONENTIAL, 0.8)
    )
    assert verdict.agreement.level is AgreementLevel.CONFLICT
    assert verdict.time_class is GrowthClass.UNKNOWN
    assert verdict.time_label == "Between O(n) and O(2^n)"
    assert verdict.confidence == pytest.approx(0.3)
    assert verdict.bounds == (GrowthClass.LINEAR, GrowthClass.EXPONENTIAL)
    assert any("manual verification" in text for text in verdict.warnings)


def test_two_of_three_agree_is_medium(reconciler):
    base = structural(
        GrowthClass.QUADRATIC,
        0.7,
        matches=[match("Bubble Sort", GrowthClass.QUADRATIC, 0.85)],
    )
    verdict = reconciler.reconcile(base, regression(GrowthClass.CUBIC, 0.6))
    assert verdict.agreement.level is AgreementLevel.MEDIUM
    assert verdict.time_class is GrowthClass.QUADRATIC
    assert verdict.confidence == pytest.approx(0.85 * 0.8)


def test_single_signal_is_low(reconciler):
    verdict = reconciler.reconcile(
        structural(GrowthClass.QUADRATIC, 0.9), sampling_enabled=False
    )
    assert verdict.agreement.level is AgreementLevel.LOW
    assert verdict.time_class is GrowthClass.QUADRATIC
    assert verdict.confidence == pytest.approx(0.5)
    assert not any("Empirical analysis validation" in text for text in verdict.warnings)


def test_pattern_and_tree_agree_without_sampling(reconciler):
    base = structural(
        GrowthClass.QUADRATIC,
        0.88,
        matches=[match("Bubble Sort", GrowthClass.QUADRATIC, 0.85)],
    )
    verdict = reconciler.reconcile(base, sampling_enabled=False)
    assert verdict.agreement.level is AgreementLevel.HIGH
    assert verdict.confidence == pytest.approx(0.88)


def test_structural_signal_follows_pattern_precedence(reconciler):
    base = StructuralVerdict(
        time_class=GrowthClass.LINEAR,
        confidence=0.85,
        tree_class=GrowthClass.EXPONENTIAL,
        tree_confidence=0.7,
        space_class=GrowthClass.LINEAR,
        matches=[match("Tree Traversal", GrowthClass.LINEAR, 0.85)],
    )
    signals = reconciler.collect_signals(base, None)
    assert [(signal.source, signal.growth) for signal in signals] == [
        ("structural", GrowthClass.LINEAR),
        ("pattern", GrowthClass.LINEAR),
    ]

    verdict = reconciler.reconcile(base, sampling_enabled=False)
    assert verdict.agreement.level is AgreementLevel.HIGH
    assert verdict.time_class is GrowthClass.LINEAR
    assert verdict.confidence == pytest.approx(0.85)


def test_unknown_tree_abstains(reconciler):
    base = structural(GrowthClass.UNKNOWN, 0.4)
    signals = reconciler.collect_signals(base, regression(GrowthClass.LINEAR))
    assert [signal.source for signal in signals] == ["regression"]


def test_trivial_program(reconciler):
    base = structural(GrowthClass.CONSTANT, 1.0, is_trivial=True)
    verdict = reconciler.reconcile(base)
    assert verdict.time_class is GrowthClass.CONSTANT
    assert verdict.confidence == 1.0
    assert verdict.agreement.level is AgreementLevel.HIGH
    assert verdict.validation.overall_reliability == pytest.approx(0.2)
    assert verdict.cases == CaseSplit.uniform(GrowthClass.CONSTANT)


def test_failed_sampling_gives_unknown(reconciler):
    sampling = SamplingResult(error_message="Insufficient data points for empirical analysis")
    verdict = reconciler.reconcile(structural(GrowthClass.LINEAR), sampling=sampling)
    assert verdict.time_class is GrowthClass.UNKNOWN
    assert verdict.validation.overall_reliability == 0.0
    assert verdict.breakdown.structural == 0.9
    assert any(text.startswith("Empirical analysis error:") for text in verdict.warnings)


def test_validation_flags(reconciler):
    base = structural(GrowthClass.LINEAR, 0.9, functions=[summary()])
    verdict = reconciler.reconcile(base, regression(GrowthClass.LINEAR, 0.8))
    assert verdict.validation.structural_valid
    assert verdict.validation.regression_valid
    assert verdict.validation.cross_valid
    assert verdict.validation.overall_reliability == pytest.approx(1.0)


def test_small_sample_regression_is_not_valid(reconciler):
    verdict = reconciler.reconcile(
        structural(GrowthClass.LINEAR), regression(GrowthClass.LINEAR, sample_size=3)
    )
    assert not verdict.validation.regression_valid


def test_case_table_takes_priority(reconciler):
    base = structural(
        GrowthClass.LINEARITHMIC,
        matches=[match("Quick Sort", GrowthClass.LINEARITHMIC)],
    )
    cases, explanation = reconciler.analyze_cases(base)
    assert cases == CaseSplit(
        GrowthClass.LINEARITHMIC, GrowthClass.LINEARITHMIC, GrowthClass.QUADRATIC
    )
    assert explanation.startswith("Quick Sort")


def test_match_cases_are_used(reconciler):
    split = CaseSplit(GrowthClass.LINEAR, GrowthClass.QUADRATIC, GrowthClass.QUADRATIC)
    base = structural(GrowthClass.QUADRATIC, matches=[match("Other", GrowthClass.QUADRATIC, cases=split)])
    assert reconciler.analyze_cases(base)[0] == split


def test_binary_recursion_cases(reconciler):
    base = structural(
        GrowthClass.EXPONENTIAL,
        functions=[summary("fib", recursive=True, recursion_type=RecursionType.BINARY_TREE)],
    )
    assert reconciler.analyze_cases(base)[0] == CaseSplit.uniform(GrowthClass.EXPONENTIAL)


def test_conditionals_spread_the_cases(reconciler):
    base = structural(
        GrowthClass.QUADRATIC, functions=[summary(factors=["conditional"])], loops=[loop()]
    )
    cases, _ = reconciler.analyze_cases(base)
    assert cases.best is GrowthClass.LINEAR
    assert cases.average is GrowthClass.QUADRATIC
    assert cases.worst is GrowthClass.CUBIC


def test_cases_can_be_disabled():
    verdict = Reconciler(include_case_analysis=False).reconcile(
        structural(GrowthClass.LINEAR), regression(GrowthClass.LINEAR)
    )
    assert verdict.cases is None


def test_agreement_needs_two_signals(reconciler):
    assessment = reconciler.assess_agreement([Signal("structural", GrowthClass.LINEAR, 0.9)])
    assert assessment.level is AgreementLevel.LOW
    assert not assessment.consensus


def test_corroborating_opinion_raises_confidence(reconciler):
    verdict = reconciler.reconcile(
        structural(GrowthClass.LINEAR, 0.9), regression(GrowthClass.LINEARITHMIC, 0.6)
    )
    opinion = ExternalOpinion(time_label="O(n)", confidence=0.9)
    merged = merge_external_opinion(verdict, opinion)
    assert merged.confidence == pytest.approx(0.9)
    assert merged.external_opinion is opinion
    assert verdict.confidence == pytest.approx(0.72)


def test_disagreeing_opinion_widens_bounds(reconciler):
    verdict = reconciler.reconcile(
        structural(GrowthClass.LINEAR, 0.9), regression(GrowthClass.LINEAR, 0.8)
    )
    merged = merge_external_opinion(verdict, ExternalOpinion(time_label="quadratic", confidence=0.9))
    assert merged.time_class is GrowthClass.LINEAR
    assert merged.bounds == (GrowthClass.LINEAR, GrowthClass.QUADRATIC)
    assert any("disagrees" in text for text in merged.warnings)
    assert not any("disagrees" in text for text in verdict.warnings)


def test_prefer_external_replaces_class(reconciler):
    verdict = reconciler.reconcile(
        structural(GrowthClass.LINEAR, 0.9), regression(GrowthClass.LINEAR, 0.8)
    )
    opinion = ExternalOpinion(
        time_label="O(n log n)",
        space_label="O(n)",
        confidence=0.99,
        best_case="O(n log n)",
        average_case="O(n log n)",
        worst_case="O(n^2)",
    )
    merged = merge_external_opinion(verdict, opinion, OpinionPolicy.PREFER_EXTERNAL)
    assert merged.time_class is GrowthClass.LINEARITHMIC
    assert merged.space_class is GrowthClass.LINEAR
    assert merged.confidence == pytest.approx(0.95)
    assert merged.cases.worst is GrowthClass.QUADRATIC


def test_unparseable_opinion_is_ignored(reconciler):
    verdict = reconciler.reconcile(
        structural(GrowthClass.LINEAR, 0.9), regression(GrowthClass.LINEAR, 0.8)
    )
    merged = merge_external_opinion(
        verdict, ExternalOpinion(time_label="pretty fast"), "prefer_external"
    )
    assert merged.time_class is GrowthClass.LINEAR
    assert any("could not be normalized" in text for text in merged.warnings)
