from complexity_estimator.domain.models.analysis import (
    AlgorithmMatch,
    ClassSource,
    PatternPrecedence,
)
from complexity_estimator.domain.models.growth import GrowthClass
from complexity_estimator.domain.services.complexity_service import ComplexityAggregator
from complexity_estimator.domain.services.pattern_detectors import PatternMatcher
from complexity_estimator.infrastructure.parser.language_parser import LanguageParser


def _structural(code, precedence=None, matches=None):
    parsed = LanguageParser().parse(code)
    if matches is None:
        matches = PatternMatcher().detect_all(parsed.view)
    return ComplexityAggregator().aggregate(
        parsed.tree,
        matches,
        view=parsed.view,
        call_counts=parsed.call_graph.call_counts,
        mutual_recursion=parsed.call_graph.mutual_recursion(),
        precedence=precedence,
    )


def _cubic_guess():
    return AlgorithmMatch(
        name="Guess",
        description="Low-confidence guess",
        time_class=GrowthClass.CUBIC,
        space_class=GrowthClass.CONSTANT,
        confidence=0.3,
    )


def test_empty_program_is_trivial_constant():
    verdict = _structural("")
    assert verdict.is_trivial
    assert verdict.time_class is GrowthClass.CONSTANT
    assert verdict.space_class is GrowthClass.CONSTANT
    assert verdict.confidence == 1.0
    assert verdict.functions == []
    assert verdict.loops == []


def test_bubble_sort_structural_verdict(bubble_sort):
    verdict = _structural(bubble_sort)
    assert verdict.time_class is GrowthClass.QUADRATIC
    assert verdict.tree_class is GrowthClass.QUADRATIC
    assert verdict.space_class is GrowthClass.CONSTANT
    assert verdict.best_match.name == "Bubble Sort"
    assert [func.name for func in verdict.functions] == ["bubbleSort"]
    assert len(verdict.loops) == 2
    assert 0.0 <= verdict.confidence <= 1.0


def test_pattern_always_overrides_tree(bubble_sort):
    verdict = _structural(bubble_sort, PatternPrecedence.ALWAYS, [_cubic_guess()])
    assert verdict.time_class is GrowthClass.CUBIC
    assert verdict.tree_class is GrowthClass.QUADRATIC
    assert verdict.class_source is ClassSource.PATTERN


def test_pattern_never_keeps_tree(bubble_sort):
    verdict = _structural(bubble_sort, PatternPrecedence.NEVER, [_cubic_guess()])
    assert verdict.time_class is GrowthClass.QUADRATIC
    assert verdict.class_source is ClassSource.STRUCTURE


def test_low_confidence_pattern_loses_when_confident_policy(bubble_sort):
    verdict = _structural(bubble_sort, PatternPrecedence.WHEN_CONFIDENT, [_cubic_guess()])
    assert verdict.time_class is GrowthClass.QUADRATIC


def test_mutual_recursion_is_warned_about():
    code = """
int isEven(int n) {
    if (n == 0) return 1;
    return isOdd(n - 1);
}

int isOdd(int n) {
    if (n == 0) return 0;
    return isEven(n - 1);
}
"""
    verdict = _structural(code)
    assert any("isEven" in warning and "isOdd" in warning for warning in verdict.warnings)
