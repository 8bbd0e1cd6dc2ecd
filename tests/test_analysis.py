import threading

from complexity_estimator import (
    AnalysisOptions,
    AnalysisStatus,
    GrowthClass,
    analyze,
)
from complexity_estimator.domain.models.analysis import AgreementLevel
from complexity_estimator.domain.services.sampling import DeterministicCostModel
from complexity_estimator.shared.config import settings
from complexity_estimator.shared.exceptions import ErrorKind
from conftest import FIBONACCI, INORDER_TRAVERSAL, PYTHON_BINARY_SEARCH

NO_SAMPLING = {"enable_sampling": False}
SMALL_SIZES = [2, 4, 6, 8, 10, 12, 14, 16]


def _kinds(report):
    return [issue.kind for issue in report.issues]


def test_empty_input_is_constant():
    report = analyze("")
    assert report.status is AnalysisStatus.COMPLETED
    assert report.verdict.time_class is GrowthClass.CONSTANT
    assert report.verdict.confidence == 1.0
    assert report.structural.functions == []
    assert report.structural.loops == []
    assert report.sampling is None
    assert report.regression is None


def test_bubble_sort_without_sampling(bubble_sort):
    report = analyze(bubble_sort, NO_SAMPLING)
    assert report.status is AnalysisStatus.COMPLETED
    assert report.structural.best_match.name == "Bubble Sort"
    assert report.structural.time_class is GrowthClass.QUADRATIC
    assert report.structural.space_class is GrowthClass.CONSTANT
    assert report.verdict.time_class is GrowthClass.QUADRATIC
    assert report.verdict.agreement.level is AgreementLevel.HIGH
    assert report.sampling is None
    assert report.tree is not None
    assert report.metadata.lines_of_code == 11


def test_binary_search_without_sampling(binary_search):
    report = analyze(binary_search, AnalysisOptions(enable_sampling=False))
    names = [match.name for match in report.structural.matches]
    assert "Binary Search" in names
    assert "Merge Sort" not in names
    assert report.verdict.time_class is GrowthClass.LOGARITHMIC
    assert report.verdict.cases.best is GrowthClass.CONSTANT


def test_python_binary_search_without_sampling():
    report = analyze(PYTHON_BINARY_SEARCH, NO_SAMPLING)
    names = [match.name for match in report.structural.matches]
    assert "Binary Search" in names
    assert "Linear Search" not in names
    assert report.verdict.time_class is GrowthClass.LOGARITHMIC


def test_tree_traversal_without_sampling_agrees():
    report = analyze(INORDER_TRAVERSAL, NO_SAMPLING)
    assert report.structural.tree_class is GrowthClass.EXPONENTIAL
    assert report.structural.time_class is GrowthClass.LINEAR
    assert report.verdict.time_class is GrowthClass.LINEAR
    assert report.verdict.agreement.level is AgreementLevel.HIGH


def test_binary_recursion_with_seeded_sampling_is_exponential():
    for seed in (1, 2, 3):
        report = analyze(FIBONACCI, {"seed": seed})
        assert report.regression.best_class is GrowthClass.EXPONENTIAL
        assert report.verdict.time_class is GrowthClass.EXPONENTIAL


def test_bubble_sort_with_seeded_sampling(bubble_sort):
    options = {"seed": 11}
    first = analyze(bubble_sort, options)
    second = analyze(bubble_sort, options)
    assert first.status is AnalysisStatus.COMPLETED
    assert first.sampling.sizes == settings.default_sample_sizes
    assert first.sampling.costs == second.sampling.costs
    assert first.regression.best_class is GrowthClass.QUADRATIC
    assert first.verdict.time_class is GrowthClass.QUADRATIC
    assert first.verdict.time_label == second.verdict.time_label


def test_disagreeing_cost_model_is_a_conflict(array_sum):
    report = analyze(
        array_sum,
        {"sample_sizes": SMALL_SIZES, "seed": 1},
        cost_model=DeterministicCostModel(GrowthClass.EXPONENTIAL, coefficient=0.002),
    )
    assert report.structural.tree_class is GrowthClass.LINEAR
    assert report.regression.best_class is GrowthClass.EXPONENTIAL
    assert report.verdict.agreement.level is AgreementLevel.CONFLICT
    assert report.verdict.confidence == 0.3
    assert report.verdict.bounds == (GrowthClass.LINEAR, GrowthClass.EXPONENTIAL)


def test_too_few_sizes_gives_unknown(array_sum):
    report = analyze(array_sum, {"sample_sizes": [10, 20]})
    assert report.status is AnalysisStatus.COMPLETED
    assert report.verdict.time_class is GrowthClass.UNKNOWN
    assert report.verdict.validation.overall_reliability == 0.0
    assert report.regression is None
    assert ErrorKind.INSUFFICIENT_SAMPLES in _kinds(report)


def test_oversized_input_is_rejected():
    report = analyze("x" * (settings.max_input_length + 1))
    assert report.status is AnalysisStatus.REJECTED
    assert report.verdict.time_class is GrowthClass.UNKNOWN
    assert report.structural is None
    assert _kinds(report) == [ErrorKind.INPUT_TOO_LARGE]


def test_invalid_options_are_rejected(array_sum):
    report = analyze(array_sum, {"sample_sizes": [10, 5]})
    assert report.status is AnalysisStatus.REJECTED
    assert _kinds(report) == [ErrorKind.INVALID_OPTIONS]

    report = analyze(array_sum, {"no_such_option": True})
    assert report.status is AnalysisStatus.REJECTED


def test_cancellation_before_parsing(bubble_sort):
    event = threading.Event()
    event.set()
    report = analyze(bubble_sort, cancel_event=event)
    assert report.status is AnalysisStatus.CANCELLED
    assert report.verdict.time_class is GrowthClass.UNKNOWN
    assert report.structural is None
    assert ErrorKind.CANCELLED in _kinds(report)


def test_cancellation_after_aggregation(bubble_sort):
    events = []

    def on_event(stage, agent, status, payload):
        events.append((stage, status))

    def cancel_after_aggregation():
        return ("aggregation", "completed") in events

    report = analyze(
        bubble_sort, cancel_event=cancel_after_aggregation, event_callback=on_event
    )
    assert report.status is AnalysisStatus.CANCELLED
    assert report.structural is not None
    assert report.sampling is None
    assert ("sampling", "started") not in events


def test_stage_events_without_sampling(bubble_sort):
    events = []
    analyze(
        bubble_sort,
        NO_SAMPLING,
        event_callback=lambda stage, agent, status, payload: events.append((stage, status)),
    )
    started = [stage for stage, status in events if status == "started"]
    assert started == [
        "validation",
        "parsing",
        "pattern_matching",
        "aggregation",
        "reconciliation",
    ]
    assert all(status != "failed" for _, status in events)


def test_unbalanced_source_is_tolerated():
    report = analyze(
        "void f(int n) {\n    for (int i = 0; i < n; i++) {\n        total++;\n}\n",
        NO_SAMPLING,
    )
    assert report.status is AnalysisStatus.COMPLETED
    assert report.verdict.time_class is GrowthClass.LINEAR
    assert ErrorKind.PARSE_TOLERANCE in _kinds(report)
    assert any(warning.startswith("Parser:") for warning in report.verdict.warnings)
