import pytest

from complexity_estimator.domain.models.growth import GrowthClass
from complexity_estimator.domain.models.source import LogicalLine, SourceView
from complexity_estimator.domain.services.pattern_detectors import PatternMatcher, predicates
from complexity_estimator.infrastructure.parser.language_parser import build_source_view
from conftest import (
    DP_FIBONACCI,
    GRAPH_DFS,
    HEAP_SORT,
    INORDER_TRAVERSAL,
    INSERTION_SORT,
    LINEAR_SEARCH,
    PYTHON_BFS,
    PYTHON_BINARY_SEARCH,
    PYTHON_DIJKSTRA,
    PYTHON_INORDER,
    QUICK_SORT,
    nested_loops,
)


def _matches(code):
    return {match.name: match for match in PatternMatcher().detect_all(build_source_view(code))}


def test_bubble_sort_is_recognized(bubble_sort):
    matches = _matches(bubble_sort)
    assert list(matches) == ["Bubble Sort"]
    bubble = matches["Bubble Sort"]
    assert bubble.time_class is GrowthClass.QUADRATIC
    assert bubble.space_class is GrowthClass.CONSTANT
    assert bubble.confidence == 0.85


def test_binary_search_is_recognized(binary_search):
    matches = _matches(binary_search)
    assert "Binary Search" in matches
    assert matches["Binary Search"].time_class is GrowthClass.LOGARITHMIC
    assert matches["Binary Search"].confidence == 0.95
    assert "Merge Sort" not in matches
    assert "Linear Search" not in matches


def test_merge_sort_is_recognized(merge_sort):
    matches = _matches(merge_sort)
    assert "Merge Sort" in matches
    assert matches["Merge Sort"].time_class is GrowthClass.LINEARITHMIC
    assert matches["Merge Sort"].space_class is GrowthClass.LINEAR


def test_plain_loop_matches_nothing_from_the_sorting_catalogue(array_sum):
    names = set(_matches(array_sum))
    assert not names & {"Bubble Sort", "Merge Sort", "Quick Sort", "Binary Search"}


def test_empty_source_has_no_matches():
    assert PatternMatcher().detect_all(build_source_view("")) == []


def test_matches_carry_evidence(bubble_sort):
    bubble = _matches(bubble_sort)["Bubble Sort"]
    assert bubble.evidence
    assert bubble.line_start is not None


@pytest.mark.parametrize(
    "code, name, time_class",
    [
        (QUICK_SORT, "Quick Sort", GrowthClass.LINEARITHMIC),
        (HEAP_SORT, "Heap Sort", GrowthClass.LINEARITHMIC),
        (INSERTION_SORT, "Insertion Sort", GrowthClass.QUADRATIC),
        (LINEAR_SEARCH, "Linear Search", GrowthClass.LINEAR),
        (PYTHON_BINARY_SEARCH, "Binary Search", GrowthClass.LOGARITHMIC),
        (GRAPH_DFS, "Depth-First Search", GrowthClass.LINEAR),
        (PYTHON_BFS, "Breadth-First Search", GrowthClass.LINEAR),
        (PYTHON_DIJKSTRA, "Dijkstra's Shortest Path", GrowthClass.LINEARITHMIC),
        (DP_FIBONACCI, "Dynamic Programming", GrowthClass.LINEAR),
        (INORDER_TRAVERSAL, "Tree Traversal", GrowthClass.LINEAR),
        (PYTHON_INORDER, "Tree Traversal", GrowthClass.LINEAR),
    ],
)
def test_catalogue_entry_is_recognized(code, name, time_class):
    matches = _matches(code)
    assert name in matches
    assert matches[name].time_class is time_class


def test_python_binary_search_is_not_a_linear_search():
    matches = _matches(PYTHON_BINARY_SEARCH)
    assert "Binary Search" in matches
    assert "Linear Search" not in matches


def test_quick_sort_worst_case_is_quadratic():
    quick = _matches(QUICK_SORT)["Quick Sort"]
    assert quick.cases.best is GrowthClass.LINEARITHMIC
    assert quick.cases.worst is GrowthClass.QUADRATIC


def test_insertion_sort_best_case_is_linear():
    insertion = _matches(INSERTION_SORT)["Insertion Sort"]
    assert insertion.cases.best is GrowthClass.LINEAR


def test_graph_matches_carry_vertex_edge_labels():
    assert _matches(GRAPH_DFS)["Depth-First Search"].time_label == "O(V + E)"
    assert _matches(PYTHON_DIJKSTRA)["Dijkstra's Shortest Path"].time_label == "O((V + E) log V)"


@pytest.mark.parametrize("depth", [1, 2, 3])
def test_loop_depth_is_read_from_brace_lines(depth):
    assert predicates.lexical_loop_depth(build_source_view(nested_loops(depth))) == depth


def test_loop_depth_ignores_parser_loop_summary():
    lines = [
        LogicalLine(1, "for i in range(n):", 0),
        LogicalLine(2, "for j in range(n):", 4),
        LogicalLine(3, "total += grid[i][j]", 8),
        LogicalLine(4, "print(total)", 0),
    ]
    view = SourceView(lines=lines, max_loop_depth=0)
    assert predicates.lexical_loop_depth(view) == 2
    assert predicates.NESTED_LOOPS(view)


def test_loop_depth_with_brace_on_following_line():
    lines = [
        LogicalLine(1, "for (i = 0; i < n; i++)", 0),
        LogicalLine(2, "{", 0),
        LogicalLine(3, "for (j = 0; j < n; j++)", 4),
        LogicalLine(4, "count++;", 8),
        LogicalLine(5, "}", 0),
        LogicalLine(6, "while (x > 0)", 0),
        LogicalLine(7, "{", 0),
        LogicalLine(8, "x--;", 4),
        LogicalLine(9, "}", 0),
    ]
    assert predicates.lexical_loop_depth(SourceView(lines=lines)) == 2


def test_do_while_tail_is_not_a_second_loop():
    lines = [
        LogicalLine(1, "do {", 0),
        LogicalLine(2, "x--;", 4),
        LogicalLine(3, "}", 0),
        LogicalLine(4, "while (x > 0);", 0),
    ]
    assert predicates.lexical_loop_depth(SourceView(lines=lines)) == 1
