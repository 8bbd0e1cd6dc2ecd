import pytest

from complexity_estimator.domain.models.growth import GrowthClass
from complexity_estimator.domain.models.syntax import NodeKind, RecursionType
from complexity_estimator.infrastructure.parser import statements
from complexity_estimator.infrastructure.parser.language_parser import LanguageParser
from complexity_estimator.infrastructure.parser.preprocessor import SourceNormalizer
from conftest import MUTUAL_RECURSION, PYTHON_HALVING, nested_loops


@pytest.fixture
def parser():
    return LanguageParser()


@pytest.mark.parametrize(
    "depth, expected",
    [
        (1, GrowthClass.LINEAR),
        (2, GrowthClass.QUADRATIC),
        (3, GrowthClass.CUBIC),
        (4, GrowthClass.CUBIC),
    ],
)
def test_nesting_depth_maps_to_polynomial_class(parser, depth, expected):
    result = parser.parse(nested_loops(depth))
    assert result.tree.complexity.time_class is expected
    assert result.view.max_loop_depth == depth


def test_empty_input_yields_empty_program(parser):
    result = parser.parse("")
    assert result.tree.kind is NodeKind.PROGRAM
    assert result.tree.children == []
    assert result.tree.is_empty
    assert result.tree.complexity.time_class is GrowthClass.CONSTANT
    assert result.diagnostics.warnings == []


def test_bubble_sort_tree(parser, bubble_sort):
    result = parser.parse(bubble_sort)
    assert [span.name for span in result.functions] == ["bubbleSort"]
    assert result.tree.complexity.time_class is GrowthClass.QUADRATIC
    loops = result.tree.find(NodeKind.LOOP)
    assert len(loops) == 2


def test_binary_search_loop_is_logarithmic(parser, binary_search):
    result = parser.parse(binary_search)
    loops = result.tree.find(NodeKind.LOOP)
    assert len(loops) == 1
    assert loops[0].complexity.time_class is GrowthClass.LOGARITHMIC


def test_binary_recursion_is_exponential(parser, fibonacci):
    result = parser.parse(fibonacci)
    functions = result.tree.find(NodeKind.FUNCTION)
    assert len(functions) == 1
    assert functions[0].metadata["recursion_type"] is RecursionType.BINARY_TREE
    assert functions[0].complexity.time_class is GrowthClass.EXPONENTIAL
    assert result.call_graph.is_self_recursive("fib")


def test_mutual_recursion_in_call_graph(parser):
    result = parser.parse(MUTUAL_RECURSION)
    assert result.call_graph.callees("isEven") == ["isOdd"]
    assert result.call_graph.mutual_recursion() == [["isEven", "isOdd"]]


def test_unmatched_brace_is_tolerated(parser):
    code = "void f(int n) {\n    for (int i = 0; i < n; i++) {\n        total++;\n}\n"
    result = parser.parse(code)
    messages = [warning.message for warning in result.diagnostics.warnings]
    assert any(message.startswith("Unbalanced braces detected") for message in messages)
    assert result.tree.complexity.time_class is GrowthClass.LINEAR


def test_unterminated_comment_is_reported(parser):
    result = parser.parse("int x = 1;\n/* never closed\nint y = 2;\n")
    messages = [warning.message for warning in result.diagnostics.warnings]
    assert "Unterminated block comment" in messages


def test_parse_file_missing_raises(parser, tmp_path):
    from complexity_estimator.shared.exceptions import ParsingError

    with pytest.raises(ParsingError):
        parser.parse_file(str(tmp_path / "missing.c"))


def test_python_floor_division_survives_normalization():
    code = SourceNormalizer().normalize(PYTHON_HALVING).code
    assert "n //= 2" in code
    assert "count the halvings" not in code


def test_slash_comments_are_stripped_from_brace_source():
    code = SourceNormalizer().normalize(
        "int half(int n) { // halve n\n    return n / 2; /* done */\n}\n"
    ).code
    assert "halve" not in code
    assert "done" not in code
    assert "n / 2" in code


def test_python_floor_division_loop_is_logarithmic(parser):
    result = parser.parse(PYTHON_HALVING)
    loops = result.tree.find(NodeKind.LOOP)
    assert len(loops) == 1
    assert loops[0].complexity.time_class is GrowthClass.LOGARITHMIC
    assert result.tree.complexity.time_class is GrowthClass.LOGARITHMIC


@pytest.mark.parametrize(
    "text, expected",
    [
        ("return fib(n - 1) + fib(n - 2);", NodeKind.CALL),
        ("return helper(n);", NodeKind.CALL),
        ("return n * 2;", NodeKind.RETURN),
        ("return;", NodeKind.RETURN),
    ],
)
def test_return_with_call_is_classified_as_call(text, expected):
    assert statements.classify(text) is expected
