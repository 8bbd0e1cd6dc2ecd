"""
Structural complexity aggregation.

Reduces the parsed syntax tree and the catalogue matches into one structural
verdict: time and space classes, confidence, per-function and per-loop
summaries, recommendations and warnings.
"""

import logging
from statistics import mean
from typing import Dict, Iterable, List, Optional, Sequence

from complexity_estimator.domain.models.analysis import (
    AlgorithmMatch,
    ClassSource,
    FunctionSummary,
    LoopSummary,
    PatternPrecedence,
    StructuralVerdict,
)
from complexity_estimator.domain.models.growth import GrowthClass, GrowthLattice
from complexity_estimator.domain.models.source import SourceView
from complexity_estimator.domain.models.syntax import (
    ComplexityInfo,
    NodeKind,
    RecursionType,
    SyntaxNode,
)
from complexity_estimator.domain.services.pattern_detectors.loop_detector import LoopPatternDetector

logger = logging.getLogger(__name__)

_DEFAULT_MEAN = 0.5
_PATTERN_WEIGHT = 0.4
_STRUCTURE_WEIGHT = 0.6
_EXPONENTIAL = (GrowthClass.EXPONENTIAL, GrowthClass.FACTORIAL)


class ComplexityAggregator:
    """
    Service combining tree-derived and pattern-derived estimates.
    """

    def __init__(self, precedence: PatternPrecedence = PatternPrecedence.ALWAYS):
        self.precedence = PatternPrecedence(precedence)
        self._loop_detector = LoopPatternDetector()

    def aggregate(
        self,
        tree: SyntaxNode,
        matches: Sequence[AlgorithmMatch],
        view: Optional[SourceView] = None,
        call_counts: Optional[Dict[str, int]] = None,
        mutual_recursion: Optional[List[List[str]]] = None,
        parser_warnings: Optional[Iterable[str]] = None,
        precedence: Optional[PatternPrecedence] = None,
    ) -> StructuralVerdict:
        """
        Build the structural verdict.

        Args:
            tree: Program node returned by the structural parser
            matches: Catalogue matches for the same source
            view: Normalized source view (used by text-level advice)
            call_counts: Calls per user-defined function from the call graph
            mutual_recursion: Cycles of mutually recursive functions
            parser_warnings: Tolerance degradations reported by the parser
            precedence: Overrides the aggregator's pattern precedence policy

        Returns:
            StructuralVerdict with time/space classes and advisories
        """
        policy = PatternPrecedence(precedence or self.precedence)
        matches = list(matches)
        functions = self.summarize_functions(tree, call_counts or {})
        loops = self.summarize_loops(tree)

        tree_info = tree.complexity
        verdict = StructuralVerdict(
            time_class=tree_info.time_class,
            space_class=self.derive_space(tree),
            confidence=self.overall_confidence(tree, matches, functions, loops),
            tree_class=tree_info.time_class,
            tree_confidence=tree_info.confidence,
            matches=matches,
            functions=functions,
            loops=loops,
            is_trivial=tree.is_empty,
        )

        best = verdict.best_match
        if best is not None and self._pattern_wins(policy, best, tree_info):
            verdict.time_class = best.time_class
            verdict.class_source = ClassSource.PATTERN
            logger.debug(
                "Pattern '%s' (%s) overrides tree class %s",
                best.name,
                best.time_class.label,
                tree_info.time_class.label,
            )

        verdict.recommendations = self.generate_recommendations(
            functions, loops, matches, view
        )
        verdict.warnings = self.generate_warnings(
            functions, loops, mutual_recursion or [], parser_warnings or []
        )
        return verdict

    def _pattern_wins(
        self, policy: PatternPrecedence, best: AlgorithmMatch, tree_info: ComplexityInfo
    ) -> bool:
        if policy is PatternPrecedence.NEVER:
            return False
        if policy is PatternPrecedence.WHEN_CONFIDENT:
            return best.confidence >= tree_info.confidence
        return True

    # ----- space -----------------------------------------------------------

    def derive_space(self, tree: SyntaxNode) -> GrowthClass:
        """
        Space from declarations, library calls and recursion depth.

        Containers give O(n) (nested containers O(n²)), scalars O(1),
        divide-and-conquer recursion O(log n) and other recursion O(n).
        """
        space = GrowthClass.CONSTANT
        for node in tree.walk():
            if node.kind is NodeKind.VARIABLE:
                container = node.metadata.get("container_type")
                if container == "matrix":
                    space = GrowthLattice.max(space, GrowthClass.QUADRATIC)
                elif container == "container":
                    space = GrowthLattice.max(space, GrowthClass.LINEAR)
            if node.kind in (NodeKind.CALL, NodeKind.VARIABLE, NodeKind.RETURN):
                if node.metadata.get("library_operations"):
                    space = GrowthLattice.max(space, node.complexity.space_class)
            if node.kind is NodeKind.FUNCTION and node.metadata.get("is_recursive"):
                recursion_type = node.metadata.get("recursion_type")
                depth = (
                    GrowthClass.LOGARITHMIC
                    if recursion_type is RecursionType.DIVIDE_AND_CONQUER
                    else GrowthClass.LINEAR
                )
                space = GrowthLattice.max(space, depth)
        return space

    # ----- confidence ------------------------------------------------------

    def overall_confidence(
        self,
        tree: SyntaxNode,
        matches: Sequence[AlgorithmMatch],
        functions: Sequence[FunctionSummary],
        loops: Sequence[LoopSummary],
    ) -> float:
        if tree.is_empty and not matches:
            return tree.complexity.confidence

        pattern_mean = (
            mean(match.confidence for match in matches) if matches else _DEFAULT_MEAN
        )
        structural = [summary.complexity.confidence for summary in functions]
        structural += [summary.complexity.confidence for summary in loops]
        structure_mean = mean(structural) if structural else _DEFAULT_MEAN
        confidence = _PATTERN_WEIGHT * pattern_mean + _STRUCTURE_WEIGHT * structure_mean
        return round(min(1.0, max(0.0, confidence)), 4)

    # ----- summaries -------------------------------------------------------

    def summarize_functions(
        self, tree: SyntaxNode, call_counts: Dict[str, int]
    ) -> List[FunctionSummary]:
        summaries: List[FunctionSummary] = []
        for node in tree.find(NodeKind.FUNCTION):
            summaries.append(
                FunctionSummary(
                    name=node.name or "anonymous",
                    complexity=node.complexity,
                    is_recursive=bool(node.metadata.get("is_recursive")),
                    recursion_type=node.metadata.get("recursion_type", RecursionType.NONE),
                    recursive_sites=node.metadata.get("recursive_sites", 0),
                    call_count=call_counts.get(node.name or "", 0),
                    line_start=node.line_start,
                    line_end=node.line_end,
                )
            )
        return summaries

    def summarize_loops(self, tree: SyntaxNode) -> List[LoopSummary]:
        loop_info = self._loop_detector.detect(tree)
        summaries: List[LoopSummary] = []
        for node, level in loop_info["loops"]:
            body_class = node.metadata.get("body_time_class", GrowthClass.CONSTANT)
            summaries.append(
                LoopSummary(
                    kind=node.metadata.get("loop_kind", "for"),
                    complexity=node.complexity,
                    body_complexity=ComplexityInfo(
                        time_class=body_class,
                        confidence=node.complexity.confidence,
                        is_exact=False,
                    ),
                    nesting_level=level,
                    iteration_pattern=node.metadata.get("iteration_pattern", "linear"),
                    line_start=node.line_start,
                    line_end=node.line_end,
                )
            )
        return summaries

    # ----- advisories ------------------------------------------------------

    def generate_recommendations(
        self,
        functions: Sequence[FunctionSummary],
        loops: Sequence[LoopSummary],
        matches: Sequence[AlgorithmMatch],
        view: Optional[SourceView],
    ) -> List[str]:
        recommendations: List[str] = []

        for func in functions:
            if func.complexity.time_class is GrowthClass.EXPONENTIAL:
                recommendations.append(
                    f"Consider memoization for function '{func.name}' to reduce "
                    "exponential time complexity"
                )
            if func.is_recursive and func.recursion_type is RecursionType.LINEAR:
                recommendations.append(
                    f"Function '{func.name}' uses linear recursion - consider iterative "
                    "approach to reduce space complexity"
                )

        for loop in loops:
            if loop.nesting_level > 2:
                recommendations.append(
                    f"Deep loop nesting detected (level {loop.nesting_level}) - "
                    "consider algorithmic optimization"
                )
            if loop.complexity.time_class is GrowthClass.QUADRATIC and loop.kind == "for":
                recommendations.append(
                    "Quadratic nested loops detected - consider using hash tables or "
                    "efficient data structures"
                )

        names = {match.name for match in matches}
        if "Bubble Sort" in names:
            recommendations.append(
                "Bubble sort detected - consider using more efficient sorting algorithms "
                "like Quick Sort or Merge Sort"
            )
        if "Linear Search" in names and view is not None and "sort" in view.lower:
            recommendations.append(
                "Linear search on sorted data - consider using binary search for "
                "O(log n) complexity"
            )

        return _unique(recommendations)

    def generate_warnings(
        self,
        functions: Sequence[FunctionSummary],
        loops: Sequence[LoopSummary],
        mutual_recursion: Sequence[Sequence[str]],
        parser_warnings: Iterable[str],
    ) -> List[str]:
        warnings: List[str] = []

        for func in functions:
            if func.complexity.time_class in _EXPONENTIAL:
                warnings.append(
                    f"Exponential/factorial complexity in function '{func.name}' - "
                    "may not scale for large inputs"
                )

        for loop in loops:
            if loop.nesting_level > 3:
                warnings.append(
                    f"Very deep loop nesting (level {loop.nesting_level}) detected - "
                    "review algorithm design"
                )

        for func in functions:
            if func.is_recursive and func.recursion_type is RecursionType.BINARY_TREE:
                warnings.append(
                    f"Binary tree recursion in '{func.name}' - stack overflow risk for "
                    "large inputs"
                )

        for cycle in mutual_recursion:
            warnings.append(
                f"Mutual recursion between {', '.join(cycle)} - recursion depth is not "
                "reflected in the structural estimate"
            )

        for message in parser_warnings:
            warnings.append(f"Parser: {message}")

        return _unique(warnings)


def _unique(items: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(items))
