"""
Loop pattern detector.
Analyzes loop structures and nesting depth.
"""

from typing import Any, Dict, List, Tuple

from complexity_estimator.domain.models.syntax import NodeKind, SyntaxNode
from complexity_estimator.domain.services.pattern_detectors.base_detector import PatternDetector


class LoopPatternDetector(PatternDetector):
    """
    Detects loop patterns and nesting structures.
    Calculates maximum nesting depth and total loop count.
    """

    def detect(self, node: Any) -> Dict[str, Any]:
        """
        Detect loop patterns in a syntax tree.

        Args:
            node: Syntax node to analyze

        Returns:
            Dictionary with keys:
                - loop_count: total number of loops
                - max_loop_depth: maximum nesting depth
                - has_nested_loops: boolean
                - has_sequential_loops: boolean
                - loop_types: list of loop kinds (for, while, do_while, range_based)
                - loops: (loop node, nesting level) pairs in source order
        """
        result: Dict[str, Any] = {
            "loop_count": 0,
            "max_loop_depth": 0,
            "has_nested_loops": False,
            "has_sequential_loops": False,
            "loop_types": [],
            "loops": [],
        }

        if isinstance(node, SyntaxNode):
            self._traverse_and_count_loops(node, result, depth=0)

        if result["max_loop_depth"] > 1:
            result["has_nested_loops"] = True

        if result["loop_count"] > result["max_loop_depth"]:
            result["has_sequential_loops"] = True

        return result

    def _traverse_and_count_loops(
        self, node: SyntaxNode, result: Dict[str, Any], depth: int
    ) -> None:
        """
        Recursively traverse the tree counting loops and tracking depth.

        Function bodies restart at depth zero.
        """
        if node.kind is NodeKind.LOOP:
            result["loop_count"] += 1
            result["max_loop_depth"] = max(result["max_loop_depth"], depth + 1)
            loops: List[Tuple[SyntaxNode, int]] = result["loops"]
            loops.append((node, depth + 1))

            loop_kind = node.metadata.get("loop_kind", "for")
            if loop_kind not in result["loop_types"]:
                result["loop_types"].append(loop_kind)

            for child in node.children:
                self._traverse_and_count_loops(child, result, depth + 1)
            return

        if node.kind is NodeKind.FUNCTION:
            depth = 0

        for child in node.children:
            self._traverse_and_count_loops(child, result, depth)
