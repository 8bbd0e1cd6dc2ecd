"""
Lightweight syntax tree produced by the structural parser.

The tree is intentionally shallow: each node corresponds to one classified
logical line (function header, loop header, conditional, declaration, call,
return) plus the nodes found inside its body range.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional

from complexity_estimator.domain.models.growth import GrowthClass


class NodeKind(str, Enum):
    """Statement categories recognised by the structural parser."""

    PROGRAM = "program"
    FUNCTION = "function"
    LOOP = "loop"
    CONDITIONAL = "conditional"
    CALL = "call"
    VARIABLE = "variable"
    RETURN = "return"


class RecursionType(str, Enum):
    NONE = "none"
    LINEAR = "linear"
    BINARY_TREE = "binary_tree"
    DIVIDE_AND_CONQUER = "divide_and_conquer"
    MEMOIZED = "memoized"
    UNKNOWN = "unknown"


@dataclass
class ComplexityInfo:
    """
    Complexity estimate attached to a syntax node.

    Invariants:
        - 0.0 <= confidence <= 1.0
        - computed only after every child of the node has been parsed
    """

    time_class: GrowthClass = GrowthClass.CONSTANT
    space_class: GrowthClass = GrowthClass.CONSTANT
    confidence: float = 1.0
    factors: List[str] = field(default_factory=list)
    is_exact: bool = True

    def __post_init__(self) -> None:
        self.confidence = min(1.0, max(0.0, float(self.confidence)))


@dataclass
class SyntaxNode:
    """
    Node of the shallow syntax tree.

    Children are exclusively owned and ordered by source position.
    ``line_start``/``line_end`` are 1-based source line numbers.

    Example:
        >>> node = SyntaxNode(kind=NodeKind.LOOP, line_start=3, line_end=5)
        >>> node.complexity.time_class
        <GrowthClass.CONSTANT: 'O(1)'>
    """

    kind: NodeKind
    name: Optional[str] = None
    text: str = ""
    children: List["SyntaxNode"] = field(default_factory=list)
    complexity: ComplexityInfo = field(default_factory=ComplexityInfo)
    line_start: int = 0
    line_end: int = 0
    metadata: Dict[str, Any] = field(default_factory=dict)

    def walk(self) -> Iterator["SyntaxNode"]:
        """Pre-order traversal including the node itself."""

        yield self
        for child in self.children:
            yield from child.walk()

    def find(self, kind: NodeKind) -> List["SyntaxNode"]:
        return [node for node in self.walk() if node.kind is kind]

    @property
    def is_empty(self) -> bool:
        return not self.children
