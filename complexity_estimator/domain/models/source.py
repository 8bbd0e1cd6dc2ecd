"""Normalized views of source text shared by the parser and the matcher."""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import cached_property
from typing import List


@dataclass(frozen=True)
class LogicalLine:
    """One statement-sized slice of a source line.

    ``number`` is the 1-based physical line it came from; several logical
    lines may share a number after brace splitting.
    """

    number: int
    text: str
    indent: int = 0


@dataclass
class FunctionSpan:
    name: str
    line_start: int
    line_end: int
    body: List[LogicalLine] = field(default_factory=list)
    recursive_sites: int = 0

    @cached_property
    def body_text(self) -> str:
        return "\n".join(line.text for line in self.body)

    @property
    def is_recursive(self) -> bool:
        return self.recursive_sites > 0


@dataclass
class SourceView:
    """Once-normalized line stream with function spans.

    ``max_loop_depth`` and ``loop_count`` are filled by the parser facade
    from the loop structure it found and feed the cost model; a bare view
    built from text alone leaves them at zero.  Catalogue predicates read
    loop nesting from ``lines`` instead.
    """

    lines: List[LogicalLine] = field(default_factory=list)
    functions: List[FunctionSpan] = field(default_factory=list)
    max_loop_depth: int = 0
    loop_count: int = 0

    @cached_property
    def text(self) -> str:
        return "\n".join(line.text for line in self.lines)

    @cached_property
    def lower(self) -> str:
        return self.text.lower()

    @property
    def is_empty(self) -> bool:
        return not self.lines

    def recursive_functions(self, min_sites: int = 1) -> List[FunctionSpan]:
        return [span for span in self.functions if span.recursive_sites >= min_sites]

    @property
    def max_recursive_sites(self) -> int:
        return max((span.recursive_sites for span in self.functions), default=0)
