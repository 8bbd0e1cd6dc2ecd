"""
Tolerant single-pass structural parser.

Turns the logical line stream produced by :class:`SourceNormalizer` into a
shallow :class:`SyntaxNode` tree.  Unrecognised lines are skipped and
unmatched braces make a body run to the end of its enclosing range; the
parser never raises on malformed input.  Each node's complexity is computed
bottom-up once its children are parsed.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, replace
from typing import List, Optional, Set, Tuple

from complexity_estimator.domain.models.growth import GrowthClass, GrowthLattice
from complexity_estimator.domain.models.source import FunctionSpan, LogicalLine
from complexity_estimator.domain.models.syntax import (
    ComplexityInfo,
    NodeKind,
    RecursionType,
    SyntaxNode,
)
from complexity_estimator.domain.services.pattern_detectors.recursion_detector import (
    RecursionPatternDetector,
)
from complexity_estimator.infrastructure.parser import statements
from complexity_estimator.infrastructure.parser.preprocessor import ParserWarning

logger = logging.getLogger(__name__)

_HALVING_UPDATE = re.compile(
    r"\*=\s*2\b|/=\s*2\b|//=\s*2\b|<<=\s*1\b|>>=\s*1\b"
    r"|\b(\w+)\s*=\s*\1\s*(?:\*|/|//)\s*2\b|\b(\w+)\s*=\s*\2\s*(?:>>|<<)\s*1\b"
)
_INTERVAL_CONDITION = re.compile(
    r"\b(?:left|low|lo|l|start|begin|first)\s*<=?\s*(?:right|high|hi|r|end|last)\b",
    re.IGNORECASE,
)
_COMPARISON = re.compile(r"\b([A-Za-z_]\w*)\s*(?:<=?|>=?|!=)\s*([\w.()\-+*/]+)")
_LITERAL_BOUND = re.compile(r"^\s*[A-Za-z_]\w*\s*<=?\s*\d+\s*$")
_LITERAL_RANGE = re.compile(r"\bin\s+range\(\s*\d+\s*(?:,\s*\d+\s*){0,2}\)")
_UNBOUNDED = re.compile(r"^\s*(?:true|True|1)\s*$|^\s*$")
_IDENTIFIER = re.compile(r"\b[A-Za-z_]\w*\b")
_CONDITIONAL_KEYWORD = re.compile(r"^(?:else\s+if|elif|if|else|switch|unless)\b")
_DECLARATOR_TAIL = re.compile(r"\[[^\]]*\]|[({].*")
_NOISE = re.compile(r"^[{}\s;,)]*$|^(?:break|continue|pass)\b")


@dataclass
class StructuralParseResult:
    tree: SyntaxNode
    functions: List[FunctionSpan] = field(default_factory=list)
    warnings: List[ParserWarning] = field(default_factory=list)
    skipped_lines: int = 0


@dataclass
class _ParseContext:
    """Per-call state; derived contexts share every collection."""

    lines: List[LogicalLine]
    user_functions: Set[str]
    functions: List[FunctionSpan] = field(default_factory=list)
    warnings: List[ParserWarning] = field(default_factory=list)
    skipped: Set[Tuple[int, str]] = field(default_factory=set)


@dataclass(frozen=True)
class _LoopHeader:
    growth: GrowthClass
    confidence: float
    pattern: str


class StructuralParser:
    """Builds a syntax tree with bottom-up complexity from logical lines."""

    def __init__(self, recursion_detector: Optional[RecursionPatternDetector] = None):
        self._recursion = recursion_detector or RecursionPatternDetector()

    def parse(self, lines: List[LogicalLine]) -> StructuralParseResult:
        """Parse a logical line stream into a program tree."""

        root = SyntaxNode(kind=NodeKind.PROGRAM, name="program")
        if not lines:
            return StructuralParseResult(tree=root)

        ctx = _ParseContext(lines=lines, user_functions=self._prescan(lines))
        root.children = self._parse_sequence(ctx, 0, len(lines) - 1)
        root.line_start = lines[0].number
        root.line_end = lines[-1].number
        root.complexity = self._combine_sequence(root.children)

        logger.debug(
            "Parsed %d logical lines into %d top-level nodes (%d skipped)",
            len(lines),
            len(root.children),
            len(ctx.skipped),
        )
        return StructuralParseResult(
            tree=root,
            functions=ctx.functions,
            warnings=ctx.warnings,
            skipped_lines=len(ctx.skipped),
        )

    def _prescan(self, lines: List[LogicalLine]) -> Set[str]:
        names: Set[str] = set()
        for line in lines:
            name = statements.function_name(line.text)
            if name:
                names.add(name)
        return names

    # ----- sequences and blocks -------------------------------------------

    def _parse_sequence(self, ctx: _ParseContext, start: int, end: int) -> List[SyntaxNode]:
        nodes: List[SyntaxNode] = []
        index = start
        end = min(end, len(ctx.lines) - 1)
        while index <= end:
            line = ctx.lines[index]
            kind = statements.classify(line.text)
            if kind is None:
                if not _NOISE.match(line.text):
                    ctx.skipped.add((line.number, line.text))
                index += 1
                continue

            if kind in (NodeKind.FUNCTION, NodeKind.LOOP, NodeKind.CONDITIONAL):
                node, last = self._parse_block(ctx, index, end, kind)
                index = last + 1
            else:
                node = self._parse_statement(ctx, line, kind)
                index += 1
            nodes.append(node)
        return nodes

    def _parse_block(
        self, ctx: _ParseContext, index: int, limit: int, kind: NodeKind
    ) -> Tuple[SyntaxNode, int]:
        header = ctx.lines[index]
        extent = statements.resolve_block(ctx.lines, index, limit, kind)
        if extent.unmatched:
            ctx.warnings.append(
                ParserWarning(
                    message="Unmatched '{'; block body runs to the end of the enclosing range",
                    line=header.number,
                )
            )

        children: List[SyntaxNode] = []
        body: List[LogicalLine] = []
        if extent.body_start <= extent.body_end:
            children = self._parse_sequence(ctx, extent.body_start, extent.body_end)
            body = ctx.lines[extent.body_start : extent.body_end + 1]
        if extent.inline:
            synthetic = LogicalLine(
                number=header.number, text=extent.inline, indent=header.indent + 1
            )
            children.extend(self._parse_sequence(replace(ctx, lines=[synthetic]), 0, 0))
            body = [synthetic] + body

        last = extent.last_index
        tail_condition: Optional[str] = None
        if kind is NodeKind.LOOP and statements.loop_kind(header.text) == "do_while":
            tail = last + 1
            if tail <= limit and ctx.lines[tail].text.startswith("while"):
                tail_text = ctx.lines[tail].text
                if statements.inline_remainder(tail_text) in ("", ";"):
                    tail_condition = statements.header_condition(tail_text)
                    last = tail

        node = SyntaxNode(
            kind=kind,
            text=header.text,
            children=children,
            line_start=header.number,
            line_end=ctx.lines[last].number,
        )
        if kind is NodeKind.FUNCTION:
            self._finish_function(ctx, node, body)
        elif kind is NodeKind.LOOP:
            self._finish_loop(node, body, tail_condition)
        else:
            self._finish_conditional(ctx, node)
        return node, last

    # ----- node completion --------------------------------------------------

    def _finish_function(
        self, ctx: _ParseContext, node: SyntaxNode, body: List[LogicalLine]
    ) -> None:
        name = statements.function_name(node.text) or "anonymous"
        node.name = name
        body_text = "\n".join(line.text for line in body)
        sites = len(re.findall(rf"\b{re.escape(name)}\s*\(", body_text))

        span = FunctionSpan(
            name=name,
            line_start=node.line_start,
            line_end=node.line_end,
            body=list(body),
            recursive_sites=sites,
        )
        ctx.functions.append(span)

        base = self._combine_sequence(node.children)
        node.metadata.update(
            {"is_recursive": sites > 0, "recursive_sites": sites,
             "recursion_type": RecursionType.NONE}
        )
        if sites == 0:
            node.complexity = base
            return

        profile = self._recursion.classify(name, body_text, sites)
        node.metadata["recursion_type"] = profile.recursion_type
        if profile.recursion_type is RecursionType.LINEAR:
            time_class = GrowthLattice.multiply(GrowthClass.LINEAR, base.time_class)
        else:
            time_class = GrowthLattice.max(profile.time_class, base.time_class)

        node.complexity = ComplexityInfo(
            time_class=time_class,
            space_class=GrowthLattice.max(profile.space_class, base.space_class),
            confidence=min(base.confidence, profile.confidence),
            factors=base.factors + [f"recursion:{profile.recursion_type.value}"] + profile.evidence,
            is_exact=False,
        )

    def _finish_loop(
        self, node: SyntaxNode, body: List[LogicalLine], tail_condition: Optional[str]
    ) -> None:
        loop_kind = statements.loop_kind(node.text)
        condition = (
            tail_condition
            if tail_condition is not None
            else statements.header_condition(node.text)
        )
        body_text = "\n".join(line.text for line in body)
        header = self._classify_loop_header(node.text, loop_kind, condition, body_text)

        inner = self._combine_sequence(node.children)
        factors = list(inner.factors) + [f"loop:{header.pattern}"]
        if GrowthLattice.exceeds_cap(header.growth, inner.time_class):
            factors.append("capped:cubic-or-higher")

        node.name = loop_kind
        node.metadata.update(
            {
                "loop_kind": loop_kind,
                "iteration_pattern": header.pattern,
                "condition": condition.strip(),
                "body_time_class": inner.time_class,
            }
        )
        node.complexity = ComplexityInfo(
            time_class=GrowthLattice.multiply(header.growth, inner.time_class),
            space_class=inner.space_class,
            confidence=min(header.confidence, inner.confidence),
            factors=factors,
            is_exact=False,
        )

    def _finish_conditional(self, ctx: _ParseContext, node: SyntaxNode) -> None:
        condition = statements.header_condition(node.text)
        if condition:
            calls = self._call_nodes(ctx, condition, node.line_start)
            node.children = calls + node.children
        inner = self._combine_sequence(node.children)
        keyword = _CONDITIONAL_KEYWORD.match(node.text)
        node.name = re.sub(r"\s+", " ", keyword.group(0)) if keyword else "if"
        node.complexity = ComplexityInfo(
            time_class=inner.time_class,
            space_class=inner.space_class,
            confidence=inner.confidence,
            factors=inner.factors + ["conditional"],
            is_exact=inner.is_exact,
        )

    # ----- loop headers -----------------------------------------------------

    def _classify_loop_header(
        self, text: str, loop_kind: str, condition: str, body_text: str
    ) -> _LoopHeader:
        update = ""
        if loop_kind == "for" and condition.count(";") >= 2:
            _, condition, update = condition.split(";", 2)
        elif loop_kind in ("while", "do_while"):
            update = body_text

        if loop_kind == "for" and _HALVING_UPDATE.search(update):
            return _LoopHeader(GrowthClass.LOGARITHMIC, 0.85, "halving")

        if loop_kind in ("while", "do_while"):
            if _INTERVAL_CONDITION.search(condition):
                return _LoopHeader(GrowthClass.LOGARITHMIC, 0.85, "interval-halving")
            if self._multiplicative_update(condition, update):
                return _LoopHeader(GrowthClass.LOGARITHMIC, 0.85, "multiplicative")
            if _UNBOUNDED.match(condition):
                return _LoopHeader(GrowthClass.LINEAR, 0.5, "unbounded")

        if loop_kind == "for" and self._nested_index(condition):
            return _LoopHeader(GrowthClass.QUADRATIC, 0.75, "nested-index")

        if _LITERAL_BOUND.match(condition) or (
            loop_kind == "range_based" and _LITERAL_RANGE.search(text)
        ):
            return _LoopHeader(GrowthClass.CONSTANT, 0.9, "constant-bound")

        return _LoopHeader(GrowthClass.LINEAR, 0.9, "linear")

    def _nested_index(self, condition: str) -> bool:
        """Two index variables compared against the same bound (``i < n && j < n``)."""

        bounds = {}
        for left, right in _COMPARISON.findall(condition):
            bounds.setdefault(right, set()).add(left)
        return any(len(variables) >= 2 for variables in bounds.values())

    def _multiplicative_update(self, condition: str, body_text: str) -> bool:
        for variable in set(_IDENTIFIER.findall(condition)):
            if variable in statements.KEYWORDS:
                continue
            escaped = re.escape(variable)
            pattern = (
                rf"\b{escaped}\s*(?:\*=|/=|//=|>>=|<<=)"
                rf"|\b{escaped}\s*=\s*{escaped}\s*(?:\*|/|//|>>|<<)\s*\d"
            )
            if re.search(pattern, body_text):
                return True
        return False

    # ----- statements -------------------------------------------------------

    def _parse_statement(
        self, ctx: _ParseContext, line: LogicalLine, kind: NodeKind
    ) -> SyntaxNode:
        node = SyntaxNode(
            kind=kind, text=line.text, line_start=line.number, line_end=line.number
        )
        time_class, space_class, confidence, operations = self._call_complexity(
            ctx, line.text
        )

        if kind is NodeKind.VARIABLE:
            left, _ = statements.split_assignment(line.text)
            declarator = _DECLARATOR_TAIL.sub("", left)
            node.name = (_IDENTIFIER.findall(declarator) or ["variable"])[-1]
            container = statements.container_kind(line.text)
            if container == "matrix":
                space_class = GrowthLattice.max(space_class, GrowthClass.QUADRATIC)
            elif container == "container":
                space_class = GrowthLattice.max(space_class, GrowthClass.LINEAR)
            node.metadata["container_type"] = container
        elif kind is NodeKind.CALL:
            names = statements.call_names(line.text)
            node.name = names[0] if names else None
        else:
            node.name = "return"

        factors = [f"library:{name}" for name in operations]
        node.metadata["library_operations"] = operations
        node.complexity = ComplexityInfo(
            time_class=time_class,
            space_class=space_class,
            confidence=confidence,
            factors=factors,
            is_exact=not operations,
        )
        return node

    def _call_complexity(
        self, ctx: _ParseContext, text: str
    ) -> Tuple[GrowthClass, GrowthClass, float, List[str]]:
        time_class = GrowthClass.CONSTANT
        space_class = GrowthClass.CONSTANT
        confidence = 1.0
        operations: List[str] = []
        for name in statements.call_names(text):
            operation = statements.library_operation(name, ctx.user_functions)
            time_class = GrowthLattice.max(time_class, operation.time_class)
            space_class = GrowthLattice.max(space_class, operation.space_class)
            confidence = min(confidence, operation.confidence)
            if statements.is_known_operation(name) and name not in ctx.user_functions:
                operations.append(name)
        return time_class, space_class, confidence, operations

    def _call_nodes(self, ctx: _ParseContext, text: str, line_number: int) -> List[SyntaxNode]:
        if not statements.call_names(text):
            return []
        line = LogicalLine(number=line_number, text=text)
        node = self._parse_statement(ctx, line, NodeKind.CALL)
        node.metadata["synthetic"] = True
        return [node]

    # ----- combination ------------------------------------------------------

    def _combine_sequence(self, children: List[SyntaxNode]) -> ComplexityInfo:
        """Sequential siblings combine via class-max; confidence is the minimum."""

        if not children:
            return ComplexityInfo()
        factors: List[str] = []
        for child in children:
            for factor in child.complexity.factors:
                if factor not in factors:
                    factors.append(factor)
        return ComplexityInfo(
            time_class=GrowthLattice.max_of(child.complexity.time_class for child in children),
            space_class=GrowthLattice.max_of(child.complexity.space_class for child in children),
            confidence=min(child.complexity.confidence for child in children),
            factors=factors,
            is_exact=all(child.complexity.is_exact for child in children),
        )
