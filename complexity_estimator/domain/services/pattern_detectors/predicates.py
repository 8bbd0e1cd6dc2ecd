"""
Composable evidence predicates over a normalized source view.

A predicate is a named boolean test.  Predicates combine with ``&``, ``|``
and ``~`` so catalogue entries read as plain conjunctions:

    >>> bubble = NESTED_LOOPS & ADJACENT_COMPARISON & SWAP
    >>> bubble.label
    'nested-loops & adjacent-comparison & swap'
"""

from __future__ import annotations

import re
from typing import Callable, List, Tuple

from complexity_estimator.domain.models.source import SourceView

_FLAGS = re.IGNORECASE | re.MULTILINE
_LOOP_HEADER = re.compile(r"^(?:for|foreach|while|do)\b")


class Predicate:
    """Named boolean test over a :class:`SourceView`."""

    def __init__(self, label: str, test: Callable[[SourceView], bool]):
        self.label = label
        self._test = test

    def __call__(self, view: SourceView) -> bool:
        return bool(self._test(view))

    def __and__(self, other: "Predicate") -> "Predicate":
        return Predicate(
            f"{self.label} & {other.label}", lambda view: self(view) and other(view)
        )

    def __or__(self, other: "Predicate") -> "Predicate":
        return Predicate(
            f"({self.label} | {other.label})", lambda view: self(view) or other(view)
        )

    def __invert__(self) -> "Predicate":
        return Predicate(f"not {self.label}", lambda view: not self(view))

    def __repr__(self) -> str:
        return f"Predicate({self.label!r})"


def text_matches(label: str, pattern: str, flags: int = _FLAGS) -> Predicate:
    compiled = re.compile(pattern, flags)
    return Predicate(label, lambda view: compiled.search(view.text) is not None)


def recursive_sites_at_least(count: int) -> Predicate:
    return Predicate(
        f"recursive-sites>={count}",
        lambda view: view.max_recursive_sites >= count,
    )


def loop_depth_at_least(depth: int) -> Predicate:
    return Predicate(
        f"loop-depth>={depth}", lambda view: lexical_loop_depth(view) >= depth
    )


def lexical_loop_depth(view: SourceView) -> int:
    """Deepest loop nesting read from the line stream's braces and indentation.

    A loop body is a brace block, an indented block after a ``:`` header, or
    the single following line after a bare ``)`` header.  A ``while (...);``
    line closes a do-while and is not a new loop.
    """

    deepest = 0
    brace_depth = 0
    scopes: List[Tuple[str, int]] = []
    lines = view.lines
    for index, line in enumerate(lines):
        text = line.text
        scopes = [
            (kind, bound)
            for kind, bound in scopes
            if not (kind == "indent" and line.indent <= bound)
            and not (kind == "single" and index > bound)
        ]

        opens_loop = bool(_LOOP_HEADER.match(text)) and not (
            text.startswith("while") and text.endswith(";")
        )
        if opens_loop:
            deepest = max(deepest, len(scopes) + 1)

        outer_depth = brace_depth
        brace_depth += text.count("{") - text.count("}")
        scopes = [
            (kind, bound)
            for kind, bound in scopes
            if not (kind == "brace" and bound > brace_depth)
        ]

        if opens_loop:
            following = lines[index + 1].text if index + 1 < len(lines) else ""
            if text.endswith("{") or following.startswith("{"):
                scopes.append(("brace", outer_depth + 1))
            elif text.endswith(":"):
                scopes.append(("indent", line.indent))
            elif text.endswith(")"):
                scopes.append(("single", index + 1))
    return deepest


def recursive_call_matching(label: str, argument_pattern: str) -> Predicate:
    """A recursive function calls itself with arguments matching the pattern."""

    def test(view: SourceView) -> bool:
        for span in view.recursive_functions():
            call = re.compile(
                rf"\b{re.escape(span.name)}\s*\(\s*{argument_pattern}", _FLAGS
            )
            if call.search(span.body_text):
                return True
        return False

    return Predicate(label, test)


# ----- shared evidence -------------------------------------------------------

_LOW = r"(?:left|low|lo|l|start|begin|first)"
_HIGH = r"(?:right|high|hi|r|end|last)"
_TABLE = r"(?:dp|memo|cache|table)\w*"

RECURSIVE = recursive_sites_at_least(1)
MULTI_RECURSIVE = recursive_sites_at_least(2)
HAS_LOOP = loop_depth_at_least(1)
NESTED_LOOPS = loop_depth_at_least(2)

SWAP = text_matches(
    "swap",
    r"\bswap\s*\(|(\w+)\s*\[([^\]]+)\]\s*,\s*\1\s*\[([^\]]+)\]\s*=\s*\1\s*\[\3\]\s*,\s*\1\s*\[\2\]"
    r"|\b(?:temp|tmp|t)\s*=\s*\w+\s*\[",
)
HALVING_MIDPOINT = text_matches(
    "halving-midpoint", r"\bmid\w*\s*(?::=|=)(?!=)[^\n]*(?:/\s*2\b|>>\s*1\b|//\s*2\b)"
)
BOUND_IDENTIFIERS = text_matches(
    "bound-identifiers", r"\b(?:left|right)\b|\b(?:low|high|mid)\b"
)

# ----- sorting ---------------------------------------------------------------

MERGE_CALL = text_matches("merge-call", r"\bmerge\w*\s*\(")
AUXILIARY_BUFFER = text_matches(
    "auxiliary-buffer",
    r"\b(?:temp|tmp|aux|buffer|buf|merged)\w*\s*\[|vector\s*<[^>\n]*>\s*\w+\s*[({]"
    r"|new\s+\w+\s*\[|\b\w+\s*\[\s*\w*\s*:\s*\w*\s*\]|=\s*\[\s*\]"
    r"|\bint\s+\w+\s*\[\s*\w+\s*\]",
)
PARTITION_OR_PIVOT = text_matches("partition-or-pivot", r"\bpartition\w*\s*\(|\bpivot\b")
HEAPIFY = text_matches("heapify", r"\bheapify\w*\s*\(|\bsift_?down\s*\(|\bsink\s*\(")
CHILD_INDEX = text_matches(
    "child-index",
    r"\b2\s*\*\s*\w+\s*\+\s*[12]\b|\b\w+\s*\*\s*2\s*\+\s*[12]\b|\(\s*\w+\s*<<\s*1\s*\)\s*[+|]\s*1",
)
ADJACENT_COMPARISON = text_matches(
    "adjacent-comparison",
    r"(\w+)\s*\[\s*(\w+)\s*\]\s*>\s*\1\s*\[\s*\2\s*\+\s*1\s*\]"
    r"|(\w+)\s*\[\s*(\w+)\s*\+\s*1\s*\]\s*<\s*\3\s*\[\s*\4\s*\]",
)
EARLY_EXIT_FLAG = text_matches(
    "early-exit-flag", r"\b(?:swapped|is_sorted|sorted_flag|flag)\b\s*(?::=|=)"
)
KEY_ELEMENT = text_matches("key-element", r"\bkey\s*(?::=|=)(?!=)\s*\w+\s*\[\s*\w+\s*\]")
SHIFTING = text_matches(
    "shifting", r"(\w+)\s*\[\s*(\w+)\s*\+\s*1\s*\]\s*=(?!=)\s*\1\s*\[\s*\2\s*\]"
)
INSERTION = text_matches("insertion", r"\w+\s*\[\s*\w+\s*\+\s*1\s*\]\s*=(?!=)\s*key\b")

# ----- searching -------------------------------------------------------------

MIDPOINT_CALCULATION = HALVING_MIDPOINT
LOW_HIGH_BOUNDS = text_matches("low-high-bounds", rf"\b{_LOW}\s*<=?\s*{_HIGH}\b")
MID_COMPARISON = text_matches(
    "mid-comparison",
    r"\[\s*mid\w*\s*\]\s*(?:==|<=?|>=?|!=)|(?:==|<=?|>=?)\s*\w+\s*\[\s*mid\w*\s*\]",
)
BOUND_UPDATE = text_matches(
    "bound-update", rf"\b{_LOW}\s*=(?!=)\s*mid\w*\b|\b{_HIGH}\s*=(?!=)\s*mid\w*\b"
)
BINARY_SEARCH_EVIDENCE = MIDPOINT_CALCULATION & LOW_HIGH_BOUNDS & MID_COMPARISON & BOUND_UPDATE

ELEMENT_TARGET_COMPARISON = text_matches(
    "element-target-comparison",
    r"\w+\s*\[\s*\w+\s*\]\s*==\s*\w+|\b\w+\s*==\s*\w+\s*\[\s*\w+\s*\]"
    r"|\bif\s+\w+\s*==\s*(?:target|key|x|value|val|needle)\b",
)
EARLY_RETURN = text_matches("early-return", r"\breturn\s+(?:-?\w+|true|True)")

# ----- graphs ----------------------------------------------------------------

VISITED = text_matches("visited", r"\b(?:visited|seen|vis|marked|explored)\b")
ADJACENCY = text_matches(
    "adjacency",
    r"\badj\w*\s*[\[.(]|\bgraph\s*[\[.]|\bneighbou?rs?\b|\bedges\s*\[|\bg\s*\[\s*\w+\s*\]",
)
EXPLICIT_STACK = text_matches("explicit-stack", r"\bstack\s*<|\bStack\b|\bstack\s*=")
QUEUE = text_matches(
    "queue",
    r"(?<!priority_)\bqueue\s*<|\bdeque\b|\bQueue\b|\bqueue\s*=|\bLinkedList\b",
)
QUEUE_DRAIN_LOOP = text_matches(
    "queue-drain-loop",
    r"while\s*\(\s*!\s*\w+\s*\.\s*(?:empty|isEmpty)\s*\(\s*\)\s*\)"
    r"|while\s*\(\s*\w+\s*\.\s*size\s*\(\s*\)|while\s+(?:len\s*\(\s*)?\w+\s*\)?\s*:",
)
PRIORITY_QUEUE = text_matches(
    "priority-queue", r"priority_queue|\bheapq\b|PriorityQueue|\bheappush\b|\bpq\b"
)
DISTANCE_TABLE = text_matches("distance-table", r"\bdist\w*\s*\[|\bdistance\w*\s*\[")
RELAXATION = text_matches(
    "relaxation",
    r"dist\w*\s*\[[^\]]+\]\s*\+[^<>\n]*[<>]\s*dist\w*\s*\["
    r"|dist\w*\s*\[[^\]]+\]\s*[<>]\s*dist\w*\s*\[[^\]]+\]\s*\+",
)

# ----- dynamic programming ---------------------------------------------------

MEMO_TABLE = text_matches(
    "memo-table", rf"\b{_TABLE}\s*\[|\bmemo\w*\s*=|@(?:functools\.)?(?:lru_)?cache\b"
)
BASE_CASE = text_matches(
    "base-case",
    r"\bif\b[^\n]*(?:<=?|==)\s*[012]\b|\bdp\s*\[\s*0\s*\]\s*=|\bin\s+memo\w*\b"
    r"|\bmemo\w*\s*\.\s*(?:count|find|contains|containsKey|get|has)\s*\(|"
    + rf"\b{_TABLE}\s*\[[^\]]+\]\s*!=\s*-1",
)
RECURRENCE = text_matches(
    "recurrence",
    rf"\b{_TABLE}\s*(?:\[[^\]]*\])+\s*=(?!=)[^;\n]*(?:\b{_TABLE}\s*\[|\w+\s*\()",
)

# ----- trees -----------------------------------------------------------------

CHILD_ACCESS = text_matches("child-access", r"(?:->|\.)\s*(?:left|right)\b")
CHILD_RECURSION = recursive_call_matching(
    "child-recursion", r"[\w.>\-]*?(?:->|\.)\s*(?:left|right)\b"
)
NULL_CHECK = text_matches(
    "null-check",
    r"(?:==|!=)\s*(?:null|nullptr|NULL|None|nil)\b|\bis\s+(?:not\s+)?None\b"
    r"|\bif\s+not\s+\w+|\bif\s*\(\s*!\s*\w+\s*\)",
)

# ----- recursion shape -------------------------------------------------------

HALVING_EVIDENCE = r"/\s*2\b|>>\s*1\b|//\s*2\b|\bmid\w*\b|\bmiddle\b|\bpartition\w*\s*\(|\bpivot\b"
LINEAR_COMBINE_EVIDENCE = r"\bmerge\w*\s*\(|\bpartition\w*\s*\(|\bfor\b|\bwhile\b"
MEMOIZATION_EVIDENCE = (
    rf"\b{_TABLE}\s*\[|\bmemo\w*\s*\.\s*(?:count|find|contains|containsKey|get|has)\s*\("
    r"|\bin\s+memo\w*\b|@(?:functools\.)?(?:lru_)?cache\b"
)
