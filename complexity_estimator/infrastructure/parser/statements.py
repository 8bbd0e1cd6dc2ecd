"""Statement classification and block extent rules for the structural parser.

Each logical line is classified by the first matching category, in this
order: function declaration, loop, conditional, variable declaration, call,
return.  Block extents are resolved by net brace counting, by indentation for
headers ending with ``:``, or by a single following statement otherwise.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Set, Tuple

from complexity_estimator.domain.models.growth import GrowthClass
from complexity_estimator.domain.models.source import LogicalLine
from complexity_estimator.domain.models.syntax import NodeKind

KEYWORDS: Set[str] = {
    "if", "else", "elif", "for", "foreach", "while", "do", "switch", "case",
    "default", "return", "sizeof", "catch", "new", "delete", "throw", "try",
    "using", "namespace", "class", "struct", "typedef", "template", "operator",
    "def", "function", "func", "fn", "lambda", "not", "and", "or", "in", "is",
    "await", "yield", "assert", "goto", "break", "continue", "typeof",
    "instanceof", "static_cast", "dynamic_cast", "reinterpret_cast",
    "const_cast", "decltype", "alignof", "noexcept", "static_assert",
}

_MODIFIERS = (
    r"(?:(?:public|private|protected|static|inline|virtual|extern|constexpr|"
    r"final|synchronized|abstract|override|async|unsigned|signed|long|short|"
    r"const|friend|explicit)\s+)*"
)

_TYPED_FUNCTION = re.compile(
    r"^(?:template\s*<[^>]*>\s*)?"
    + _MODIFIERS
    + r"(?P<type>[A-Za-z_][\w:]*(?:\s*<[^()]*>)?(?:\s*\[\s*\])*)"
    r"[\s\*&]+"
    r"(?P<name>[A-Za-z_~][\w]*)\s*\((?P<params>[^;]*)$"
)
_DEF_FUNCTION = re.compile(r"^(?:async\s+)?def\s+(?P<name>\w+)\s*\(")
_JS_FUNCTION = re.compile(
    r"^(?:export\s+)?(?:async\s+)?function\s*\*?\s*(?P<name>\w+)\s*\("
)
_GO_FUNCTION = re.compile(r"^func\s+(?:\([^)]*\)\s*)?(?P<name>\w+)\s*\(")
_RUST_FUNCTION = re.compile(r"^(?:pub\s+)?fn\s+(?P<name>\w+)\s*[<(]")

_LOOP = re.compile(r"^(?:for|foreach|while)\b|^do\b")
_CONDITIONAL = re.compile(r"^(?:if|else|elif|switch|unless)\b")
_RETURN = re.compile(r"^return\b")

_SCALAR_TYPES = (
    r"int|long|short|float|double|char|bool|boolean|auto|size_t|string|String|"
    r"var|let|const|uint\w*|int\d+_t|u?int\d*|usize|isize|f32|f64|Integer|Long|Double"
)
_CONTAINER_TYPES = (
    r"vector|list|deque|set|map|multiset|multimap|unordered_map|unordered_set|"
    r"queue|stack|priority_queue|array|pair|tuple|ArrayList|LinkedList|HashMap|"
    r"HashSet|TreeMap|TreeSet|List|Map|Set|Queue|Deque|Stack|PriorityQueue|Vec"
)
_TYPED_DECLARATION = re.compile(
    r"^(?:(?:const|static|final|unsigned|signed|long|short|mut|volatile)\s+)*"
    r"(?:std::)?(?:" + _SCALAR_TYPES + r"|" + _CONTAINER_TYPES + r"|[A-Z]\w*)"
    r"(?:\s*<.*>)?(?:\s*\[\s*\])*[\s\*&]+(?:mut\s+)?[A-Za-z_]\w*\s*(?:=|;|\[|\(|\{|,|:)"
)
_ASSIGNMENT_DECLARATION = re.compile(r"^[A-Za-z_]\w*\s*(?::=|=(?!=))")
_CALL = re.compile(r"(?P<name>[A-Za-z_]\w*)\s*\(")

_SEQUENCE_TYPES = r"(?:std::)?(?:vector|list|deque|Vec|ArrayList|List|LinkedList)"
_NESTED_TYPE = re.compile(
    _SEQUENCE_TYPES + r"\s*<\s*" + _SEQUENCE_TYPES + r"\b|\[[^\]]*\]\s*\["
)
_CONTAINER_TYPE = re.compile(r"\b(?:std::)?(?:" + _CONTAINER_TYPES + r")\b")
_ARRAY_DECLARATOR = re.compile(r"\b[A-Za-z_]\w*\s*\[\s*[^\]\s][^\]]*\]")
_NESTED_CONSTRUCTOR = re.compile(
    r"^\[\s*\[|^new\s+\w+\s*\[[^\]]+\]\s*\[|^\[.*\bfor\b.*\bfor\b|"
    + _SEQUENCE_TYPES
    + r"\s*<\s*"
    + _SEQUENCE_TYPES
    + r"\b"
)
_CONSTRUCTOR = re.compile(
    r"^(?:\[|\{\s*\}|(?:set|dict|list|deque|defaultdict|Counter|OrderedDict|"
    r"bytearray)\s*\(|vec!|Vec::|new\s+(?:Array|Map|Set)\b|"
    r"new\s+\w+(?:\s*<[^>]*>)?\s*[\[(]|(?:std::)?(?:" + _CONTAINER_TYPES + r")\b)"
)
_ASSIGNMENT_OPERATOR = re.compile(r"(?<![=!<>:+\-*/%&|^])(?::=|=)(?!=)")

_LIBRARY_OPERATIONS: Dict[str, Tuple[GrowthClass, GrowthClass]] = {
    "sort": (GrowthClass.LINEARITHMIC, GrowthClass.LOGARITHMIC),
    "stable_sort": (GrowthClass.LINEARITHMIC, GrowthClass.LINEAR),
    "sorted": (GrowthClass.LINEARITHMIC, GrowthClass.LINEAR),
    "binary_search": (GrowthClass.LOGARITHMIC, GrowthClass.CONSTANT),
    "lower_bound": (GrowthClass.LOGARITHMIC, GrowthClass.CONSTANT),
    "upper_bound": (GrowthClass.LOGARITHMIC, GrowthClass.CONSTANT),
    "equal_range": (GrowthClass.LOGARITHMIC, GrowthClass.CONSTANT),
    "bisect": (GrowthClass.LOGARITHMIC, GrowthClass.CONSTANT),
    "bisect_left": (GrowthClass.LOGARITHMIC, GrowthClass.CONSTANT),
    "bisect_right": (GrowthClass.LOGARITHMIC, GrowthClass.CONSTANT),
    "push_heap": (GrowthClass.LOGARITHMIC, GrowthClass.CONSTANT),
    "pop_heap": (GrowthClass.LOGARITHMIC, GrowthClass.CONSTANT),
    "heappush": (GrowthClass.LOGARITHMIC, GrowthClass.CONSTANT),
    "heappop": (GrowthClass.LOGARITHMIC, GrowthClass.CONSTANT),
    "heapreplace": (GrowthClass.LOGARITHMIC, GrowthClass.CONSTANT),
    "heappushpop": (GrowthClass.LOGARITHMIC, GrowthClass.CONSTANT),
    "make_heap": (GrowthClass.LINEAR, GrowthClass.CONSTANT),
    "heapify": (GrowthClass.LINEAR, GrowthClass.CONSTANT),
    "insert": (GrowthClass.LINEAR, GrowthClass.CONSTANT),
    "erase": (GrowthClass.LINEAR, GrowthClass.CONSTANT),
    "find": (GrowthClass.LINEAR, GrowthClass.CONSTANT),
    "remove": (GrowthClass.LINEAR, GrowthClass.CONSTANT),
    "index": (GrowthClass.LINEAR, GrowthClass.CONSTANT),
    "count": (GrowthClass.LINEAR, GrowthClass.CONSTANT),
    "reverse": (GrowthClass.LINEAR, GrowthClass.CONSTANT),
    "rotate": (GrowthClass.LINEAR, GrowthClass.CONSTANT),
    "accumulate": (GrowthClass.LINEAR, GrowthClass.CONSTANT),
    "fill": (GrowthClass.LINEAR, GrowthClass.CONSTANT),
    "copy": (GrowthClass.LINEAR, GrowthClass.LINEAR),
    "memset": (GrowthClass.LINEAR, GrowthClass.CONSTANT),
    "min_element": (GrowthClass.LINEAR, GrowthClass.CONSTANT),
    "max_element": (GrowthClass.LINEAR, GrowthClass.CONSTANT),
    "nth_element": (GrowthClass.LINEAR, GrowthClass.CONSTANT),
    "next_permutation": (GrowthClass.LINEAR, GrowthClass.CONSTANT),
    "push_back": (GrowthClass.CONSTANT, GrowthClass.CONSTANT),
    "emplace_back": (GrowthClass.CONSTANT, GrowthClass.CONSTANT),
    "push_front": (GrowthClass.CONSTANT, GrowthClass.CONSTANT),
    "pop_back": (GrowthClass.CONSTANT, GrowthClass.CONSTANT),
    "pop_front": (GrowthClass.CONSTANT, GrowthClass.CONSTANT),
    "push": (GrowthClass.CONSTANT, GrowthClass.CONSTANT),
    "pop": (GrowthClass.CONSTANT, GrowthClass.CONSTANT),
    "append": (GrowthClass.CONSTANT, GrowthClass.CONSTANT),
    "appendleft": (GrowthClass.CONSTANT, GrowthClass.CONSTANT),
    "popleft": (GrowthClass.CONSTANT, GrowthClass.CONSTANT),
    "swap": (GrowthClass.CONSTANT, GrowthClass.CONSTANT),
    "len": (GrowthClass.CONSTANT, GrowthClass.CONSTANT),
    "size": (GrowthClass.CONSTANT, GrowthClass.CONSTANT),
    "empty": (GrowthClass.CONSTANT, GrowthClass.CONSTANT),
    "print": (GrowthClass.CONSTANT, GrowthClass.CONSTANT),
    "printf": (GrowthClass.CONSTANT, GrowthClass.CONSTANT),
    "println": (GrowthClass.CONSTANT, GrowthClass.CONSTANT),
}

UNKNOWN_CALL_CONFIDENCE = 0.5


@dataclass(frozen=True)
class LibraryOperation:
    name: str
    time_class: GrowthClass
    space_class: GrowthClass
    confidence: float


@dataclass(frozen=True)
class BlockExtent:
    """Where a header's body lives inside the logical line list.

    ``body_start > body_end`` denotes an empty body.  ``inline`` holds body
    text sharing the header line (``if (x) return y;``).
    """

    body_start: int
    body_end: int
    last_index: int
    inline: Optional[str] = None
    unmatched: bool = False


def function_name(text: str) -> Optional[str]:
    """Return the declared name when ``text`` is a function header."""

    for pattern in (_DEF_FUNCTION, _JS_FUNCTION, _GO_FUNCTION, _RUST_FUNCTION):
        match = pattern.match(text)
        if match:
            return match.group("name")

    match = _TYPED_FUNCTION.match(text)
    if not match:
        return None
    type_name = match.group("type").split("<", 1)[0].strip()
    name = match.group("name")
    if type_name in KEYWORDS or name in KEYWORDS:
        return None
    if "=" in text.split("(", 1)[0]:
        return None
    return name


def classify(text: str) -> Optional[NodeKind]:
    """Classify one logical line; ``None`` means the line is skipped."""

    if not text or text in ("{", "}") or text.startswith("}"):
        return None
    if function_name(text):
        return NodeKind.FUNCTION
    if _LOOP.match(text):
        return NodeKind.LOOP
    if _CONDITIONAL.match(text):
        return NodeKind.CONDITIONAL
    if _TYPED_DECLARATION.match(text) or _ASSIGNMENT_DECLARATION.match(text):
        return NodeKind.VARIABLE
    if call_names(text):
        return NodeKind.CALL
    if _RETURN.match(text):
        return NodeKind.RETURN
    return None


def call_names(text: str) -> List[str]:
    """Names of every call expression on the line, keywords excluded."""

    return [
        match.group("name")
        for match in _CALL.finditer(text)
        if match.group("name") not in KEYWORDS
    ]


def library_operation(name: str, user_functions: Set[str]) -> LibraryOperation:
    """Complexity of a call; user-defined names never hit the library table."""

    if name in user_functions:
        return LibraryOperation(
            name, GrowthClass.CONSTANT, GrowthClass.CONSTANT, confidence=0.7
        )
    known = _LIBRARY_OPERATIONS.get(name)
    if known is None:
        return LibraryOperation(
            name,
            GrowthClass.CONSTANT,
            GrowthClass.CONSTANT,
            confidence=UNKNOWN_CALL_CONFIDENCE,
        )
    return LibraryOperation(name, known[0], known[1], confidence=1.0)


def is_known_operation(name: str) -> bool:
    return name in _LIBRARY_OPERATIONS


def container_kind(text: str) -> Optional[str]:
    """``"matrix"``, ``"container"`` or ``None`` for a declaration line."""

    left, right = split_assignment(text)
    if _NESTED_TYPE.search(left) or (right and _NESTED_CONSTRUCTOR.search(right)):
        return "matrix"
    if (
        _CONTAINER_TYPE.search(left)
        or _ARRAY_DECLARATOR.search(left)
        or (right and _CONSTRUCTOR.search(right))
    ):
        return "container"
    return None


def split_assignment(text: str) -> Tuple[str, str]:
    """Split a declaration into its declarator and initializer parts."""

    match = _ASSIGNMENT_OPERATOR.search(text)
    if not match:
        return text, ""
    return text[: match.start()], text[match.end():].strip()


def loop_kind(text: str) -> str:
    if text.startswith("do"):
        return "do_while"
    if text.startswith("while"):
        return "while"
    if re.match(r"^for(?:each)?\s*\(.*:", text) or re.match(r"^for\s+.+\s+in\b", text):
        return "range_based"
    return "for"


def header_condition(text: str) -> str:
    """Text of the parenthesised (or ``:``-terminated) header condition."""

    match = re.match(r"^(?:else\s+if|if|elif|while|for|foreach|switch)\s*", text)
    if not match:
        return ""
    rest = text[match.end():]
    if rest.startswith("("):
        close = _matching_paren(rest, 0)
        return rest[1:close] if close is not None else rest[1:]
    return re.split(r":\s*$|\{\s*$", rest, maxsplit=1)[0]


def inline_remainder(text: str) -> str:
    """Body text that shares the header line, e.g. ``return 1;``."""

    match = re.match(r"^(?:else\s+if|if|elif|while|for|foreach|switch)\s*", text)
    if match:
        rest = text[match.end():]
        if rest.startswith("("):
            close = _matching_paren(rest, 0)
            if close is None:
                return ""
            return rest[close + 1 :].strip()
        if ":" in rest:
            return rest.split(":", 1)[1].strip()
        return ""

    match = re.match(r"^(?:else|do|try)\b\s*:?", text)
    if match:
        return text[match.end():].strip()
    return ""


def _matching_paren(text: str, start: int) -> Optional[int]:
    depth = 0
    for index in range(start, len(text)):
        if text[index] == "(":
            depth += 1
        elif text[index] == ")":
            depth -= 1
            if depth == 0:
                return index
    return None


def resolve_block(
    lines: List[LogicalLine], index: int, limit: int, kind: NodeKind
) -> BlockExtent:
    """Resolve the body range of the header at ``index`` (bounded by ``limit``)."""

    header = lines[index]
    text = header.text

    if text.endswith("{"):
        return _brace_block(lines, index, index, limit)

    if index + 1 <= limit and lines[index + 1].text.startswith("{"):
        return _brace_block(lines, index + 1, index, limit)

    if text.endswith(":"):
        return _indentation_block(lines, index, limit)

    if kind is NodeKind.FUNCTION:
        for lookahead in range(index + 1, min(index + 4, limit + 1)):
            if lines[lookahead].text.endswith("{"):
                return _brace_block(lines, lookahead, lookahead, limit)
            if classify(lines[lookahead].text) is not None:
                break
        return BlockExtent(index + 1, index, index)

    remainder = inline_remainder(text)
    if remainder == ";":
        return BlockExtent(index + 1, index, index)
    if remainder:
        return BlockExtent(index + 1, index, index, inline=remainder)

    if index + 1 > limit:
        return BlockExtent(index + 1, index, index)
    statement_end = statement_extent(lines, index + 1, limit)
    return BlockExtent(index + 1, statement_end, statement_end)


def statement_extent(lines: List[LogicalLine], index: int, limit: int) -> int:
    """Last line index of the statement starting at ``index``."""

    kind = classify(lines[index].text)
    if kind in (NodeKind.FUNCTION, NodeKind.LOOP, NodeKind.CONDITIONAL):
        extent = resolve_block(lines, index, limit, kind)
        return extent.last_index
    return index


def _brace_block(
    lines: List[LogicalLine], open_index: int, header_index: int, limit: int
) -> BlockExtent:
    depth = 0
    for position in range(open_index, limit + 1):
        line_text = lines[position].text
        depth += line_text.count("{") - line_text.count("}")
        if position > open_index and depth <= 0:
            return BlockExtent(open_index + 1, position - 1, position)
    return BlockExtent(open_index + 1, limit, limit, unmatched=True)


def _indentation_block(lines: List[LogicalLine], index: int, limit: int) -> BlockExtent:
    header_indent = lines[index].indent
    end = index
    for position in range(index + 1, limit + 1):
        if lines[position].indent <= header_indent:
            break
        end = position
    return BlockExtent(index + 1, end, end)
