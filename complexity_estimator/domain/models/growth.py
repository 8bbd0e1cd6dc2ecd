"""
Growth class lattice shared by every estimation stage.

The canonical classes form a strict total order:

    O(1) < O(log n) < O(√n) < O(n) < O(n log n) < O(n²) < O(n³) < O(2^n) < O(n!)

``GrowthClass.UNKNOWN`` is a sentinel that sits outside the order and is
absorbed by any known class when taking a maximum.

Combination rules are table driven. Polynomial and logarithmic classes are
modelled as ``(power of n, power of log n)``; a product is snapped upward to
the smallest lattice class bounding it, so every combination lands back in the
fixed set.
"""

from __future__ import annotations

import logging
import math
import re
from enum import Enum
from functools import lru_cache
from typing import Dict, Iterable, Sequence, Tuple

import numpy as np
import sympy as sp
from sympy.parsing.sympy_parser import (
    convert_xor,
    implicit_multiplication_application,
    parse_expr,
    standard_transformations,
)

logger = logging.getLogger(__name__)


class GrowthClass(str, Enum):
    """
    Canonical asymptotic growth classes.

    Members compare by lattice rank rather than by their string value, so
    ``GrowthClass.LINEAR < GrowthClass.QUADRATIC`` holds.

    Example:
        >>> GrowthClass.LINEAR < GrowthClass.LINEARITHMIC
        True
        >>> GrowthClass.QUADRATIC.label
        'O(n²)'
    """

    CONSTANT = "O(1)"
    LOGARITHMIC = "O(log n)"
    SQRT = "O(√n)"
    LINEAR = "O(n)"
    LINEARITHMIC = "O(n log n)"
    QUADRATIC = "O(n²)"
    CUBIC = "O(n³)"
    EXPONENTIAL = "O(2^n)"
    FACTORIAL = "O(n!)"
    UNKNOWN = "Unknown"

    @property
    def label(self) -> str:
        return self.value

    @property
    def is_known(self) -> bool:
        return self is not GrowthClass.UNKNOWN

    @property
    def rank(self) -> int:
        """Position in the canonical order; ``-1`` for UNKNOWN."""
        return _RANKS.get(self, -1)

    def __lt__(self, other):
        if not isinstance(other, GrowthClass):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, GrowthClass):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, GrowthClass):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, GrowthClass):
            return NotImplemented
        return self.rank >= other.rank

    def __str__(self) -> str:
        return self.value


CANONICAL_ORDER: Tuple[GrowthClass, ...] = (
    GrowthClass.CONSTANT,
    GrowthClass.LOGARITHMIC,
    GrowthClass.SQRT,
    GrowthClass.LINEAR,
    GrowthClass.LINEARITHMIC,
    GrowthClass.QUADRATIC,
    GrowthClass.CUBIC,
    GrowthClass.EXPONENTIAL,
    GrowthClass.FACTORIAL,
)

_RANKS: Dict[GrowthClass, int] = {cls: idx for idx, cls in enumerate(CANONICAL_ORDER)}

# (power of n, power of log n) for the polynomial part of the lattice
_SHAPES: Dict[GrowthClass, Tuple[float, int]] = {
    GrowthClass.CONSTANT: (0.0, 0),
    GrowthClass.LOGARITHMIC: (0.0, 1),
    GrowthClass.SQRT: (0.5, 0),
    GrowthClass.LINEAR: (1.0, 0),
    GrowthClass.LINEARITHMIC: (1.0, 1),
    GrowthClass.QUADRATIC: (2.0, 0),
    GrowthClass.CUBIC: (3.0, 0),
}

_MAX_POLYNOMIAL_POWER = 3.0

EXPONENTIAL_CAP = 30
FACTORIAL_CAP = 12

_SIMPLIFY: Dict[GrowthClass, GrowthClass] = {
    GrowthClass.QUADRATIC: GrowthClass.LINEAR,
    GrowthClass.LINEARITHMIC: GrowthClass.LINEAR,
    GrowthClass.CUBIC: GrowthClass.QUADRATIC,
    GrowthClass.EXPONENTIAL: GrowthClass.QUADRATIC,
    GrowthClass.FACTORIAL: GrowthClass.EXPONENTIAL,
}

_COMPLICATE: Dict[GrowthClass, GrowthClass] = {
    GrowthClass.CONSTANT: GrowthClass.LOGARITHMIC,
    GrowthClass.LOGARITHMIC: GrowthClass.LINEAR,
    GrowthClass.LINEAR: GrowthClass.LINEARITHMIC,
    GrowthClass.LINEARITHMIC: GrowthClass.QUADRATIC,
    GrowthClass.QUADRATIC: GrowthClass.CUBIC,
}

_LABEL_ALIASES: Dict[str, GrowthClass] = {
    "1": GrowthClass.CONSTANT,
    "c": GrowthClass.CONSTANT,
    "constant": GrowthClass.CONSTANT,
    "log n": GrowthClass.LOGARITHMIC,
    "logn": GrowthClass.LOGARITHMIC,
    "log(n)": GrowthClass.LOGARITHMIC,
    "lg n": GrowthClass.LOGARITHMIC,
    "log v": GrowthClass.LOGARITHMIC,
    "logarithmic": GrowthClass.LOGARITHMIC,
    "√n": GrowthClass.SQRT,
    "sqrt n": GrowthClass.SQRT,
    "sqrt(n)": GrowthClass.SQRT,
    "square root": GrowthClass.SQRT,
    "n": GrowthClass.LINEAR,
    "h": GrowthClass.LINEAR,
    "v + e": GrowthClass.LINEAR,
    "v+e": GrowthClass.LINEAR,
    "linear": GrowthClass.LINEAR,
    "n log n": GrowthClass.LINEARITHMIC,
    "nlogn": GrowthClass.LINEARITHMIC,
    "n log(n)": GrowthClass.LINEARITHMIC,
    "n*log(n)": GrowthClass.LINEARITHMIC,
    "(v + e) log v": GrowthClass.LINEARITHMIC,
    "(v+e) log v": GrowthClass.LINEARITHMIC,
    "e log v": GrowthClass.LINEARITHMIC,
    "linearithmic": GrowthClass.LINEARITHMIC,
    "n²": GrowthClass.QUADRATIC,
    "n^2": GrowthClass.QUADRATIC,
    "n*n": GrowthClass.QUADRATIC,
    "quadratic": GrowthClass.QUADRATIC,
    "n³": GrowthClass.CUBIC,
    "n^3": GrowthClass.CUBIC,
    "cubic": GrowthClass.CUBIC,
    "2^n": GrowthClass.EXPONENTIAL,
    "2ⁿ": GrowthClass.EXPONENTIAL,
    "exponential": GrowthClass.EXPONENTIAL,
    "n!": GrowthClass.FACTORIAL,
    "factorial": GrowthClass.FACTORIAL,
}

_N = sp.Symbol("n", positive=True)

_EXPRESSIONS: Dict[GrowthClass, sp.Expr] = {
    GrowthClass.CONSTANT: sp.Integer(1),
    GrowthClass.LOGARITHMIC: sp.log(_N),
    GrowthClass.SQRT: sp.sqrt(_N),
    GrowthClass.LINEAR: _N,
    GrowthClass.LINEARITHMIC: _N * sp.log(_N),
    GrowthClass.QUADRATIC: _N**2,
    GrowthClass.CUBIC: _N**3,
    GrowthClass.EXPONENTIAL: 2**_N,
    GrowthClass.FACTORIAL: sp.factorial(_N),
}

_TRANSFORMATIONS = standard_transformations + (
    implicit_multiplication_application,
    convert_xor,
)


def _snap(power: float, log_power: int) -> GrowthClass:
    """Return the smallest polynomial class bounding ``n^power · log^log_power n``."""

    for cls, (cls_power, cls_log) in _SHAPES.items():
        if cls_power > power or (cls_power == power and cls_log >= log_power):
            return cls
    return GrowthClass.CUBIC


def _build_multiply_table() -> Dict[Tuple[GrowthClass, GrowthClass], GrowthClass]:
    table: Dict[Tuple[GrowthClass, GrowthClass], GrowthClass] = {}
    members = list(GrowthClass)
    for left in members:
        for right in members:
            if left is GrowthClass.CONSTANT:
                product = right
            elif right is GrowthClass.CONSTANT:
                product = left
            elif GrowthClass.UNKNOWN in (left, right):
                product = GrowthClass.UNKNOWN
            elif GrowthClass.FACTORIAL in (left, right):
                product = GrowthClass.FACTORIAL
            elif GrowthClass.EXPONENTIAL in (left, right):
                product = GrowthClass.EXPONENTIAL
            else:
                left_power, left_log = _SHAPES[left]
                right_power, right_log = _SHAPES[right]
                product = _snap(left_power + right_power, left_log + right_log)
            table[(left, right)] = product
    return table


_MULTIPLY_TABLE = _build_multiply_table()


class GrowthLattice:
    """Table-driven combination operations over :class:`GrowthClass`."""

    @staticmethod
    def max(*classes: GrowthClass) -> GrowthClass:
        """Class-max; UNKNOWN is absorbed by any known class."""

        known = [cls for cls in classes if cls.is_known]
        if not known:
            return GrowthClass.UNKNOWN if classes else GrowthClass.CONSTANT
        return max(known, key=lambda cls: cls.rank)

    @staticmethod
    def max_of(classes: Iterable[GrowthClass]) -> GrowthClass:
        return GrowthLattice.max(*list(classes))

    @staticmethod
    def min(*classes: GrowthClass) -> GrowthClass:
        known = [cls for cls in classes if cls.is_known]
        if not known:
            return GrowthClass.UNKNOWN
        return min(known, key=lambda cls: cls.rank)

    @staticmethod
    def multiply(left: GrowthClass, right: GrowthClass) -> GrowthClass:
        """Nesting combination. ``CONSTANT`` is the identity for every class."""

        return _MULTIPLY_TABLE[(left, right)]

    @staticmethod
    def exceeds_cap(left: GrowthClass, right: GrowthClass) -> bool:
        """True when a polynomial product had to be capped at cubic."""

        if left not in _SHAPES or right not in _SHAPES:
            return False
        return _SHAPES[left][0] + _SHAPES[right][0] > _MAX_POLYNOMIAL_POWER

    @staticmethod
    def steps(left: GrowthClass, right: GrowthClass) -> int:
        """Number of lattice steps separating two known classes."""

        if not (left.is_known and right.is_known):
            raise ValueError("Lattice distance is undefined for UNKNOWN")
        return abs(left.rank - right.rank)

    @staticmethod
    def simplify(cls: GrowthClass) -> GrowthClass:
        return _SIMPLIFY.get(cls, cls)

    @staticmethod
    def complicate(cls: GrowthClass) -> GrowthClass:
        return _COMPLICATE.get(cls, cls)

    @staticmethod
    def from_polynomial_degree(degree: int) -> GrowthClass:
        """Map a loop-nesting degree onto the lattice (capped at cubic)."""

        if degree <= 0:
            return GrowthClass.CONSTANT
        return {1: GrowthClass.LINEAR, 2: GrowthClass.QUADRATIC}.get(
            degree, GrowthClass.CUBIC
        )

    @staticmethod
    def expression(cls: GrowthClass) -> sp.Expr:
        if cls not in _EXPRESSIONS:
            raise ValueError(f"No growth expression for {cls.label}")
        return _EXPRESSIONS[cls]

    @staticmethod
    def growth_value(cls: GrowthClass, size: float) -> float:
        """Numeric growth function ``f(size)`` used by sampling and fitting."""

        return float(GrowthLattice.growth_values(cls, [size])[0])

    @staticmethod
    def growth_values(cls: GrowthClass, sizes: Sequence[float]) -> np.ndarray:
        n = np.asarray(sizes, dtype=float)
        if cls is GrowthClass.CONSTANT:
            return np.ones_like(n)
        if cls is GrowthClass.LOGARITHMIC:
            return np.log2(n)
        if cls is GrowthClass.SQRT:
            return np.sqrt(n)
        if cls is GrowthClass.LINEAR:
            return n
        if cls is GrowthClass.LINEARITHMIC:
            return n * np.log2(n)
        if cls is GrowthClass.QUADRATIC:
            return n**2
        if cls is GrowthClass.CUBIC:
            return n**3
        if cls is GrowthClass.EXPONENTIAL:
            return np.power(2.0, np.minimum(n, EXPONENTIAL_CAP))
        if cls is GrowthClass.FACTORIAL:
            return np.array(
                [float(math.factorial(int(min(value, FACTORIAL_CAP)))) for value in n]
            )
        raise ValueError(f"No growth function for {cls.label}")

    @staticmethod
    def parse_label(label) -> GrowthClass:
        """Normalize a free-form complexity label onto the lattice."""

        if isinstance(label, GrowthClass):
            return label
        if not label:
            return GrowthClass.UNKNOWN
        return _parse_label_cached(str(label))


_NOTATION_PATTERN = re.compile(
    r"^(?:big-?o|o|θ|ω|theta|omega)\s*\((?P<body>.*)\)$"
)


def _strip_notation(label: str) -> str:
    """Reduce ``"O(n log n) average, O(n²) worst"`` to ``"n log n"``."""

    text = " ".join(label.strip().lower().split())
    text = text.split(",", 1)[0]
    for qualifier in (" average", " worst", " best", " amortized"):
        text = text.split(qualifier, 1)[0]
    text = text.strip()
    match = _NOTATION_PATTERN.match(text)
    if match:
        text = match.group("body").strip()
    if " to " in text:
        text = text.rsplit(" to ", 1)[1].strip()
    return text


@lru_cache(maxsize=256)
def _parse_label_cached(label: str) -> GrowthClass:
    for member in CANONICAL_ORDER:
        if label.strip() == member.value:
            return member

    if label.strip().lower().startswith("between"):
        return GrowthClass.UNKNOWN
    text = _strip_notation(label)
    if text in _LABEL_ALIASES:
        return _LABEL_ALIASES[text]

    sanitized = (
        text.replace("²", "**2")
        .replace("³", "**3")
        .replace("√n", "sqrt(n)")
        .replace("lg", "log")
    )
    try:
        expr = parse_expr(
            sanitized,
            local_dict={"n": _N, "log": sp.log, "sqrt": sp.sqrt},
            transformations=_TRANSFORMATIONS,
        )
    except Exception as exc:
        logger.debug("Unable to parse complexity label %r: %s", label, exc)
        return GrowthClass.UNKNOWN

    if not isinstance(expr, sp.Expr) or expr.free_symbols - {_N}:
        logger.debug("Complexity label %r is not an expression in n", label)
        return GrowthClass.UNKNOWN

    for member in CANONICAL_ORDER:
        try:
            ratio = sp.limit(expr / _EXPRESSIONS[member], _N, sp.oo)
            if ratio.is_finite:
                return member
            if member is GrowthClass.CUBIC and _is_polynomially_bounded(expr):
                return GrowthClass.CUBIC
        except Exception as exc:
            logger.debug("Limit comparison failed for %r: %s", label, exc)
            return GrowthClass.UNKNOWN
    return GrowthClass.UNKNOWN


def _is_polynomially_bounded(expr: sp.Expr) -> bool:
    """Polynomials above cubic are capped at cubic, matching ``multiply``."""

    try:
        degree = sp.limit(sp.log(expr) / sp.log(_N), _N, sp.oo)
    except Exception as exc:
        logger.debug("Degree estimate failed for %s: %s", expr, exc)
        return False
    return bool(degree.is_finite)
