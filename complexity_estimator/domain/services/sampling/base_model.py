"""
Base cost model interface.
Defines the contract for strategies that stand in for real profiling.
"""

import math
import re
from abc import ABC, abstractmethod

import numpy as np

from complexity_estimator.domain.models.growth import GrowthClass
from complexity_estimator.domain.models.source import SourceView

_MATRIX = re.compile(
    r"\bmatrix\b|\b(?:vector|list|List|Vec|ArrayList)\s*<\s*(?:std::)?(?:vector|list|List|Vec|ArrayList)\b"
    r"|\[\s*\[|\w+\s*\[[^\]\n]+\]\s*\[[^\]\n]+\]\s*(?:;|=[^=])",
    re.IGNORECASE,
)
_CONTAINER = re.compile(
    r"\b(?:vector|array|list|deque|ArrayList|Vec)\b|=\s*\[|\w+\s*\[\s*\w+\s*\]\s*;",
    re.IGNORECASE,
)

BYTES_PER_ELEMENT = 4
STACK_FRAME_ELEMENTS = 8
CONSTANT_MEMORY = BYTES_PER_ELEMENT * 10


class CostModel(ABC):
    """
    Abstract base class for cost models.

    A model chooses the growth bucket for a source once per run, draws one
    base factor per run, then produces one cost per iteration.
    """

    name: str = "abstract"

    @abstractmethod
    def bucket(self, view: SourceView) -> GrowthClass:
        """Coarse growth class the synthetic costs follow."""

    @abstractmethod
    def base_factor(self, rng: np.random.Generator) -> float:
        """Per-run multiplier applied to every sample."""

    @abstractmethod
    def cost(
        self,
        size: int,
        bucket: GrowthClass,
        base_factor: float,
        rng: np.random.Generator,
    ) -> float:
        """Cost of one iteration at ``size``."""

    def memory(self, size: int, view: SourceView) -> float:
        """
        Memory estimate in bytes.

        Matrices grow with n², containers with n, recursive code with the
        stack depth log2 n, anything else stays constant.
        """
        text = view.text
        if _MATRIX.search(text):
            return float(BYTES_PER_ELEMENT * size * size)
        if _CONTAINER.search(text):
            return float(BYTES_PER_ELEMENT * size)
        if view.recursive_functions():
            return float(BYTES_PER_ELEMENT * STACK_FRAME_ELEMENTS * math.log2(max(size, 1)))
        return float(CONSTANT_MEMORY)
