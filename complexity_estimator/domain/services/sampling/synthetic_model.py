"""
Synthetic cost model.

Classifies a source into one coarse growth bucket from its structural and
pattern signals, then produces noisy costs following that bucket.
"""

import logging
import re
from typing import Callable, List, Tuple

import numpy as np

from complexity_estimator.domain.models.growth import GrowthClass, GrowthLattice
from complexity_estimator.domain.models.source import SourceView
from complexity_estimator.domain.models.syntax import RecursionType
from complexity_estimator.domain.services.pattern_detectors import predicates as p
from complexity_estimator.domain.services.pattern_detectors.recursion_detector import (
    RecursionPatternDetector,
)
from complexity_estimator.domain.services.sampling.base_model import CostModel

logger = logging.getLogger(__name__)

_SORT_CALL = re.compile(r"\b(?:sort|sorted|stable_sort|heapsort|mergesort|quicksort)\w*\s*\(", re.IGNORECASE)
_WHILE = re.compile(r"\bwhile\b")
_HALVING = re.compile(r"/=?\s*2\b|>>=?\s*1\b")
_QUADRATIC_NAMES = re.compile(r"\b(?:bubble|insertion|selection)_?sort\b", re.IGNORECASE)

BASE_FACTOR_RANGE = (0.001, 0.003)
NOISE_RANGE = (0.8, 1.2)

Rule = Tuple[GrowthClass, Callable[[SourceView, dict], bool]]


class SyntheticCostModel(CostModel):
    """
    Noisy cost model standing in for real execution.

    Rules are evaluated in order; the first that holds picks the bucket:
        constant, exponential, cubic, quadratic, linearithmic,
        logarithmic, linear.
    """

    name = "synthetic"

    def __init__(self):
        self._recursion = RecursionPatternDetector()
        self._rules: List[Rule] = [
            (GrowthClass.CONSTANT, self._is_constant),
            (GrowthClass.EXPONENTIAL, self._is_exponential),
            (GrowthClass.CUBIC, lambda view, _: view.max_loop_depth >= 3),
            (GrowthClass.QUADRATIC, self._is_quadratic),
            (GrowthClass.LINEARITHMIC, self._is_linearithmic),
            (GrowthClass.LOGARITHMIC, self._is_logarithmic),
            (GrowthClass.LINEAR, lambda view, _: True),
        ]

    def bucket(self, view: SourceView) -> GrowthClass:
        recursion = self._recursion.detect(view)
        for growth, rule in self._rules:
            if rule(view, recursion):
                logger.debug("Synthetic cost bucket: %s", growth.label)
                return growth
        return GrowthClass.LINEAR

    def base_factor(self, rng: np.random.Generator) -> float:
        return float(rng.uniform(*BASE_FACTOR_RANGE))

    def cost(
        self,
        size: int,
        bucket: GrowthClass,
        base_factor: float,
        rng: np.random.Generator,
    ) -> float:
        noise = float(rng.uniform(*NOISE_RANGE))
        return base_factor * GrowthLattice.growth_value(bucket, size) * noise

    # ----- bucket rules ----------------------------------------------------

    def _is_constant(self, view: SourceView, recursion: dict) -> bool:
        return (
            view.loop_count == 0
            and not recursion["has_recursion"]
            and not _SORT_CALL.search(view.text)
        )

    def _is_exponential(self, view: SourceView, recursion: dict) -> bool:
        return any(
            profile.recursion_type is RecursionType.BINARY_TREE
            for profile in recursion["profiles"].values()
        )

    def _is_quadratic(self, view: SourceView, recursion: dict) -> bool:
        return view.max_loop_depth == 2 or bool(_QUADRATIC_NAMES.search(view.text))

    def _is_linearithmic(self, view: SourceView, recursion: dict) -> bool:
        if _SORT_CALL.search(view.text):
            return True
        return any(
            profile.recursion_type is RecursionType.DIVIDE_AND_CONQUER
            and profile.time_class is GrowthClass.LINEARITHMIC
            for profile in recursion["profiles"].values()
        )

    def _is_logarithmic(self, view: SourceView, recursion: dict) -> bool:
        if p.BINARY_SEARCH_EVIDENCE(view):
            return True
        if _WHILE.search(view.text) and _HALVING.search(view.text):
            return True
        return any(
            profile.recursion_type is RecursionType.DIVIDE_AND_CONQUER
            for profile in recursion["profiles"].values()
        )
