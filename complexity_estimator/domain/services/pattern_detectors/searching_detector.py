"""
Searching pattern detector.
Recognises binary and linear search.
"""

from typing import List

from complexity_estimator.domain.models.analysis import CaseSplit
from complexity_estimator.domain.models.growth import GrowthClass
from complexity_estimator.domain.services.pattern_detectors import predicates as p
from complexity_estimator.domain.services.pattern_detectors.base_detector import (
    CatalogueDetector,
    CatalogueEntry,
    entry,
)


class SearchPatternDetector(CatalogueDetector):
    """Linear search is only reported when the binary search evidence fails."""

    def build_entries(self) -> List[CatalogueEntry]:
        return [
            entry(
                "Binary Search",
                "Halve the search interval around a midpoint",
                p.MIDPOINT_CALCULATION,
                p.LOW_HIGH_BOUNDS,
                p.MID_COMPARISON,
                p.BOUND_UPDATE,
                time_class=GrowthClass.LOGARITHMIC,
                space_class=GrowthClass.CONSTANT,
                confidence=0.95,
                cases=CaseSplit(
                    GrowthClass.CONSTANT,
                    GrowthClass.LOGARITHMIC,
                    GrowthClass.LOGARITHMIC,
                ),
            ),
            entry(
                "Linear Search",
                "Scan elements one by one until the target is found",
                p.HAS_LOOP,
                p.ELEMENT_TARGET_COMPARISON,
                p.EARLY_RETURN,
                ~p.BINARY_SEARCH_EVIDENCE,
                time_class=GrowthClass.LINEAR,
                space_class=GrowthClass.CONSTANT,
                confidence=0.8,
                cases=CaseSplit(
                    GrowthClass.CONSTANT, GrowthClass.LINEAR, GrowthClass.LINEAR
                ),
            ),
        ]
