"""
Tree traversal pattern detector.
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


class TreeTraversalPatternDetector(CatalogueDetector):
    def build_entries(self) -> List[CatalogueEntry]:
        return [
            entry(
                "Tree Traversal",
                "Visit every node of a binary tree recursively",
                p.CHILD_ACCESS,
                p.CHILD_RECURSION,
                p.NULL_CHECK,
                time_class=GrowthClass.LINEAR,
                space_class=GrowthClass.LINEAR,
                confidence=0.85,
                cases=CaseSplit.uniform(GrowthClass.LINEAR),
            )
        ]
