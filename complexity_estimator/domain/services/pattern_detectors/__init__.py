"""
Pattern detection utilities package.
Contains the algorithm catalogue detectors and structural detectors.
"""

from complexity_estimator.domain.services.pattern_detectors.base_detector import (
    CatalogueDetector,
    CatalogueEntry,
    PatternDetector,
)
from complexity_estimator.domain.services.pattern_detectors.graph_detector import GraphPatternDetector
from complexity_estimator.domain.services.pattern_detectors.loop_detector import LoopPatternDetector
from complexity_estimator.domain.services.pattern_detectors.memoization_detector import MemoizationPatternDetector
from complexity_estimator.domain.services.pattern_detectors.pattern_matcher import PatternMatcher
from complexity_estimator.domain.services.pattern_detectors.recursion_detector import (
    RecursionPatternDetector,
    RecursionProfile,
)
from complexity_estimator.domain.services.pattern_detectors.searching_detector import SearchPatternDetector
from complexity_estimator.domain.services.pattern_detectors.sorting_detector import SortingPatternDetector
from complexity_estimator.domain.services.pattern_detectors.tree_traversal_detector import TreeTraversalPatternDetector

__all__ = [
    "PatternDetector",
    "CatalogueDetector",
    "CatalogueEntry",
    "PatternMatcher",
    "RecursionPatternDetector",
    "RecursionProfile",
    "LoopPatternDetector",
    "SortingPatternDetector",
    "SearchPatternDetector",
    "GraphPatternDetector",
    "MemoizationPatternDetector",
    "TreeTraversalPatternDetector",
]
