"""
Catalogue-based algorithm pattern matcher.

Runs every catalogue detector against one normalized source view.  Entries
are evaluated independently and several may match the same source.
"""

import logging
from typing import List, Optional, Sequence

from complexity_estimator.domain.models.analysis import AlgorithmMatch
from complexity_estimator.domain.models.source import SourceView
from complexity_estimator.domain.services.pattern_detectors.base_detector import CatalogueDetector
from complexity_estimator.domain.services.pattern_detectors.graph_detector import GraphPatternDetector
from complexity_estimator.domain.services.pattern_detectors.memoization_detector import MemoizationPatternDetector
from complexity_estimator.domain.services.pattern_detectors.searching_detector import SearchPatternDetector
from complexity_estimator.domain.services.pattern_detectors.sorting_detector import SortingPatternDetector
from complexity_estimator.domain.services.pattern_detectors.tree_traversal_detector import TreeTraversalPatternDetector

logger = logging.getLogger(__name__)


class PatternMatcher:
    """Evaluates the fixed algorithm catalogue."""

    def __init__(self, detectors: Optional[Sequence[CatalogueDetector]] = None):
        self.detectors: List[CatalogueDetector] = list(
            detectors
            if detectors is not None
            else (
                SortingPatternDetector(),
                SearchPatternDetector(),
                GraphPatternDetector(),
                MemoizationPatternDetector(),
                TreeTraversalPatternDetector(),
            )
        )

    @property
    def catalogue(self) -> List[str]:
        return [entry.name for detector in self.detectors for entry in detector.entries]

    def detect_all(self, view: SourceView) -> List[AlgorithmMatch]:
        """Return every catalogue entry whose predicates all hold."""

        if view.is_empty:
            return []

        matches: List[AlgorithmMatch] = []
        for detector in self.detectors:
            matches.extend(detector.detect(view))

        if matches:
            logger.debug(
                "Pattern matches: %s", ", ".join(match.name for match in matches)
            )
        return matches
