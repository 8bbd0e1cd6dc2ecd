"""
Graph traversal pattern detector.
Recognises depth-first search, breadth-first search and Dijkstra.
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


class GraphPatternDetector(CatalogueDetector):
    """Graph classes are reported over n = V + E."""

    def build_entries(self) -> List[CatalogueEntry]:
        return [
            entry(
                "Depth-First Search",
                "Explore each branch fully before backtracking",
                p.RECURSIVE | p.EXPLICIT_STACK,
                p.VISITED,
                p.ADJACENCY,
                time_class=GrowthClass.LINEAR,
                space_class=GrowthClass.LINEAR,
                confidence=0.85,
                cases=CaseSplit.uniform(GrowthClass.LINEAR),
                time_label="O(V + E)",
            ),
            entry(
                "Breadth-First Search",
                "Visit vertices level by level using a queue",
                p.QUEUE,
                p.VISITED,
                p.QUEUE_DRAIN_LOOP,
                time_class=GrowthClass.LINEAR,
                space_class=GrowthClass.LINEAR,
                confidence=0.85,
                cases=CaseSplit.uniform(GrowthClass.LINEAR),
                time_label="O(V + E)",
            ),
            entry(
                "Dijkstra's Shortest Path",
                "Greedy shortest paths with a priority queue",
                p.PRIORITY_QUEUE,
                p.DISTANCE_TABLE,
                p.RELAXATION,
                time_class=GrowthClass.LINEARITHMIC,
                space_class=GrowthClass.LINEAR,
                confidence=0.9,
                cases=CaseSplit.uniform(GrowthClass.LINEARITHMIC),
                time_label="O((V + E) log V)",
            ),
        ]
