"""
Sorting pattern detector.
Recognises classic comparison sorts from their lexical evidence.
"""

from dataclasses import replace
from typing import List

from complexity_estimator.domain.models.analysis import AlgorithmMatch, CaseSplit
from complexity_estimator.domain.models.growth import GrowthClass
from complexity_estimator.domain.models.source import SourceView
from complexity_estimator.domain.services.pattern_detectors import predicates as p
from complexity_estimator.domain.services.pattern_detectors.base_detector import (
    CatalogueDetector,
    CatalogueEntry,
    entry,
)

_NLOGN = GrowthClass.LINEARITHMIC


class SortingPatternDetector(CatalogueDetector):
    """
    Detects Merge, Quick, Heap, Bubble and Insertion Sort.

    Bubble Sort with an early-exit flag gets a linear best case.
    """

    def build_entries(self) -> List[CatalogueEntry]:
        return [
            entry(
                "Merge Sort",
                "Divide-and-conquer sort merging sorted halves",
                p.MERGE_CALL,
                p.HALVING_MIDPOINT,
                p.MULTI_RECURSIVE,
                p.AUXILIARY_BUFFER,
                p.BOUND_IDENTIFIERS,
                time_class=_NLOGN,
                space_class=GrowthClass.LINEAR,
                confidence=0.95,
                cases=CaseSplit.uniform(_NLOGN),
            ),
            entry(
                "Quick Sort",
                "Partition around a pivot and sort both sides recursively",
                p.PARTITION_OR_PIVOT,
                p.MULTI_RECURSIVE,
                p.SWAP,
                time_class=_NLOGN,
                space_class=GrowthClass.LOGARITHMIC,
                confidence=0.9,
                cases=CaseSplit(_NLOGN, _NLOGN, GrowthClass.QUADRATIC),
            ),
            entry(
                "Heap Sort",
                "Build a binary heap and repeatedly extract the maximum",
                p.HEAPIFY,
                p.CHILD_INDEX,
                p.SWAP,
                time_class=_NLOGN,
                space_class=GrowthClass.CONSTANT,
                confidence=0.9,
                cases=CaseSplit.uniform(_NLOGN),
            ),
            entry(
                "Bubble Sort",
                "Repeatedly swap adjacent out-of-order elements",
                p.NESTED_LOOPS,
                p.ADJACENT_COMPARISON,
                p.SWAP,
                time_class=GrowthClass.QUADRATIC,
                space_class=GrowthClass.CONSTANT,
                confidence=0.85,
                cases=CaseSplit.uniform(GrowthClass.QUADRATIC),
            ),
            entry(
                "Insertion Sort",
                "Insert each element into the sorted prefix",
                p.KEY_ELEMENT,
                p.SHIFTING,
                p.INSERTION,
                time_class=GrowthClass.QUADRATIC,
                space_class=GrowthClass.CONSTANT,
                confidence=0.8,
                cases=CaseSplit(
                    GrowthClass.LINEAR, GrowthClass.QUADRATIC, GrowthClass.QUADRATIC
                ),
            ),
        ]

    def refine(self, match: AlgorithmMatch, view: SourceView) -> AlgorithmMatch:
        if match.name == "Bubble Sort" and p.EARLY_EXIT_FLAG(view):
            return replace(
                match,
                cases=CaseSplit(
                    GrowthClass.LINEAR, GrowthClass.QUADRATIC, GrowthClass.QUADRATIC
                ),
                evidence=match.evidence + [p.EARLY_EXIT_FLAG.label],
            )
        return match
