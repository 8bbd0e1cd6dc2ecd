"""
Memoization pattern detector.
Identifies dynamic programming through memo/dp table usage.
"""

import re
from dataclasses import replace
from typing import Any, Dict, List

from complexity_estimator.domain.models.analysis import AlgorithmMatch, CaseSplit
from complexity_estimator.domain.models.growth import GrowthClass, GrowthLattice
from complexity_estimator.domain.models.source import SourceView
from complexity_estimator.domain.services.pattern_detectors import predicates as p
from complexity_estimator.domain.services.pattern_detectors.base_detector import (
    CatalogueDetector,
    CatalogueEntry,
    entry,
)

_TABLE_ACCESS = re.compile(
    r"\b(?P<name>(?:dp|memo|cache|table)\w*)(?P<subscripts>(?:\s*\[[^\]]*\])+)",
    re.IGNORECASE,
)
_SUBSCRIPT = re.compile(r"\[([^\]]*)\]")


class MemoizationPatternDetector(CatalogueDetector):
    """
    Detects dynamic programming over a memo or dp table.

    The reported class follows the table dimensionality: one index gives
    O(n), two give O(n²), three or more give O(n³).
    """

    def build_entries(self) -> List[CatalogueEntry]:
        return [
            entry(
                "Dynamic Programming",
                "Reuse solutions of overlapping subproblems stored in a table",
                p.MEMO_TABLE,
                p.BASE_CASE,
                p.RECURRENCE,
                time_class=GrowthClass.LINEAR,
                space_class=GrowthClass.LINEAR,
                confidence=0.8,
            )
        ]

    def refine(self, match: AlgorithmMatch, view: SourceView) -> AlgorithmMatch:
        summary = self.summarize(view)
        growth = GrowthLattice.from_polynomial_degree(
            max(1, summary["state_dimensions"])
        )
        return replace(
            match,
            time_class=growth,
            space_class=growth,
            time_label=growth.label,
            cases=CaseSplit.uniform(growth),
            evidence=match.evidence + [f"state-dimensions={summary['state_dimensions']}"],
        )

    def summarize(self, view: SourceView) -> Dict[str, Any]:
        """
        Describe the memo tables found in the source.

        Returns:
            Dictionary with keys:
                - has_memoization: boolean
                - memo_variables: table names in order of appearance
                - state_dimensions: widest index tuple seen on any table
        """
        result: Dict[str, Any] = {
            "has_memoization": False,
            "memo_variables": [],
            "state_dimensions": 0,
        }

        for match in _TABLE_ACCESS.finditer(view.text):
            name = match.group("name")
            dimensions = self._count_dimensions(match.group("subscripts"))
            if dimensions == 0:
                continue
            result["has_memoization"] = True
            if name not in result["memo_variables"]:
                result["memo_variables"].append(name)
            result["state_dimensions"] = max(result["state_dimensions"], dimensions)

        if not result["has_memoization"] and p.MEMO_TABLE(view):
            result["has_memoization"] = True
            result["state_dimensions"] = 1

        return result

    def _count_dimensions(self, subscripts: str) -> int:
        """``[i][j]`` and ``[i, j]`` both count as two dimensions."""

        dimensions = 0
        for index in _SUBSCRIPT.findall(subscripts):
            index = index.strip().strip("()")
            if not index:
                continue
            dimensions += len([part for part in index.split(",") if part.strip()])
        return dimensions
