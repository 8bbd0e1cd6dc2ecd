"""
Recursion pattern detector.
Classifies self-calling functions by the shape of their recursion.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List

from complexity_estimator.domain.models.growth import GrowthClass
from complexity_estimator.domain.models.source import SourceView
from complexity_estimator.domain.models.syntax import RecursionType
from complexity_estimator.domain.services.pattern_detectors import predicates as p
from complexity_estimator.domain.services.pattern_detectors.base_detector import PatternDetector

_HALVING = re.compile(p.HALVING_EVIDENCE, re.IGNORECASE)
_LINEAR_COMBINE = re.compile(p.LINEAR_COMBINE_EVIDENCE, re.IGNORECASE)
_MEMOIZATION = re.compile(p.MEMOIZATION_EVIDENCE, re.IGNORECASE)


@dataclass(frozen=True)
class RecursionProfile:
    recursion_type: RecursionType
    time_class: GrowthClass
    space_class: GrowthClass
    confidence: float
    evidence: List[str] = field(default_factory=list)


class RecursionPatternDetector(PatternDetector):
    """
    Detects recursive patterns in function bodies.

    Rules, first match wins:
        - two or more recursive sites with halving evidence: divide and
          conquer, O(n log n) with a linear combine step, else O(log n)
        - two or more sites with a memo table: memoized, O(n)
        - two or more sites otherwise: binary-tree recursion, O(2^n)
        - exactly one site: linear recursion, O(n)
        - no site: unknown, low confidence
    """

    def classify(self, name: str, body_text: str, sites: int) -> RecursionProfile:
        if sites <= 0:
            return RecursionProfile(
                RecursionType.UNKNOWN,
                GrowthClass.UNKNOWN,
                GrowthClass.CONSTANT,
                confidence=0.3,
            )

        if sites == 1:
            return RecursionProfile(
                RecursionType.LINEAR,
                GrowthClass.LINEAR,
                GrowthClass.LINEAR,
                confidence=0.8,
                evidence=["single-recursive-site"],
            )

        combine_text = self._without_self_calls(name, body_text)
        if _HALVING.search(body_text):
            evidence = ["multiple-recursive-sites", "halving"]
            if _LINEAR_COMBINE.search(combine_text):
                evidence.append("linear-combine")
                time_class = GrowthClass.LINEARITHMIC
            else:
                time_class = GrowthClass.LOGARITHMIC
            return RecursionProfile(
                RecursionType.DIVIDE_AND_CONQUER,
                time_class,
                GrowthClass.LOGARITHMIC,
                confidence=0.85,
                evidence=evidence,
            )

        if _MEMOIZATION.search(body_text):
            return RecursionProfile(
                RecursionType.MEMOIZED,
                GrowthClass.LINEAR,
                GrowthClass.LINEAR,
                confidence=0.75,
                evidence=["multiple-recursive-sites", "memoization"],
            )

        return RecursionProfile(
            RecursionType.BINARY_TREE,
            GrowthClass.EXPONENTIAL,
            GrowthClass.LINEAR,
            confidence=0.8,
            evidence=["multiple-recursive-sites"],
        )

    def detect(self, node: Any) -> Dict[str, Any]:
        """
        Summarize recursion across every function of a source view.

        Returns:
            Dictionary with keys:
                - has_recursion: boolean
                - recursive_functions: names of self-calling functions
                - profiles: name -> RecursionProfile
                - max_recursive_sites: largest site count of any function
        """
        result: Dict[str, Any] = {
            "has_recursion": False,
            "recursive_functions": [],
            "profiles": {},
            "max_recursive_sites": 0,
        }
        if not isinstance(node, SourceView):
            return result

        for span in node.recursive_functions():
            result["has_recursion"] = True
            result["recursive_functions"].append(span.name)
            result["profiles"][span.name] = self.classify(
                span.name, span.body_text, span.recursive_sites
            )
            result["max_recursive_sites"] = max(
                result["max_recursive_sites"], span.recursive_sites
            )
        return result

    def _without_self_calls(self, name: str, body_text: str) -> str:
        """Body text with the function's own call sites blanked out."""

        return re.sub(rf"\b{re.escape(name)}\s*\(", "(", body_text)
