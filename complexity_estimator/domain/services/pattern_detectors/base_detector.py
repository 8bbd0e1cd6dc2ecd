"""
Base pattern detector interfaces.
Defines contracts for tree-level detectors and catalogue detectors.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from complexity_estimator.domain.models.analysis import AlgorithmMatch, CaseSplit
from complexity_estimator.domain.models.growth import GrowthClass
from complexity_estimator.domain.models.source import SourceView
from complexity_estimator.domain.services.pattern_detectors.predicates import Predicate


class PatternDetector(ABC):
    """
    Abstract base class for tree-level detectors.
    Each detector summarizes one structural aspect of a syntax tree.
    """

    @abstractmethod
    def detect(self, node: Any) -> Dict[str, Any]:
        """
        Detect specific patterns in the given syntax node.
        """


@dataclass(frozen=True)
class CatalogueEntry:
    """Named algorithm recognised when every predicate holds."""

    name: str
    description: str
    predicates: tuple
    time_class: GrowthClass
    space_class: GrowthClass
    confidence: float
    cases: Optional[CaseSplit] = None
    time_label: Optional[str] = None

    def evaluate(self, view: SourceView) -> Optional[AlgorithmMatch]:
        evidence: List[str] = []
        for predicate in self.predicates:
            if not predicate(view):
                return None
            evidence.append(predicate.label)
        return AlgorithmMatch(
            name=self.name,
            description=self.description,
            time_class=self.time_class,
            space_class=self.space_class,
            confidence=self.confidence,
            cases=self.cases,
            time_label=self.time_label or self.time_class.label,
            evidence=evidence,
            line_start=view.lines[0].number if view.lines else None,
            line_end=view.lines[-1].number if view.lines else None,
        )


@dataclass
class CatalogueDetector(ABC):
    """
    Base class for detectors that evaluate a fixed group of catalogue entries.

    Subclasses list their entries and may refine a match afterwards, for
    instance to attach an optional case split.
    """

    entries: List[CatalogueEntry] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.entries:
            self.entries = self.build_entries()

    @abstractmethod
    def build_entries(self) -> List[CatalogueEntry]:
        """Return the catalogue entries owned by this detector."""

    def detect(self, view: SourceView) -> List[AlgorithmMatch]:
        matches: List[AlgorithmMatch] = []
        for entry in self.entries:
            match = entry.evaluate(view)
            if match is not None:
                matches.append(self.refine(match, view))
        return matches

    def refine(self, match: AlgorithmMatch, view: SourceView) -> AlgorithmMatch:
        return match


def entry(
    name: str,
    description: str,
    *predicates: Predicate,
    time_class: GrowthClass,
    space_class: GrowthClass,
    confidence: float,
    cases: Optional[CaseSplit] = None,
    time_label: Optional[str] = None,
) -> CatalogueEntry:
    return CatalogueEntry(
        name=name,
        description=description,
        predicates=tuple(predicates),
        time_class=time_class,
        space_class=space_class,
        confidence=confidence,
        cases=cases,
        time_label=time_label,
    )
