"""
Dependency Injection Container implementing Factory and Singleton patterns.
Provides centralized dependency management with lazy initialization.
"""

from functools import lru_cache
from typing import Optional

from complexity_estimator.domain.services.complexity_service import ComplexityAggregator
from complexity_estimator.domain.services.pattern_detectors import PatternMatcher
from complexity_estimator.domain.services.reconciler import Reconciler
from complexity_estimator.infrastructure.parser.language_parser import LanguageParser


class DependencyContainer:
    """
    Dependency injection container managing the stateless pipeline services.
    Implements Singleton pattern so every run shares one set of services.

    All services hold configuration only, never per-run state, which is what
    makes sharing them across concurrent calls safe.
    """

    _instance: Optional["DependencyContainer"] = None

    def __new__(cls) -> "DependencyContainer":
        """
        Ensure single instance of container (Singleton pattern).

        Returns:
            Singleton DependencyContainer instance
        """
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    # ===== Service Factories =====

    @lru_cache(maxsize=1)
    def get_language_parser(self) -> LanguageParser:
        """
        Get singleton parser facade.

        Returns:
            LanguageParser with normalizer, structural parser and call graph builder
        """
        return LanguageParser()

    @lru_cache(maxsize=1)
    def get_pattern_matcher(self) -> PatternMatcher:
        """
        Get singleton pattern matcher over the default catalogue.

        Returns:
            PatternMatcher instance
        """
        return PatternMatcher()

    @lru_cache(maxsize=1)
    def get_aggregator(self) -> ComplexityAggregator:
        return ComplexityAggregator()

    @lru_cache(maxsize=1)
    def get_reconciler(self) -> Reconciler:
        return Reconciler()

    def clear_cache(self) -> None:
        """
        Clear all cached dependencies.
        Useful for testing or resetting container state.
        """
        self.get_language_parser.cache_clear()
        self.get_pattern_matcher.cache_clear()
        self.get_aggregator.cache_clear()
        self.get_reconciler.cache_clear()


# ===== Global Container Instance =====

_container = DependencyContainer()


def get_container() -> DependencyContainer:
    return _container
