"""Noise-free cost model with a fixed growth class and coefficient."""

import numpy as np

from complexity_estimator.domain.models.growth import GrowthClass, GrowthLattice
from complexity_estimator.domain.models.source import SourceView
from complexity_estimator.domain.services.sampling.base_model import CostModel


class DeterministicCostModel(CostModel):
    """
    Cost is exactly ``coefficient * f(size)`` for the configured class.

    Example:
        >>> model = DeterministicCostModel(GrowthClass.QUADRATIC, coefficient=2.0)
        >>> model.cost(10, model.bucket(SourceView()), 2.0, np.random.default_rng())
        200.0
    """

    name = "deterministic"

    def __init__(
        self,
        growth_class: GrowthClass = GrowthClass.LINEAR,
        coefficient: float = 0.002,
    ):
        if not growth_class.is_known:
            raise ValueError("Deterministic cost model needs a known growth class")
        if coefficient <= 0:
            raise ValueError("Deterministic cost model needs a positive coefficient")
        self.growth_class = growth_class
        self.coefficient = float(coefficient)

    def bucket(self, view: SourceView) -> GrowthClass:
        return self.growth_class

    def base_factor(self, rng: np.random.Generator) -> float:
        return self.coefficient

    def cost(
        self,
        size: int,
        bucket: GrowthClass,
        base_factor: float,
        rng: np.random.Generator,
    ) -> float:
        return base_factor * GrowthLattice.growth_value(bucket, size)
