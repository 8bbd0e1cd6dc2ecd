"""
Cost sampling package.
Contains the cost sampler and the pluggable cost models it draws from.
"""

from complexity_estimator.domain.services.sampling.base_model import CostModel
from complexity_estimator.domain.services.sampling.cost_sampler import CostSampler, iterations_for
from complexity_estimator.domain.services.sampling.deterministic_model import DeterministicCostModel
from complexity_estimator.domain.services.sampling.model_factory import CostModelFactory
from complexity_estimator.domain.services.sampling.synthetic_model import SyntheticCostModel

__all__ = [
    "CostModel",
    "CostModelFactory",
    "CostSampler",
    "DeterministicCostModel",
    "SyntheticCostModel",
    "iterations_for",
]
