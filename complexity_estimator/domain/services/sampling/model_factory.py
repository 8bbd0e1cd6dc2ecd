"""
Factory for cost models.
Implements Factory Pattern for cost model instantiation.
"""

from typing import Dict

from complexity_estimator.domain.services.sampling.base_model import CostModel
from complexity_estimator.domain.services.sampling.deterministic_model import DeterministicCostModel
from complexity_estimator.domain.services.sampling.synthetic_model import SyntheticCostModel


class CostModelFactory:
    """Creates cost models by name."""

    _MODEL_MAP: Dict[str, type] = {
        "synthetic": SyntheticCostModel,
        "deterministic": DeterministicCostModel,
    }

    @classmethod
    def available(cls) -> list:
        return sorted(cls._MODEL_MAP)

    @classmethod
    def create(cls, name: str, **kwargs) -> CostModel:
        """
        Create the cost model registered under ``name``.

        Raises:
            ValueError: If no model is registered under that name
        """
        model_class = cls._MODEL_MAP.get(name)
        if model_class is None:
            raise ValueError(
                f"Unknown cost model '{name}'. Available: {', '.join(cls.available())}"
            )
        return model_class(**kwargs)
