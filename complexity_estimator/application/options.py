"""Caller-facing options for one analysis run."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from complexity_estimator.domain.models.analysis import PatternPrecedence
from complexity_estimator.shared.config import settings


class AnalysisOptions(BaseModel):
    """
    Options accepted by :func:`analyze`. Every field is optional.

    Example:
        >>> AnalysisOptions(sample_sizes=[10, 100, 1000], seed=7).enable_sampling
        True
    """

    model_config = ConfigDict(extra="forbid")

    enable_sampling: bool = True
    sample_sizes: List[int] = Field(
        default_factory=lambda: list(settings.default_sample_sizes)
    )
    sampling_time_ceiling_ms: float = Field(
        default_factory=lambda: settings.sampling_time_ceiling_ms, gt=0
    )
    include_case_analysis: bool = True
    seed: Optional[int] = Field(default_factory=lambda: settings.random_seed)
    max_workers: int = Field(default=1, ge=1)
    cost_model: str = Field(default_factory=lambda: settings.default_cost_model)
    pattern_precedence: PatternPrecedence = Field(
        default_factory=lambda: PatternPrecedence(settings.pattern_precedence)
    )

    @field_validator("sample_sizes")
    @classmethod
    def _strictly_ascending(cls, sizes: List[int]) -> List[int]:
        if any(size <= 0 for size in sizes):
            raise ValueError("sample sizes must be positive")
        if any(later <= earlier for earlier, later in zip(sizes, sizes[1:])):
            raise ValueError("sample sizes must be strictly ascending")
        return sizes

    @model_validator(mode="after")
    def _ceiling_within_bound(self) -> "AnalysisOptions":
        if self.sampling_time_ceiling_ms > settings.max_sampling_time_ms:
            raise ValueError(
                f"sampling_time_ceiling_ms cannot exceed {settings.max_sampling_time_ms:.0f}"
            )
        return self
