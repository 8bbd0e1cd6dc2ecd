"""Centralized configuration for the estimation pipeline."""

from typing import List, Literal, Optional

import dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

dotenv.load_dotenv()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_env: Literal["development", "staging", "production"] = Field(
        default="development", description="Application environment"
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )

    max_input_length: int = Field(
        default=50_000,
        description="Maximum accepted source length in characters",
    )
    reject_empty_input: bool = Field(
        default=False,
        description="Reject blank input instead of reporting a constant program",
    )

    default_sample_sizes: List[int] = Field(
        default=[10, 50, 100, 500, 1000, 5000, 10000],
        description="Input sizes sampled when the caller supplies none",
    )
    sampling_time_ceiling_ms: float = Field(
        default=30_000.0,
        description="Default wall-clock budget for the sampling stage",
    )
    max_sampling_time_ms: float = Field(
        default=60_000.0,
        description="Upper bound accepted for caller supplied sampling budgets",
    )
    min_samples: int = Field(
        default=3, description="Minimum samples required for curve fitting"
    )
    random_seed: Optional[int] = Field(
        default=None, description="Seed for synthetic sampling (None = random)"
    )
    default_cost_model: Literal["synthetic", "deterministic"] = Field(
        default="synthetic", description="Cost model used by the sampler"
    )
    pattern_precedence: Literal["always", "when_confident", "never"] = Field(
        default="always",
        description="How catalogue matches override the tree-derived class",
    )


settings = Settings()
