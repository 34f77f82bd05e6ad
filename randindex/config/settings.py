"""Unified randindex configuration using Pydantic Settings v2.

Provides a typed, nested configuration model with environment variable
mapping. Prefer nested fields and `RANDINDEX_{SECTION}__{FIELD}` env vars.

Usage:
    from randindex.config.settings import settings
    print(settings.randomization.batch_reroute_one_in)
"""

from pathlib import Path

from pydantic import BaseModel, Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

SETTINGS_MODEL_CONFIG = SettingsConfigDict(
    env_file=".env",
    env_prefix="RANDINDEX_",
    env_nested_delimiter="__",
    case_sensitive=False,
    extra="ignore",
)


class RandomizationConfig(BaseModel):
    """Coverage-tuning knobs for the randomized writer.

    Probabilities are expressed as ``one_in`` denominators: a value of 5 means
    the branch is taken with probability 1/5. These are tuning defaults, not
    correctness requirements.
    """

    # Routing
    batch_reroute_one_in: int = Field(default=5, ge=1)

    # Reader acquisition
    reader_force_merge_one_in: int = Field(default=20, ge=1)
    nrt_commit_one_in: int = Field(default=5, ge=1)
    reader_threads_max: int = Field(default=10, ge=1, le=256)
    legacy_codec_name: str = Field(
        default="Lucene3x",
        description="Codec that must always be read through a freshly opened reader",
    )

    # Disposal
    close_force_merge_one_in: int = Field(default=8, ge=1)

    # Auto-commit scheduling
    commit_threshold_min: int = Field(default=10, ge=1)
    commit_threshold_max: int = Field(default=1000, ge=1)
    threshold_growth: float = Field(default=1.05, ge=1.0, le=10.0)
    threshold_growth_cap: float = Field(default=2e6, gt=1.0)

    # Thread perturbation
    control_point_yield_one_in: int = Field(default=4, ge=1)
    control_point_channel: str = Field(default="TP", min_length=1)

    @field_validator("commit_threshold_max")
    @classmethod
    def validate_threshold_range(cls, v: int, info: ValidationInfo) -> int:
        """Ensure the auto-commit range is not inverted."""
        low = info.data.get("commit_threshold_min")
        if low is not None and v < low:
            raise ValueError(
                f"commit_threshold_max ({v}) must be >= commit_threshold_min ({low})"
            )
        return v


class HarnessSettings(BaseSettings):
    """Top-level randindex configuration.

    - Environment variable mapping with RANDINDEX_ prefix
    - Nested randomization section for the coverage-tuning constants
    - Optional fixed seed so failing runs can be replayed
    """

    model_config = SETTINGS_MODEL_CONFIG

    # Reproducibility
    seed: int | None = Field(
        default=None,
        ge=0,
        description="Root seed used when a caller does not supply a generator",
    )

    # Logging
    verbose: bool = Field(default=False)
    log_level: str = Field(default="INFO")
    log_file: Path | None = Field(default=None)

    randomization: RandomizationConfig = Field(default_factory=RandomizationConfig)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and validate the loguru level name."""
        level = v.upper()
        allowed = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}
        if level not in allowed:
            raise ValueError(f"log_level must be one of {sorted(allowed)}")
        return level


# Global settings instance - primary interface for the harness
settings = HarnessSettings()

__all__ = [
    "SETTINGS_MODEL_CONFIG",
    "HarnessSettings",
    "RandomizationConfig",
    "settings",
]
