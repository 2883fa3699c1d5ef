# anonymization/service/config.py

"""Application configuration using Pydantic Settings.

Manages environment variables, defaults, and validation rules.
"""

from typing import Optional
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from anonymization.core.definitions import StrategyName


class Settings(BaseSettings):
    """Global application settings.

    Loads values from environment variables (prefix 'ANONYMIZER_') or .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="ANONYMIZER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Replacement defaults
    default_strategy: str = Field(
        default=StrategyName.MASK, description="Strategy used when none is given."
    )
    preserve_format: bool = Field(
        default=True, description="Keep punctuation and spacing when masking."
    )
    case_sensitive: bool = Field(
        default=False, description="Match patterns case-sensitively."
    )
    mask_char: str = Field(default="*", description="Character used for masking.")
    hash_key: Optional[str] = Field(
        default=None, description="Secret for the keyed_hash strategy."
    )
    random_seed: Optional[int] = Field(
        default=None, description="Seed for synthetic replacements (reproducible runs)."
    )

    # Detection
    scan_workers: int = Field(
        default=1, ge=1, le=64, description="Threads used to scan patterns."
    )

    # Risk policy
    risk_high_weight: int = Field(default=3, ge=0)
    risk_medium_weight: int = Field(default=2, ge=0)
    risk_default_weight: int = Field(default=1, ge=0)
    risk_high_threshold: int = Field(default=10, ge=1)
    risk_medium_threshold: int = Field(default=5, ge=1)
    risk_low_threshold: int = Field(default=1, ge=1)

    log_level: str = Field(default="INFO", description="Root logging level.")

    @field_validator("mask_char")
    @classmethod
    def validate_mask_char(cls, v: str) -> str:
        """Ensure the mask is exactly one character."""
        if len(v) != 1:
            raise ValueError("mask_char must be a single character")
        return v

    @field_validator("default_strategy")
    @classmethod
    def validate_strategy(cls, v: str) -> str:
        """Ensure a strategy name is given."""
        if not v.strip():
            raise ValueError("default_strategy cannot be empty")
        return v.strip()

    @model_validator(mode="after")
    def validate_thresholds(self) -> "Settings":
        """Ensure risk thresholds ascend from LOW to HIGH."""
        if not (
            self.risk_low_threshold
            <= self.risk_medium_threshold
            <= self.risk_high_threshold
        ):
            raise ValueError("risk thresholds must satisfy low <= medium <= high")
        return self


# Singleton settings instance
settings = Settings()
