"""
Configuration Models

Pydantic models for marketplace configuration validation.
"""

import json
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, ValidationInfo, field_validator


class QuotaConfig(BaseModel):
    """Free-tier quota and paid-match pricing."""

    free_requests_limit: int = Field(default=3, gt=0)
    paid_match_fee_usd: float = Field(default=5.0, ge=0.0)
    premium_monthly_price_usd: float = Field(default=19.0, ge=0.0)


class EngagementConfig(BaseModel):
    """Conversion prompt trigger configuration.

    mode "fraction": fire when the bottom of the viewport passes
    threshold * page height (threshold in (0, 1]).
    mode "offset": fire when the scroll offset passes threshold pixels.
    """

    mode: Literal["fraction", "offset"] = "fraction"
    threshold: float = Field(default=0.8, gt=0.0)

    @field_validator("threshold")
    @classmethod
    def validate_threshold_for_mode(cls, v: float, info: ValidationInfo) -> float:
        """Validate fraction thresholds stay within (0, 1]."""
        mode = info.data.get("mode", "fraction")
        if mode == "fraction" and v > 1.0:
            raise ValueError(
                f"threshold ({v}) must be <= 1.0 when mode is 'fraction'"
            )
        return v


class BrowseConfig(BaseModel):
    """Listing configuration."""

    preview_limit: int = Field(default=8, ge=0)


class MarketplaceParams(BaseModel):
    """Marketplace parameters configuration model."""

    quota: QuotaConfig = Field(default_factory=QuotaConfig)
    engagement: EngagementConfig = Field(default_factory=EngagementConfig)
    browse: BrowseConfig = Field(default_factory=BrowseConfig)
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {', '.join(valid_levels)}")
        return v.upper()

    @classmethod
    def load(cls, config_path: Path | str | None = None) -> "MarketplaceParams":
        """Load marketplace parameters from config file.

        Args:
            config_path: Path to marketplace_params.json (defaults to config/marketplace_params.json)

        Returns:
            MarketplaceParams: Validated configuration

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config validation fails
        """
        if config_path is None:
            config_path = Path("config/marketplace_params.json")
        else:
            config_path = Path(config_path)

        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}. "
                f"Copy {config_path.stem}.example.json to {config_path.name}"
            )

        with open(config_path, "r", encoding="utf-8") as f:
            config_data = json.load(f)

        return cls(**config_data)
