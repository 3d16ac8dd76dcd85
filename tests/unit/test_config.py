"""Unit tests for marketplace configuration models."""

import json

import pytest
from pydantic import ValidationError

from researchmatch.models.config import (
    BrowseConfig,
    EngagementConfig,
    MarketplaceParams,
    QuotaConfig,
)


def test_defaults_match_product_pricing():
    """Test defaults: 3 free matches, $5 per extra match, 80% scroll trigger."""
    params = MarketplaceParams()
    assert params.quota.free_requests_limit == 3
    assert params.quota.paid_match_fee_usd == 5.0
    assert params.quota.premium_monthly_price_usd == 19.0
    assert params.engagement.mode == "fraction"
    assert params.engagement.threshold == 0.8
    assert params.browse.preview_limit == 8
    assert params.log_level == "INFO"


def test_free_requests_limit_must_be_positive():
    with pytest.raises(ValidationError):
        QuotaConfig(free_requests_limit=0)


def test_fraction_threshold_above_one_rejected():
    with pytest.raises(ValidationError, match="must be <= 1.0"):
        EngagementConfig(mode="fraction", threshold=1.5)


def test_offset_threshold_may_exceed_one():
    config = EngagementConfig(mode="offset", threshold=1500)
    assert config.threshold == 1500


def test_unknown_engagement_mode_rejected():
    with pytest.raises(ValidationError):
        EngagementConfig(mode="time")


def test_negative_preview_limit_rejected():
    with pytest.raises(ValidationError):
        BrowseConfig(preview_limit=-1)


def test_log_level_normalized():
    assert MarketplaceParams(log_level="debug").log_level == "DEBUG"
    with pytest.raises(ValidationError, match="Log level must be one of"):
        MarketplaceParams(log_level="VERBOSE")


def test_load_from_file(tmp_path):
    config_path = tmp_path / "marketplace_params.json"
    config_path.write_text(
        json.dumps({"quota": {"free_requests_limit": 5}, "browse": {"preview_limit": 0}})
    )

    params = MarketplaceParams.load(config_path)

    assert params.quota.free_requests_limit == 5
    assert params.quota.paid_match_fee_usd == 5.0
    assert params.browse.preview_limit == 0


def test_load_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError, match="Config file not found"):
        MarketplaceParams.load(tmp_path / "missing.json")
