"""Tests for cache configuration."""

from unittest.mock import patch

import pytest

from ideascope.config import CacheConfig, get_cache_config
from ideascope.core.exceptions import ConfigurationError
from ideascope.core.models import ArtifactKind


class TestCacheConfig:
    """Tests for CacheConfig defaults."""

    def test_default_ttls(self) -> None:
        """Every kind defaults to 24h except the aggregate at 48h."""
        config = CacheConfig()
        for kind in ArtifactKind.components():
            assert config.ttl_for(kind) == 24
        assert config.ttl_for(ArtifactKind.PREMIUM_ANALYSIS) == 48

    def test_generation_ttls(self) -> None:
        """Freshly generated artifacts use per-kind lifetimes."""
        config = CacheConfig()
        assert config.generation_ttl_for(ArtifactKind.REDDIT_ANALYSIS) == 12
        assert config.generation_ttl_for(ArtifactKind.CUSTOMER_INTELLIGENCE) == 48
        assert config.generation_ttl_for(ArtifactKind.FINANCIAL_PROJECTIONS) == 72
        assert config.generation_ttl_for(ArtifactKind.LEGAL_REGULATORY) == 168
        assert config.generation_ttl_for(ArtifactKind.KEYWORD_INTELLIGENCE) == 24
        assert config.generation_ttl_for(ArtifactKind.PREMIUM_ANALYSIS) == 48

    def test_partial_override_is_filled(self) -> None:
        """Kinds left out of an override keep their defaults."""
        config = CacheConfig(default_ttl_hours={ArtifactKind.GTM_PLAN: 6})
        assert config.ttl_for(ArtifactKind.GTM_PLAN) == 6
        assert config.ttl_for(ArtifactKind.MARKET_SIZING) == 24

    def test_sweep_interval(self) -> None:
        """The sweep runs hourly by default."""
        config = CacheConfig()
        assert config.sweep_interval_seconds == 3600
        assert config.sweep_interval_ms == 3_600_000

    def test_sweep_interval_must_be_positive(self) -> None:
        """A zero interval is rejected."""
        with pytest.raises(ValueError):
            CacheConfig(sweep_interval_seconds=0)


class TestFromEnv:
    """Tests for environment overrides."""

    @patch.dict(
        "os.environ",
        {
            "IS_TTL_GTM_PLAN_HOURS": "2",
            "IS_GENERATION_TTL_REDDIT_ANALYSIS_HOURS": "1.5",
            "IS_SWEEP_INTERVAL_SECONDS": "60",
            "IS_EXPORT_TTL_HOURS": "12",
        },
    )
    def test_overrides(self) -> None:
        """IS_* variables override the defaults."""
        config = CacheConfig.from_env()
        assert config.ttl_for(ArtifactKind.GTM_PLAN) == 2
        assert config.generation_ttl_for(ArtifactKind.REDDIT_ANALYSIS) == 1.5
        assert config.sweep_interval_seconds == 60
        assert config.export_ttl_hours == 12

    @patch.dict("os.environ", {"IS_TTL_GTM_PLAN_HOURS": ""})
    def test_blank_value_ignored(self) -> None:
        """Blank variables fall back to the default."""
        assert CacheConfig.from_env().ttl_for(ArtifactKind.GTM_PLAN) == 24

    @patch.dict("os.environ", {"IS_SWEEP_INTERVAL_SECONDS": "hourly"})
    def test_invalid_number(self) -> None:
        """Non-numeric values raise ConfigurationError naming the variable."""
        with pytest.raises(ConfigurationError) as exc_info:
            CacheConfig.from_env()
        assert exc_info.value.env_var == "IS_SWEEP_INTERVAL_SECONDS"

    @patch.dict("os.environ", {"IS_SWEEP_INTERVAL_SECONDS": "-5"})
    def test_out_of_range(self) -> None:
        """Out-of-range values raise ConfigurationError."""
        with pytest.raises(ConfigurationError, match="Invalid cache configuration"):
            CacheConfig.from_env()

    def test_get_cache_config_cached(self) -> None:
        """get_cache_config returns a cached instance."""
        get_cache_config.cache_clear()
        assert get_cache_config() is get_cache_config()
        get_cache_config.cache_clear()
