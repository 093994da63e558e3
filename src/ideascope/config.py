"""
Cache configuration.

Default TTLs per artifact kind, the TTLs the generation gateway writes
with, and the sweep interval. Values can be overridden from the
environment:

- IS_TTL_<KIND>_HOURS: default TTL for one kind (e.g. IS_TTL_GTM_PLAN_HOURS)
- IS_GENERATION_TTL_<KIND>_HOURS: TTL used when caching a fresh generation
- IS_SWEEP_INTERVAL_SECONDS: supervisor sweep interval (default: 3600)
- IS_EXPORT_TTL_HOURS: lifetime of export records (default: 24)
"""

import os
from functools import lru_cache

from pydantic import BaseModel, Field, ValidationError, field_validator

from ideascope.core.exceptions import ConfigurationError
from ideascope.core.models import ArtifactKind

DEFAULT_TTL_HOURS = 24.0
PREMIUM_ANALYSIS_TTL_HOURS = 48.0
SWEEP_INTERVAL_SECONDS = 60 * 60


def _default_ttls() -> dict[ArtifactKind, float]:
    ttls = {kind: DEFAULT_TTL_HOURS for kind in ArtifactKind}
    ttls[ArtifactKind.PREMIUM_ANALYSIS] = PREMIUM_ANALYSIS_TTL_HOURS
    return ttls


def _generation_ttls() -> dict[ArtifactKind, float]:
    # Fast-moving community data expires sooner; slow-moving plans are kept a week.
    ttls = _default_ttls()
    ttls.update(
        {
            ArtifactKind.REDDIT_ANALYSIS: 12.0,
            ArtifactKind.CUSTOMER_INTELLIGENCE: 48.0,
            ArtifactKind.FINANCIAL_PROJECTIONS: 72.0,
            ArtifactKind.TECHNOLOGY_OPERATIONS: 168.0,
            ArtifactKind.LEGAL_REGULATORY: 168.0,
            ArtifactKind.LAUNCH_ROADMAP: 168.0,
        }
    )
    return ttls


class CacheConfig(BaseModel):
    """Configuration for the premium cache and its supervisor."""

    default_ttl_hours: dict[ArtifactKind, float] = Field(
        default_factory=_default_ttls,
        description="TTL applied by a store when set() is given none",
    )
    generation_ttl_hours: dict[ArtifactKind, float] = Field(
        default_factory=_generation_ttls,
        description="TTL the gateway writes freshly generated artifacts with",
    )
    sweep_interval_seconds: float = Field(
        default=SWEEP_INTERVAL_SECONDS, gt=0, description="Supervisor sweep interval"
    )
    export_ttl_hours: float = Field(default=24.0, gt=0, description="Export lifetime")
    memory_estimate_kb_per_item: float = Field(
        default=10.0, ge=0, description="Per-item size used for the memory estimate"
    )

    @field_validator("default_ttl_hours", "generation_ttl_hours")
    @classmethod
    def fill_missing_kinds(cls, v: dict[ArtifactKind, float]) -> dict[ArtifactKind, float]:
        """Ensure every artifact kind has a TTL."""
        filled = _default_ttls()
        filled.update(v)
        return filled

    @property
    def sweep_interval_ms(self) -> int:
        """Sweep interval in milliseconds."""
        return int(self.sweep_interval_seconds * 1000)

    def ttl_for(self, kind: ArtifactKind) -> float:
        """Default store TTL for a kind."""
        return self.default_ttl_hours[kind]

    def generation_ttl_for(self, kind: ArtifactKind) -> float:
        """TTL used when caching a freshly generated artifact."""
        return self.generation_ttl_hours[kind]

    @classmethod
    def from_env(cls) -> "CacheConfig":
        """Load configuration, applying environment overrides."""
        default_ttls = _default_ttls()
        generation_ttls = _generation_ttls()
        for kind in ArtifactKind:
            name = kind.name
            override = _float_env(f"IS_TTL_{name}_HOURS")
            if override is not None:
                default_ttls[kind] = override
            override = _float_env(f"IS_GENERATION_TTL_{name}_HOURS")
            if override is not None:
                generation_ttls[kind] = override

        kwargs: dict[str, object] = {
            "default_ttl_hours": default_ttls,
            "generation_ttl_hours": generation_ttls,
        }
        sweep_interval = _float_env("IS_SWEEP_INTERVAL_SECONDS")
        if sweep_interval is not None:
            kwargs["sweep_interval_seconds"] = sweep_interval
        export_ttl = _float_env("IS_EXPORT_TTL_HOURS")
        if export_ttl is not None:
            kwargs["export_ttl_hours"] = export_ttl

        try:
            return cls(**kwargs)
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid cache configuration: {e.errors()[0]['msg']}",
                config_key=".".join(str(p) for p in e.errors()[0]["loc"]),
            ) from e


def _float_env(name: str) -> float | None:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(
            f"Invalid numeric value for {name}: {raw!r}", env_var=name
        ) from None


@lru_cache(maxsize=1)
def get_cache_config() -> CacheConfig:
    """Get the process-wide cache configuration (cached)."""
    return CacheConfig.from_env()
