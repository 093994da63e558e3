"""
Core types shared across IdeaScope.

Defines the closed set of premium artifact kinds and the clock helpers
used by every time-aware component.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable

# Injectable time source; tests pass a frozen or steppable clock.
Clock = Callable[[], datetime]

# Opaque JSON payload produced by the generation step.
Payload = dict[str, Any]


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class ArtifactKind(Enum):
    """Kinds of premium artifacts, each cached independently."""

    KEYWORD_INTELLIGENCE = "keyword_intelligence"
    REDDIT_ANALYSIS = "reddit_analysis"
    CUSTOMER_INTELLIGENCE = "customer_intelligence"
    FINANCIAL_PROJECTIONS = "financial_projections"
    TECHNOLOGY_OPERATIONS = "technology_operations"
    LEGAL_REGULATORY = "legal_regulatory"
    LAUNCH_ROADMAP = "launch_roadmap"
    COMPETITOR_MATRIX = "competitor_matrix"
    GTM_PLAN = "gtm_plan"
    MARKET_SIZING = "market_sizing"
    PREMIUM_ANALYSIS = "premium_analysis"

    @property
    def slug(self) -> str:
        """URL path segment used by the premium routes."""
        return _SLUGS[self]

    @property
    def label(self) -> str:
        """Human-readable name used in messages."""
        return self.value.replace("_", " ")

    @property
    def field_name(self) -> str:
        """camelCase key of this kind inside an aggregate premium analysis."""
        head, *rest = self.value.split("_")
        return head + "".join(part.title() for part in rest)

    @classmethod
    def from_slug(cls, slug: str) -> "ArtifactKind":
        """Look up a kind by its URL slug."""
        for kind, kind_slug in _SLUGS.items():
            if kind_slug == slug:
                return kind
        raise ValueError(f"Unknown artifact slug: {slug}")

    @classmethod
    def components(cls) -> list["ArtifactKind"]:
        """The ten leaf kinds an aggregate premium analysis is built from."""
        return [kind for kind in cls if kind is not cls.PREMIUM_ANALYSIS]


_SLUGS = {
    ArtifactKind.KEYWORD_INTELLIGENCE: "keywords",
    ArtifactKind.REDDIT_ANALYSIS: "reddit-analysis",
    ArtifactKind.CUSTOMER_INTELLIGENCE: "customer-intelligence",
    ArtifactKind.FINANCIAL_PROJECTIONS: "financial-projections",
    ArtifactKind.TECHNOLOGY_OPERATIONS: "technology-operations",
    ArtifactKind.LEGAL_REGULATORY: "legal-regulatory",
    ArtifactKind.LAUNCH_ROADMAP: "launch-roadmap",
    ArtifactKind.COMPETITOR_MATRIX: "competitors",
    ArtifactKind.GTM_PLAN: "gtm-plan",
    ArtifactKind.MARKET_SIZING: "market-sizing",
    ArtifactKind.PREMIUM_ANALYSIS: "analysis",
}
