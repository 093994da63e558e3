"""
Pydantic request schemas for the premium API.

Each artifact kind has its own generation request. Field names accept
both the camelCase form used by the browser client and snake_case.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from ideascope.core.models import ArtifactKind
from ideascope.storage.models import SourceRef


class PremiumRequest(BaseModel):
    """Base request carrying the analysis identifier."""

    analysis_id: str = Field(
        ...,
        min_length=1,
        alias="analysisId",
        description="Analysis the artifact belongs to",
        examples=["analysis_1718000000"],
    )

    model_config = {"populate_by_name": True, "extra": "ignore"}

    def generation_params(self) -> dict[str, Any]:
        """Parameters handed to the generation step."""
        return self.model_dump(exclude={"analysis_id"}, mode="json")


class KeywordIntelligenceRequest(PremiumRequest):
    """Request to generate keyword intelligence."""

    primary_keyword: str = Field(..., min_length=1, alias="primaryKeyword")
    industry: str = Field(default="Technology")
    target_audience: str = Field(default="General users", alias="targetAudience")
    locale: str = Field(default="US")


class RedditAnalysisRequest(PremiumRequest):
    """Request to generate a Reddit community analysis."""

    subreddits: list[str] = Field(..., min_length=1)
    keywords: list[str] = Field(..., min_length=1)
    industry: str | None = None


class CustomerIntelligenceRequest(PremiumRequest):
    """Request to generate customer intelligence."""

    industry: str = Field(..., min_length=1)
    target_audience: str | None = Field(default=None, alias="targetAudience")


class FinancialProjectionsRequest(PremiumRequest):
    """Request to generate financial projections."""

    industry: str = Field(..., min_length=1)
    revenue_model: str = Field(default="subscription", alias="revenueModel")


class TechnologyOperationsRequest(PremiumRequest):
    """Request to generate a technology and operations plan."""

    product_type: str = Field(default="web_application", alias="productType")
    scale: str = Field(default="startup")


class LegalRegulatoryRequest(PremiumRequest):
    """Request to generate a legal and regulatory overview."""

    business_type: str = Field(default="technology", alias="businessType")
    jurisdiction: str = Field(default="Delaware")


class LaunchRoadmapRequest(PremiumRequest):
    """Request to generate a launch roadmap."""

    industry: str = Field(..., min_length=1)
    target_launch_date: str | None = Field(default=None, alias="targetLaunchDate")


class CompetitorMatrixRequest(PremiumRequest):
    """Request to generate a competitor matrix."""

    industry: str = Field(..., min_length=1)
    target_keyword: str | None = Field(default=None, alias="targetKeyword")


class GtmPlanRequest(PremiumRequest):
    """Request to generate a go-to-market plan."""

    product_description: str = Field(..., min_length=1, alias="productDescription")
    target_audience: str | None = Field(default=None, alias="targetAudience")
    budget: float | None = Field(default=None, ge=0)


class MarketSizingRequest(PremiumRequest):
    """Request to generate a TAM/SAM/SOM market sizing."""

    industry: str = Field(..., min_length=1)
    product_category: str | None = Field(default=None, alias="productCategory")
    geography: str = Field(default="Global")


GENERATION_REQUESTS: dict[ArtifactKind, type[PremiumRequest]] = {
    ArtifactKind.KEYWORD_INTELLIGENCE: KeywordIntelligenceRequest,
    ArtifactKind.REDDIT_ANALYSIS: RedditAnalysisRequest,
    ArtifactKind.CUSTOMER_INTELLIGENCE: CustomerIntelligenceRequest,
    ArtifactKind.FINANCIAL_PROJECTIONS: FinancialProjectionsRequest,
    ArtifactKind.TECHNOLOGY_OPERATIONS: TechnologyOperationsRequest,
    ArtifactKind.LEGAL_REGULATORY: LegalRegulatoryRequest,
    ArtifactKind.LAUNCH_ROADMAP: LaunchRoadmapRequest,
    ArtifactKind.COMPETITOR_MATRIX: CompetitorMatrixRequest,
    ArtifactKind.GTM_PLAN: GtmPlanRequest,
    ArtifactKind.MARKET_SIZING: MarketSizingRequest,
}


class PremiumAnalysisRequest(PremiumRequest):
    """Request for the aggregate analysis built from every component."""

    components: dict[str, dict[str, Any]] = Field(
        default_factory=dict,
        description="Generation parameters keyed by component slug",
        examples=[{"keywords": {"primaryKeyword": "invoice automation"}}],
    )

    def component_params(self) -> dict[str, dict[str, Any]]:
        """
        Validate each component's parameters with its request schema.

        Returns:
            snake_case generation parameters keyed by component slug
        """
        params: dict[str, dict[str, Any]] = {}
        for kind, schema in GENERATION_REQUESTS.items():
            raw = self.components.get(kind.slug)
            if raw is None:
                continue
            body = schema.model_validate({**raw, "analysisId": self.analysis_id})
            params[kind.slug] = body.generation_params()
        return params


class ExportFormat(str, Enum):
    """Supported export formats."""

    CSV = "csv"
    JSON = "json"
    PDF = "pdf"
    ZIP = "zip"


class ExportRequest(PremiumRequest):
    """Request to export cached premium sections."""

    type: ExportFormat = Field(..., description="Export format")
    sections: list[str] = Field(
        ...,
        description="Sections to include",
        examples=[["keywords", "competitors", "gtm", "market"]],
    )
    include_charts: bool = Field(default=False, alias="includeCharts")
    include_raw_data: bool = Field(default=False, alias="includeRawData")


class SourcesAppendRequest(BaseModel):
    """Source references to append to an analysis."""

    sources: list[SourceRef] = Field(..., description="References in citation order")

    model_config = {"extra": "forbid"}
