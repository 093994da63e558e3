"""
Pydantic schemas for API request/response validation.
"""

from ideascope.api.schemas.exceptions import (
    APIException,
    GenerationFailedError,
    NotFoundError,
    ValidationError,
    field_errors,
)
from ideascope.api.schemas.requests import (
    GENERATION_REQUESTS,
    CompetitorMatrixRequest,
    CustomerIntelligenceRequest,
    ExportFormat,
    ExportRequest,
    FinancialProjectionsRequest,
    GtmPlanRequest,
    KeywordIntelligenceRequest,
    LaunchRoadmapRequest,
    LegalRegulatoryRequest,
    MarketSizingRequest,
    PremiumAnalysisRequest,
    PremiumRequest,
    RedditAnalysisRequest,
    SourcesAppendRequest,
    TechnologyOperationsRequest,
)
from ideascope.api.schemas.responses import (
    ErrorDetail,
    ErrorResponse,
    HealthResponse,
    SourcesResponse,
)

__all__ = [
    # Exceptions
    "APIException",
    "ValidationError",
    "NotFoundError",
    "GenerationFailedError",
    "field_errors",
    # Requests
    "GENERATION_REQUESTS",
    "PremiumRequest",
    "KeywordIntelligenceRequest",
    "RedditAnalysisRequest",
    "CustomerIntelligenceRequest",
    "FinancialProjectionsRequest",
    "TechnologyOperationsRequest",
    "LegalRegulatoryRequest",
    "LaunchRoadmapRequest",
    "CompetitorMatrixRequest",
    "GtmPlanRequest",
    "MarketSizingRequest",
    "PremiumAnalysisRequest",
    "ExportFormat",
    "ExportRequest",
    "SourcesAppendRequest",
    # Responses
    "HealthResponse",
    "SourcesResponse",
    "ErrorDetail",
    "ErrorResponse",
]
