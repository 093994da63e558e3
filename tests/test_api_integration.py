"""API integration tests for the IdeaScope FastAPI application.

These tests use FastAPI TestClient against an isolated context with a
manually advanced clock and offline heuristic generation.
"""

from datetime import timedelta
from typing import Generator

import pytest
from fastapi import status
from fastapi.testclient import TestClient

from ideascope.api.app import create_app
from ideascope.context import PremiumContext
from ideascope.core.exceptions import LLMRateLimitError
from ideascope.core.models import ArtifactKind


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def failing_client(clock) -> Generator[TestClient, None, None]:
    """Client whose generation step always hits a rate limit."""

    async def rate_limited(kind, analysis_id, params):
        raise LLMRateLimitError("Rate limit exceeded for openai", provider="openai")

    context = PremiumContext.create(clock=clock, generator=rate_limited)
    with TestClient(create_app(context)) as test_client:
        yield test_client


KEYWORDS_BODY = {"analysisId": "a1", "primaryKeyword": "invoice automation"}


# =============================================================================
# Root and health
# =============================================================================


class TestRootAndHealth:
    """Tests for service endpoints."""

    def test_root(self, client: TestClient) -> None:
        """Root describes the service."""
        response = client.get("/")
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["name"] == "IdeaScope Premium API"

    def test_health_with_running_supervisor(self, client: TestClient) -> None:
        """The lifespan starts the supervisor, so the service is healthy."""
        data = client.get("/health").json()
        assert data["status"] == "healthy"
        assert data["components"]["generation"] == "heuristic"
        assert data["components"]["supervisor"].startswith("running")

    def test_health_without_lifespan(self, context: PremiumContext) -> None:
        """Without the lifespan the supervisor is stopped and health is degraded."""
        client = TestClient(create_app(context))
        assert client.get("/health").json()["status"] == "degraded"
        assert client.get("/health/ready").json()["ready"] is False

    def test_liveness_and_readiness(self, client: TestClient) -> None:
        """Ping, liveness and readiness respond."""
        assert "pong" in client.get("/health/ping").json()
        assert client.get("/health/live").json()["alive"] == "true"
        assert client.get("/health/ready").json()["ready"] is True

    def test_request_id_header(self, client: TestClient) -> None:
        """Responses echo the request id."""
        response = client.get("/", headers={"X-Request-ID": "req-1"})
        assert response.headers["X-Request-ID"] == "req-1"
        assert "X-Process-Time" in response.headers


# =============================================================================
# Generation endpoints
# =============================================================================


class TestGenerateArtifact:
    """Tests for POST /api/premium/{slug}."""

    def test_generate_keywords(self, client: TestClient) -> None:
        """A miss generates and returns the artifact."""
        response = client.post("/api/premium/keywords", json=KEYWORDS_BODY)
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["dataSource"] == "heuristic"
        assert data["primaryKeywords"][0]["keyword"] == "invoice automation"

    def test_second_request_served_from_cache(
        self, client: TestClient, context: PremiumContext
    ) -> None:
        """A repeated request returns the cached payload."""
        first = client.post("/api/premium/keywords", json=KEYWORDS_BODY).json()
        second = client.post(
            "/api/premium/keywords", json={**KEYWORDS_BODY, "primaryKeyword": "other"}
        ).json()

        assert first == second
        metrics = context.metrics.get_kind_metrics(ArtifactKind.KEYWORD_INTELLIGENCE)
        assert metrics["generations"] == 1
        assert metrics["hits"] == 1

    @pytest.mark.parametrize(
        "slug,body",
        [
            ("reddit-analysis", {"subreddits": ["startups"], "keywords": ["crm"]}),
            ("customer-intelligence", {"industry": "SaaS"}),
            ("financial-projections", {"industry": "SaaS"}),
            ("technology-operations", {}),
            ("legal-regulatory", {}),
            ("launch-roadmap", {"industry": "SaaS", "targetLaunchDate": "2025-06-01"}),
            ("competitors", {"industry": "SaaS"}),
            ("gtm-plan", {"productDescription": "CRM for plumbers", "budget": 5000}),
            ("market-sizing", {"industry": "SaaS"}),
        ],
    )
    def test_every_leaf_kind(self, client: TestClient, slug: str, body: dict) -> None:
        """Every leaf kind can be generated and read back."""
        response = client.post(f"/api/premium/{slug}", json={"analysisId": "a1", **body})
        assert response.status_code == status.HTTP_200_OK

        cached = client.get(f"/api/premium/{slug}/a1")
        assert cached.status_code == status.HTTP_200_OK
        assert cached.json() == response.json()

    def test_missing_required_field(self, client: TestClient) -> None:
        """Missing parameters are reported as a 400 with field details."""
        response = client.post("/api/premium/keywords", json={"analysisId": "a1"})
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        error = response.json()["error"]
        assert error["type"] == "validation_error"
        assert "primaryKeyword" in error["fields"]

    def test_missing_analysis_id(self, client: TestClient) -> None:
        """analysisId is required."""
        response = client.post("/api/premium/competitors", json={"industry": "SaaS"})
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "analysisId" in response.json()["error"]["fields"]

    def test_unknown_slug(self, client: TestClient) -> None:
        """Unknown artifact kinds are 404."""
        response = client.post("/api/premium/horoscope", json={"analysisId": "a1"})
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_generation_failure_is_502_and_not_cached(
        self, failing_client: TestClient
    ) -> None:
        """Upstream failures map to 502 and leave nothing cached."""
        response = failing_client.post("/api/premium/keywords", json=KEYWORDS_BODY)

        assert response.status_code == status.HTTP_502_BAD_GATEWAY
        error = response.json()["error"]
        assert error["type"] == "generation_failed"
        assert "Rate limit" in error["detail"]
        assert failing_client.get("/api/premium/keywords/a1").status_code == 404


# =============================================================================
# Cached lookups
# =============================================================================


class TestGetArtifact:
    """Tests for read-only lookups."""

    def test_miss_is_404(self, client: TestClient) -> None:
        """Nothing cached means 404, never a generation."""
        response = client.get("/api/premium/gtm-plan/nope")
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["error"]["type"] == "not_found"

    def test_query_string_lookup(self, client: TestClient) -> None:
        """analysisId may be given as a query parameter."""
        client.post("/api/premium/keywords", json=KEYWORDS_BODY)
        response = client.get("/api/premium/keywords", params={"analysisId": "a1"})
        assert response.status_code == status.HTTP_200_OK

    def test_query_lookup_requires_analysis_id(self, client: TestClient) -> None:
        """Omitting analysisId is a 400."""
        response = client.get("/api/premium/keywords")
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_expired_artifact_is_404(self, client: TestClient, clock) -> None:
        """Expired entries are not served even before a sweep."""
        client.post("/api/premium/keywords", json=KEYWORDS_BODY)
        clock.advance(hours=25)
        assert client.get("/api/premium/keywords/a1").status_code == 404


# =============================================================================
# Aggregate analysis
# =============================================================================


class TestPremiumAnalysis:
    """Tests for the aggregate analysis endpoint."""

    def test_build_analysis(self, client: TestClient, clock) -> None:
        """The aggregate contains every component and expires in 48 hours."""
        response = client.post(
            "/api/premium/analysis",
            json={
                "analysisId": "a1",
                "components": {"keywords": {"primaryKeyword": "crm"}},
            },
        )
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        for kind in ArtifactKind.components():
            assert kind.field_name in data
        assert data["keywordIntelligence"]["primaryKeywords"][0]["keyword"] == "crm"
        assert data["expiresAt"] == (clock() + timedelta(hours=48)).isoformat()
        assert len(data["sources"]) > 0

    def test_analysis_cached_for_48_hours(self, client: TestClient, clock) -> None:
        """The aggregate can be read back until it expires."""
        client.post("/api/premium/analysis", json={"analysisId": "a1"})

        clock.advance(hours=47, seconds=59 * 60)
        assert client.get("/api/premium/analysis/a1").status_code == 200
        clock.advance(seconds=60)
        assert client.get("/api/premium/analysis/a1").status_code == 404

    def test_invalid_component_params(self, client: TestClient) -> None:
        """Component parameters are validated with their own schema."""
        response = client.post(
            "/api/premium/analysis",
            json={"analysisId": "a1", "components": {"reddit-analysis": {"subreddits": []}}},
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST


# =============================================================================
# Sources
# =============================================================================


class TestSources:
    """Tests for the sources endpoints."""

    def test_empty(self, client: TestClient) -> None:
        """Unknown analyses have no sources."""
        data = client.get("/api/premium/sources/a1").json()
        assert data == {"analysisId": "a1", "sources": [], "count": 0}

    def test_append_and_read(self, client: TestClient) -> None:
        """Appended sources are returned in order."""
        refs = [
            {"id": "s1", "type": "web", "title": "One", "confidence": 0.9, "retrievedAt": "t1"},
            {"id": "s2", "type": "reddit", "title": "Two", "confidence": 0.5, "retrievedAt": "t2"},
        ]
        client.post("/api/premium/sources/a1", json={"sources": refs[:1]})
        response = client.post("/api/premium/sources/a1", json={"sources": refs[1:]})

        assert response.json()["count"] == 2
        data = client.get("/api/premium/sources/a1").json()
        assert [s["id"] for s in data["sources"]] == ["s1", "s2"]
        assert data["sources"][0]["retrievedAt"] == "t1"

    def test_invalid_confidence(self, client: TestClient) -> None:
        """Confidence must lie in [0, 1]."""
        response = client.post(
            "/api/premium/sources/a1",
            json={"sources": [{"id": "s", "type": "web", "title": "t", "confidence": 2, "retrievedAt": "t"}]},
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_generation_registers_sources(self, client: TestClient) -> None:
        """Generated payloads contribute their sources."""
        client.post("/api/premium/keywords", json=KEYWORDS_BODY)
        assert client.get("/api/premium/sources/a1").json()["count"] == 1


# =============================================================================
# Exports
# =============================================================================


class TestExports:
    """Tests for the export endpoints."""

    def test_create_export(self, client: TestClient, clock) -> None:
        """Exports include cached sections and expire in 24 hours."""
        client.post("/api/premium/keywords", json=KEYWORDS_BODY)

        response = client.post(
            "/api/premium/export",
            json={"analysisId": "a1", "type": "json", "sections": ["keywords", "gtm"]},
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["status"] == "completed"
        assert data["id"].startswith("export_")
        assert data["filename"] == "premium_analysis_a1_json.json"
        assert data["downloadUrl"] == f"/api/premium/export/{data['id']}/download"
        assert data["fileSize"] > 0
        assert data["expiresAt"] == (clock() + timedelta(hours=24)).isoformat()

    def test_export_id_format(self, client: TestClient, clock) -> None:
        """Export ids carry the creation time in ms and a 10-character hex suffix."""
        body = {"analysisId": "a1", "type": "csv", "sections": []}
        first = client.post("/api/premium/export", json=body).json()
        second = client.post("/api/premium/export", json=body).json()

        prefix, millis, suffix = first["id"].split("_")
        assert prefix == "export"
        assert int(millis) == int(clock().timestamp() * 1000)
        assert len(suffix) == 10
        int(suffix, 16)
        assert first["id"] != second["id"]

    def test_export_of_uncached_sections_is_empty(self, client: TestClient) -> None:
        """Sections that are not cached are left out."""
        data = client.post(
            "/api/premium/export",
            json={"analysisId": "a1", "type": "csv", "sections": ["market"]},
        ).json()
        assert data["fileSize"] == len("{}")

    def test_get_export_survives_expiry_until_sweep(
        self, client: TestClient, context: PremiumContext, clock
    ) -> None:
        """Expired exports are still readable until the supervisor sweeps them."""
        export_id = client.post(
            "/api/premium/export",
            json={"analysisId": "a1", "type": "pdf", "sections": []},
        ).json()["id"]

        clock.advance(hours=25)
        assert client.get(f"/api/premium/export/{export_id}").status_code == 200

        context.supervisor.run_once()
        assert client.get(f"/api/premium/export/{export_id}").status_code == 404

    def test_unknown_export(self, client: TestClient) -> None:
        """Unknown exports are 404."""
        assert client.get("/api/premium/export/missing").status_code == 404

    def test_invalid_format(self, client: TestClient) -> None:
        """Only csv, json, pdf and zip are accepted."""
        response = client.post(
            "/api/premium/export",
            json={"analysisId": "a1", "type": "docx", "sections": []},
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST


# =============================================================================
# Statistics and metrics
# =============================================================================


class TestStatsAndMetrics:
    """Tests for cache statistics and metrics endpoints."""

    def test_cache_stats(self, client: TestClient, clock) -> None:
        """Stats count artifacts, source keys and exports."""
        client.post("/api/premium/keywords", json=KEYWORDS_BODY)
        data = client.get("/api/premium/cache-stats").json()
        assert data == {"totalItems": 2, "expiredItems": 0, "memoryUsage": "20 KB (estimated)"}

        clock.advance(hours=25)
        assert client.get("/api/premium/cache-stats").json()["expiredItems"] == 1

    def test_metrics_json(self, client: TestClient) -> None:
        """JSON metrics include per-kind counters."""
        client.post("/api/premium/keywords", json=KEYWORDS_BODY)
        data = client.get("/metrics").json()
        assert data["kinds"]["keyword_intelligence"]["generations"] == 1

    def test_metrics_prometheus(self, client: TestClient) -> None:
        """Prometheus output is plain text."""
        response = client.get("/metrics/prometheus")
        assert response.status_code == status.HTTP_200_OK
        assert response.headers["content-type"].startswith("text/plain")
        assert "ideascope_cache_hits_total" in response.text
        assert client.get("/metrics", params={"format": "prometheus"}).text == response.text

    def test_kind_metrics(self, client: TestClient) -> None:
        """Per-kind metrics accept a slug or a kind value."""
        assert client.get("/metrics/kinds/gtm-plan").json()["kind"] == "gtm_plan"
        assert client.get("/metrics/kinds/gtm_plan").status_code == 200
        assert client.get("/metrics/kinds/nope").status_code == 404
