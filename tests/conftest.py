"""Pytest configuration and fixtures."""

import os
from datetime import datetime, timedelta, timezone
from typing import Any, Generator

import pytest
from fastapi.testclient import TestClient

# Keep generation offline and deterministic in tests
os.environ.pop("OPENAI_API_KEY", None)
os.environ.pop("IS_LLM_API_KEY", None)

from ideascope.api.app import create_app  # noqa: E402
from ideascope.context import PremiumContext  # noqa: E402
from ideascope.core.models import ArtifactKind, Payload  # noqa: E402
from ideascope.storage.store import PremiumStore  # noqa: E402

EPOCH = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)


class StepClock:
    """Manually advanced clock for expiry tests."""

    def __init__(self, start: datetime = EPOCH):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, hours: float = 0, seconds: float = 0) -> datetime:
        self.current = self.current + timedelta(hours=hours, seconds=seconds)
        return self.current


class RecordingGenerator:
    """Generation step that records calls and returns canned payloads."""

    def __init__(self, payload: Payload | None = None):
        self.payload = payload
        self.calls: list[tuple[ArtifactKind, str, dict[str, Any]]] = []

    async def __call__(
        self, kind: ArtifactKind, analysis_id: str, params: dict[str, Any]
    ) -> Payload:
        self.calls.append((kind, analysis_id, params))
        if self.payload is not None:
            return dict(self.payload)
        return {"kind": kind.value, "analysisId": analysis_id, "call": len(self.calls)}


@pytest.fixture
def clock() -> StepClock:
    """Provide a clock frozen at a known instant."""
    return StepClock()


@pytest.fixture
def store(clock: StepClock) -> PremiumStore:
    """Provide an empty store driven by the test clock."""
    return PremiumStore(clock=clock)


@pytest.fixture
def context(clock: StepClock) -> PremiumContext:
    """Provide an isolated context using heuristic generation."""
    return PremiumContext.create(clock=clock)


@pytest.fixture
def client(context: PremiumContext) -> Generator[TestClient, None, None]:
    """Create a test client; the lifespan starts the cache supervisor."""
    app = create_app(context)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def recorder() -> RecordingGenerator:
    """Provide a generation step that records its calls."""
    return RecordingGenerator()
