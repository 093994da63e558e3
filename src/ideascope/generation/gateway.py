"""
Generation Gateway - read-through, write-after access to premium artifacts.

On a cache hit the stored payload is returned with no side effects. On
a miss the external generation step runs and its result is written to
the store before it is returned. Failed generations are never cached.

Concurrent misses for the same (kind, analysis id) share one in-flight
task, so they trigger one generation and one write. A waiter that is
cancelled leaves the shared task running for the others; when the last
waiter leaves, the task is cancelled before it can write.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Awaitable, Callable

from pydantic import ValidationError

from ideascope.core.exceptions import GenerationError, IdeaScopeError
from ideascope.core.models import ArtifactKind, Payload
from ideascope.llm.client import LLMClient
from ideascope.monitoring.metrics import CacheMetricsCollector
from ideascope.storage.models import SourceRef
from ideascope.storage.store import PremiumStore

from .fallback import generate_fallback
from .prompts import build_request

logger = logging.getLogger(__name__)

# External generation step: (kind, analysis_id, params) -> payload
Generator = Callable[[ArtifactKind, str, dict[str, Any]], Awaitable[Payload]]

SOURCE_KEYS = ("sources", "references")


class ArtifactGenerator:
    """
    Default generation step.

    Calls the LLM when an API key is configured, otherwise falls back
    to the deterministic heuristic generator. The blocking HTTP call
    runs in a worker thread so the event loop keeps serving requests.
    """

    def __init__(self, llm_client: LLMClient | None = None):
        self._llm_client = llm_client

    @property
    def uses_llm(self) -> bool:
        """True when generations go to the LLM."""
        return self._llm_client is not None and self._llm_client.is_configured

    async def __call__(
        self, kind: ArtifactKind, analysis_id: str, params: dict[str, Any]
    ) -> Payload:
        if not self.uses_llm:
            return generate_fallback(kind, analysis_id, params)
        request = build_request(kind, params)
        return await asyncio.to_thread(self._llm_client.complete_json, request)


@dataclass
class _InFlight:
    task: asyncio.Task
    waiters: int = 0


class GenerationGateway:
    """
    Boundary between route handlers and the premium store.

    Example:
        gateway = GenerationGateway(store)
        payload = await gateway.get_or_generate(
            ArtifactKind.GTM_PLAN, "a1", {"product_description": "..."}
        )
    """

    def __init__(
        self,
        store: PremiumStore,
        generator: Generator | None = None,
        metrics: CacheMetricsCollector | None = None,
    ):
        """
        Initialize the gateway.

        Args:
            store: Store that caches generated artifacts
            generator: External generation step, defaults to ArtifactGenerator()
            metrics: Collector for hit/miss/generation counters
        """
        self._store = store
        self._generator = generator or ArtifactGenerator()
        self._metrics = metrics or CacheMetricsCollector()
        self._inflight: dict[tuple[ArtifactKind, str], _InFlight] = {}

    @property
    def store(self) -> PremiumStore:
        """Store backing this gateway."""
        return self._store

    @property
    def generator(self) -> Generator:
        """Generation step used on a cache miss."""
        return self._generator

    def in_flight(self, kind: ArtifactKind, analysis_id: str) -> bool:
        """True while a generation for this key is running."""
        return (kind, analysis_id) in self._inflight

    def get_cached(self, kind: ArtifactKind, analysis_id: str) -> Payload | None:
        """Return the cached artifact without generating, recording hit or miss."""
        cached = self._store.get(kind, analysis_id)
        if cached is None:
            self._metrics.record_miss(kind)
        else:
            self._metrics.record_hit(kind)
        return cached

    async def get_or_generate(
        self,
        kind: ArtifactKind,
        analysis_id: str,
        params: dict[str, Any] | None = None,
    ) -> Payload:
        """
        Return the cached artifact or generate, cache and return a new one.

        Args:
            kind: Artifact kind
            analysis_id: Analysis identifier
            params: Kind-specific generation parameters

        Returns:
            Artifact payload

        Raises:
            GenerationError: If the generation step fails
        """
        cached = self.get_cached(kind, analysis_id)
        if cached is not None:
            logger.info(f"Returning cached {kind.label} for {analysis_id}")
            return cached

        key = (kind, analysis_id)
        flight = self._inflight.get(key)
        if flight is None:
            task = asyncio.get_running_loop().create_task(
                self._generate_and_store(kind, analysis_id, params or {})
            )
            flight = _InFlight(task=task)
            self._inflight[key] = flight
            task.add_done_callback(lambda t, key=key, flight=flight: self._release(key, flight))
        else:
            self._metrics.record_shared_wait(kind)
            logger.info(f"Joining in-flight {kind.label} generation for {analysis_id}")

        flight.waiters += 1
        try:
            return await asyncio.shield(flight.task)
        finally:
            flight.waiters -= 1
            if flight.waiters == 0 and not flight.task.done():
                logger.info(f"Abandoning {kind.label} generation for {analysis_id}")
                flight.task.cancel()

    def _release(self, key: tuple[ArtifactKind, str], flight: _InFlight) -> None:
        if self._inflight.get(key) is flight:
            del self._inflight[key]
        # Mark the outcome as retrieved when every waiter has already left.
        if not flight.task.cancelled():
            flight.task.exception()

    async def _generate_and_store(
        self, kind: ArtifactKind, analysis_id: str, params: dict[str, Any]
    ) -> Payload:
        logger.info(f"Generating {kind.label} for {analysis_id}")
        start_time = time.time()
        try:
            if kind is ArtifactKind.PREMIUM_ANALYSIS:
                payload = await self._assemble_premium_analysis(analysis_id, params)
            else:
                payload = await self._generator(kind, analysis_id, params)
        except GenerationError:
            self._metrics.record_generation(kind, 0, success=False)
            raise
        except (IdeaScopeError, ValueError) as e:
            self._metrics.record_generation(kind, 0, success=False)
            logger.error(
                f"{kind.label.capitalize()} generation failed for {analysis_id}: {e}",
                extra={"event": "generation_failed", "kind": kind.value},
            )
            details = e.details if isinstance(e, IdeaScopeError) else {}
            raise GenerationError(
                f"Failed to generate {kind.label}",
                kind=kind.value,
                analysis_id=analysis_id,
                details={**details, "cause": str(e)},
            ) from e

        if not isinstance(payload, dict):
            self._metrics.record_generation(kind, 0, success=False)
            raise GenerationError(
                f"Generation of {kind.label} returned {type(payload).__name__}, expected object",
                kind=kind.value,
                analysis_id=analysis_id,
            )

        duration_ms = (time.time() - start_time) * 1000
        self._store.set(
            kind, analysis_id, payload, self._store.config.generation_ttl_for(kind)
        )
        if kind is not ArtifactKind.PREMIUM_ANALYSIS:
            self._register_sources(analysis_id, payload)
        self._metrics.record_generation(kind, duration_ms, success=True)
        logger.info(
            f"{kind.label.capitalize()} generated for {analysis_id}",
            extra={
                "event": "generation_completed",
                "kind": kind.value,
                "duration_ms": round(duration_ms, 2),
            },
        )
        return payload

    def _register_sources(self, analysis_id: str, payload: Payload) -> None:
        refs: list[SourceRef] = []
        for key in SOURCE_KEYS:
            raw_refs = payload.get(key)
            if not isinstance(raw_refs, list):
                if raw_refs is not None:
                    logger.debug(f"Ignoring non-list {key} in {analysis_id}")
                continue
            for raw in raw_refs:
                try:
                    refs.append(SourceRef.model_validate(raw))
                except ValidationError:
                    logger.debug(f"Ignoring malformed source reference in {analysis_id}")
        if refs:
            self._store.sources.append(analysis_id, refs)

    async def _assemble_premium_analysis(
        self, analysis_id: str, params: dict[str, Any]
    ) -> Payload:
        """Build the aggregate analysis from the ten leaf artifacts."""
        components: dict[str, dict[str, Any]] = params.get("components") or {}
        kinds = ArtifactKind.components()
        payloads = await asyncio.gather(
            *(
                self.get_or_generate(kind, analysis_id, components.get(kind.slug) or {})
                for kind in kinds
            )
        )

        now = self._store.now()
        ttl = self._store.config.generation_ttl_for(ArtifactKind.PREMIUM_ANALYSIS)
        analysis: Payload = {"analysisId": analysis_id}
        for kind, payload in zip(kinds, payloads):
            analysis[kind.field_name] = payload
        analysis["sources"] = [
            ref.model_dump(mode="json", by_alias=True, exclude_none=True)
            for ref in self._store.sources.get(analysis_id)
        ]
        analysis["generatedAt"] = now.isoformat()
        analysis["expiresAt"] = (now + timedelta(hours=ttl)).isoformat()
        return analysis

    async def get_premium_analysis(
        self, analysis_id: str, components: dict[str, dict[str, Any]] | None = None
    ) -> Payload:
        """
        Return the aggregate premium analysis, building it on a miss.

        Args:
            analysis_id: Analysis identifier
            components: Generation parameters keyed by component slug
        """
        return await self.get_or_generate(
            ArtifactKind.PREMIUM_ANALYSIS, analysis_id, {"components": components or {}}
        )
