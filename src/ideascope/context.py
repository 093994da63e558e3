"""
Application context.

Bundles the premium store, its supervisor, the generation gateway and
the metrics collector. One context is built at process start and passed
to route handlers; tests build their own isolated contexts.
"""

from dataclasses import dataclass

from ideascope.config import CacheConfig
from ideascope.core.models import Clock
from ideascope.generation.gateway import ArtifactGenerator, GenerationGateway, Generator
from ideascope.llm.client import LLMClient
from ideascope.monitoring.metrics import CacheMetricsCollector
from ideascope.storage.store import PremiumStore
from ideascope.storage.supervisor import CacheSupervisor


@dataclass
class PremiumContext:
    """Process-wide collaborators of the premium API."""

    config: CacheConfig
    store: PremiumStore
    supervisor: CacheSupervisor
    gateway: GenerationGateway
    metrics: CacheMetricsCollector
    llm_client: LLMClient | None = None

    @classmethod
    def create(
        cls,
        config: CacheConfig | None = None,
        *,
        clock: Clock | None = None,
        generator: Generator | None = None,
        llm_client: LLMClient | None = None,
    ) -> "PremiumContext":
        """
        Wire a fresh context.

        Args:
            config: Cache configuration, defaults to CacheConfig()
            clock: Time source shared by the store and supervisor
            generator: Custom generation step; bypasses the LLM client
            llm_client: LLM client for the default generation step
        """
        config = config or CacheConfig()
        metrics = CacheMetricsCollector()
        store = PremiumStore(config=config, clock=clock)
        supervisor = CacheSupervisor(store, on_sweep=metrics.record_sweep)
        gateway = GenerationGateway(
            store,
            generator=generator or ArtifactGenerator(llm_client),
            metrics=metrics,
        )
        return cls(
            config=config,
            store=store,
            supervisor=supervisor,
            gateway=gateway,
            metrics=metrics,
            llm_client=llm_client,
        )

    async def close(self) -> None:
        """Stop the supervisor and release the LLM client."""
        await self.supervisor.stop()
        if self.llm_client is not None:
            self.llm_client.close()
