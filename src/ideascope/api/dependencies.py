"""
FastAPI dependencies resolving the application context.
"""

from fastapi import Request

from ideascope.context import PremiumContext
from ideascope.generation.gateway import GenerationGateway
from ideascope.monitoring.metrics import CacheMetricsCollector
from ideascope.storage.store import PremiumStore
from ideascope.storage.supervisor import CacheSupervisor


def get_context(request: Request) -> PremiumContext:
    """Context attached to the running application."""
    return request.app.state.context


def get_store(request: Request) -> PremiumStore:
    return get_context(request).store


def get_gateway(request: Request) -> GenerationGateway:
    return get_context(request).gateway


def get_supervisor(request: Request) -> CacheSupervisor:
    return get_context(request).supervisor


def get_metrics(request: Request) -> CacheMetricsCollector:
    return get_context(request).metrics
