"""
IdeaScope Monitoring Module.

Cache and generation metrics with JSON and Prometheus export.
"""

from ideascope.monitoring.metrics import CacheMetricsCollector, KindMetrics

__all__ = ["CacheMetricsCollector", "KindMetrics"]
