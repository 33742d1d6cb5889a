"""Prometheus Metrics Configuration"""

from typing import Optional

from prometheus_client import Counter, Histogram, Gauge, CollectorRegistry, generate_latest, CONTENT_TYPE_LATEST

# Create a custom registry for our metrics
registry = CollectorRegistry()

# ============================================================================
# HTTP Request Metrics
# ============================================================================

http_requests_total = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status'],
    registry=registry
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint'],
    registry=registry,
    buckets=(0.005, 0.01, 0.025, 0.05, 0.075, 0.1, 0.25, 0.5, 0.75, 1.0, 2.5, 5.0)
)

# ============================================================================
# RBAC Engine Metrics
# ============================================================================

rbac_calculations_total = Counter(
    'rbac_calculations_total',
    'Total least-privilege calculations',
    ['system', 'outcome'],  # outcome: matched, no_match, invalid
    registry=registry
)

rbac_calculation_duration_seconds = Histogram(
    'rbac_calculation_duration_seconds',
    'Least-privilege calculation duration in seconds',
    ['system'],
    registry=registry,
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.2, 0.5, 1.0)
)

rbac_search_queries_total = Counter(
    'rbac_search_queries_total',
    'Total role and operation search queries',
    ['system', 'kind'],  # kind: roles, role_detail, namespaces, namespace_operations, operations
    registry=registry
)

# ============================================================================
# Catalog Metrics
# ============================================================================

rbac_catalog_roles = Gauge(
    'rbac_catalog_roles',
    'Number of roles in the active catalog snapshot',
    ['system'],
    registry=registry
)

rbac_catalog_loads_total = Counter(
    'rbac_catalog_loads_total',
    'Total catalog load attempts',
    ['system', 'result'],  # result: success, failure
    registry=registry
)

# ============================================================================
# Helper Functions
# ============================================================================

def get_metrics() -> bytes:
    """
    Generate Prometheus metrics in text format.

    Returns:
        Metrics in Prometheus text format
    """
    return generate_latest(registry)


def get_metrics_content_type() -> str:
    """
    Get the content type for Prometheus metrics.

    Returns:
        Content type string
    """
    return CONTENT_TYPE_LATEST


class MetricsCollector:
    """Helper class for collecting and updating metrics"""

    @staticmethod
    def record_http_request(method: str, endpoint: str, status: int, duration: float):
        """Record HTTP request metrics"""
        http_requests_total.labels(method=method, endpoint=endpoint, status=status).inc()
        http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(duration)

    @staticmethod
    def record_calculation(system: str, outcome: str, duration: Optional[float] = None):
        """Record a least-privilege calculation"""
        rbac_calculations_total.labels(system=system, outcome=outcome).inc()
        if duration is not None:
            rbac_calculation_duration_seconds.labels(system=system).observe(duration)

    @staticmethod
    def record_search(system: str, kind: str):
        """Record a search/index lookup"""
        rbac_search_queries_total.labels(system=system, kind=kind).inc()

    @staticmethod
    def record_catalog_load(system: str, result: str, role_count: Optional[int] = None):
        """Record a catalog load attempt and the resulting catalog size"""
        rbac_catalog_loads_total.labels(system=system, result=result).inc()
        if role_count is not None:
            rbac_catalog_roles.labels(system=system).set(role_count)


__all__ = [
    'registry',
    'get_metrics',
    'get_metrics_content_type',
    'MetricsCollector',
    'http_requests_total',
    'http_request_duration_seconds',
    'rbac_calculations_total',
    'rbac_calculation_duration_seconds',
    'rbac_search_queries_total',
    'rbac_catalog_roles',
    'rbac_catalog_loads_total',
]
