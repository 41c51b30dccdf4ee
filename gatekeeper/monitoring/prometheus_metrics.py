"""
Prometheus metrics for the governance primitives.

All metrics live on a dedicated registry so embedding applications can
expose them next to (not mixed into) their default registry.
"""

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    generate_latest,
)

# Create a custom registry to avoid conflicts with default metrics
REGISTRY = CollectorRegistry()

circuit_breaker_state = Gauge(
    "gatekeeper_circuit_breaker_state",
    "Current circuit state (0=closed, 1=half_open, 2=open)",
    ["name"],
    registry=REGISTRY,
)

circuit_breaker_transitions_total = Counter(
    "gatekeeper_circuit_breaker_transitions_total",
    "Circuit breaker state transitions",
    ["name", "state"],
    registry=REGISTRY,
)

circuit_breaker_rejections_total = Counter(
    "gatekeeper_circuit_breaker_rejections_total",
    "Calls rejected without invoking the protected dependency",
    ["name"],
    registry=REGISTRY,
)

flag_reload_total = Counter(
    "gatekeeper_flag_reload_total",
    "count of feature flag definition reloads",
    [],
    registry=REGISTRY,
)


def metrics_payload() -> tuple[bytes, str]:
    """Render the registry in Prometheus exposition format."""
    return generate_latest(REGISTRY), CONTENT_TYPE_LATEST


__all__ = [
    "REGISTRY",
    "circuit_breaker_state",
    "circuit_breaker_transitions_total",
    "circuit_breaker_rejections_total",
    "flag_reload_total",
    "metrics_payload",
]
