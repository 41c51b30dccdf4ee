from prometheus_client import Counter

from gatekeeper.monitoring.prometheus_metrics import REGISTRY

rl_decisions = Counter(
    "gatekeeper_rl_decisions_total",
    "rate-limit decisions",
    ["key_prefix", "action"],
    registry=REGISTRY,
)

rl_skipped = Counter(
    "gatekeeper_rl_skipped_total",
    "requests that bypassed rate limiting (skip paths or disabled)",
    ["reason"],
    registry=REGISTRY,
)

__all__ = [
    "rl_decisions",
    "rl_skipped",
]
