from gatekeeper.core.config import GatekeeperSettings
from gatekeeper.monitoring.prometheus_metrics import metrics_payload


def test_defaults(monkeypatch):
    for name in ("GATEKEEPER_REDIS_URL", "REDIS_URL", "GATEKEEPER_BACKEND_TIMEOUT_SECONDS"):
        monkeypatch.delenv(name, raising=False)
    settings = GatekeeperSettings(_env_file=None)
    assert settings.redis_url == "redis://localhost:6379/0"
    assert settings.backend_timeout_seconds is None
    assert settings.rate_limit_key_prefix == "rl:"
    assert settings.flag_override_prefix == "flag:"
    assert settings.circuit_failure_threshold == 5
    assert settings.circuit_reset_timeout_ms == 30_000


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("GATEKEEPER_REDIS_URL", "redis://cache:6379/2")
    monkeypatch.setenv("GATEKEEPER_BACKEND_TIMEOUT_SECONDS", "0.25")
    monkeypatch.setenv("GATEKEEPER_RATE_LIMIT_ENABLED", "false")
    settings = GatekeeperSettings(_env_file=None)
    assert settings.redis_url == "redis://cache:6379/2"
    assert settings.backend_timeout_seconds == 0.25
    assert settings.rate_limit_enabled is False


def test_metrics_payload_exposes_registry():
    payload, content_type = metrics_payload()
    assert b"gatekeeper_circuit_breaker_state" in payload
    assert content_type.startswith("text/plain")
