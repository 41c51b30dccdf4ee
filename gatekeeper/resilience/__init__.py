from gatekeeper.core.exceptions import CircuitBreakerError

from .circuit_breaker import CircuitBreaker, CircuitBreakerOptions, CircuitState

__all__ = [
    "CircuitBreaker",
    "CircuitBreakerError",
    "CircuitBreakerOptions",
    "CircuitState",
]
