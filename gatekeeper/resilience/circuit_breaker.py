# gatekeeper/resilience/circuit_breaker.py
"""
Circuit breaker pattern for protecting calls to downstream dependencies.

State is process local: each service instance builds its own picture of a
dependency's health and opens independently of its peers.
"""
from enum import Enum
import logging
import threading
import time
from typing import Any, Awaitable, Callable, Optional, Tuple, TypeVar

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr

from gatekeeper.core.config import settings
from gatekeeper.core.exceptions import CircuitBreakerError
from gatekeeper.core.validation import validate_config
from gatekeeper.monitoring.prometheus_metrics import (
    circuit_breaker_rejections_total,
    circuit_breaker_state,
    circuit_breaker_transitions_total,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CircuitState(Enum):
    CLOSED = "CLOSED"  # Normal operation
    OPEN = "OPEN"  # Failing, reject requests
    HALF_OPEN = "HALF_OPEN"  # Testing recovery


_STATE_GAUGE = {
    CircuitState.CLOSED: 0,
    CircuitState.HALF_OPEN: 1,
    CircuitState.OPEN: 2,
}


class CircuitBreakerOptions(BaseModel):
    """Configuration for a circuit breaker."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    name: StrictStr = Field(min_length=1)
    failure_threshold: StrictInt = Field(default=5, gt=0, alias="failureThreshold")
    # Milliseconds to wait in OPEN before allowing a probe
    reset_timeout: StrictInt = Field(default=30_000, gt=0, alias="resetTimeout")


class CircuitBreaker:
    """
    Circuit breaker for protecting external service calls.

    Usage:
        breaker = CircuitBreaker(name="payments-api")

        try:
            result = await breaker.execute(charge_card, order_id)
        except CircuitBreakerError:
            # Use fallback
    """

    def __init__(
        self,
        name: Optional[str] = None,
        failure_threshold: Optional[int] = None,
        reset_timeout: Optional[int] = None,
        *,
        options: Any = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if options is None:
            options = {
                "name": name,
                "failure_threshold": (
                    settings.circuit_failure_threshold if failure_threshold is None else failure_threshold
                ),
                "reset_timeout": settings.circuit_reset_timeout_ms if reset_timeout is None else reset_timeout,
            }
        self.options = validate_config(CircuitBreakerOptions, options)
        self.name = self.options.name
        self._clock = clock

        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._last_failure_time: Optional[float] = None
        self._probe_in_flight = False
        self._lock = threading.Lock()

        circuit_breaker_state.labels(name=self.name).set(_STATE_GAUGE[CircuitState.CLOSED])

    @property
    def state(self) -> CircuitState:
        with self._lock:
            return self._state

    @property
    def is_open(self) -> bool:
        return self.state == CircuitState.OPEN

    def get_state(self) -> CircuitState:
        return self.state

    def get_failure_count(self) -> int:
        with self._lock:
            return self._failure_count

    def _transition(self, new_state: CircuitState, reason: str = "") -> None:
        # Caller holds self._lock
        old_state = self._state
        self._state = new_state
        if new_state == CircuitState.CLOSED:
            self._failure_count = 0
            self._last_failure_time = None
        elif new_state == CircuitState.OPEN:
            self._last_failure_time = self._clock()

        circuit_breaker_state.labels(name=self.name).set(_STATE_GAUGE[new_state])
        circuit_breaker_transitions_total.labels(name=self.name, state=new_state.value).inc()

        suffix = f" ({reason})" if reason else ""
        message = f"Circuit {self.name}: {old_state.value} -> {new_state.value}{suffix}"
        if new_state == CircuitState.OPEN:
            logger.warning(message)
        else:
            logger.info(message)

    def _should_attempt(self) -> Tuple[bool, bool]:
        """
        Decide whether to invoke the protected call.

        Returns ``(allowed, is_probe)``. Only the call holding the probe slot
        may move a half-open circuit to CLOSED or back to OPEN.
        """
        with self._lock:
            if self._state == CircuitState.CLOSED:
                return True, False

            if self._state == CircuitState.OPEN:
                elapsed_ms = (self._clock() - (self._last_failure_time or 0.0)) * 1000
                if elapsed_ms >= self.options.reset_timeout:
                    self._transition(CircuitState.HALF_OPEN)
                    self._probe_in_flight = True
                    return True, True
                return False, False

            # HALF_OPEN: only one probe at a time
            if not self._probe_in_flight:
                self._probe_in_flight = True
                return True, True
            return False, False

    def _record_success(self, is_probe: bool = False) -> None:
        with self._lock:
            if self._state == CircuitState.HALF_OPEN:
                # Calls admitted before the circuit opened do not decide recovery
                if is_probe:
                    self._probe_in_flight = False
                    self._transition(CircuitState.CLOSED, "probe succeeded")
            elif self._state == CircuitState.CLOSED:
                # Reset failure count on success
                self._failure_count = 0

    def _release_probe(self, is_probe: bool = False) -> None:
        if not is_probe:
            return
        with self._lock:
            self._probe_in_flight = False

    def _record_failure(self, is_probe: bool = False) -> None:
        with self._lock:
            if self._state == CircuitState.HALF_OPEN:
                if is_probe:
                    self._failure_count += 1
                    self._probe_in_flight = False
                    self._transition(CircuitState.OPEN, "probe failed")
                return

            self._failure_count += 1
            if self._state == CircuitState.CLOSED and self._failure_count >= self.options.failure_threshold:
                self._transition(CircuitState.OPEN, f"{self._failure_count} failures")

    async def execute(self, func: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
        """
        Execute a function through the circuit breaker.

        The function's own exception is re-raised unchanged after being counted.

        Raises:
            CircuitBreakerError: If the circuit rejected the call without invoking ``func``
        """
        allowed, is_probe = self._should_attempt()
        if not allowed:
            circuit_breaker_rejections_total.labels(name=self.name).inc()
            raise CircuitBreakerError(self.name, self.state)

        try:
            result = await func(*args, **kwargs)
        except Exception:
            self._record_failure(is_probe)
            raise
        except BaseException:
            # Cancelled probes free the slot without counting as a failure
            self._release_probe(is_probe)
            raise
        self._record_success(is_probe)
        return result

    def reset(self) -> None:
        """Manually reset the circuit breaker."""
        with self._lock:
            self._probe_in_flight = False
            if self._state != CircuitState.CLOSED:
                self._transition(CircuitState.CLOSED, "manual reset")
            else:
                self._failure_count = 0
                self._last_failure_time = None
