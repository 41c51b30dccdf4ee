# gatekeeper/core/exceptions.py
"""
Exceptions raised by the governance primitives.

Rejections that are ordinary outcomes (a rate-limit decision with
``allowed=False``) are values, not exceptions. Everything here can be
converted to an HTTPException at the API layer.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class GatekeeperException(Exception):
    """Base exception for all gatekeeper errors."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_http_exception(self) -> HTTPException:
        """Default conversion to HTTPException (override in subclasses)."""
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class ConfigurationError(GatekeeperException):
    """Raised when a config is malformed or an operation needs a missing dependency."""


class CircuitBreakerError(GatekeeperException):
    """Raised when a circuit breaker rejects a call without attempting it."""

    def __init__(self, name: str, state: Any) -> None:
        state_name = getattr(state, "value", state)
        super().__init__(
            f'Circuit breaker "{name}" is {state_name} - request rejected',
            code="CIRCUIT_OPEN",
            details={"circuit": name, "state": state_name},
        )
        self.circuit_name = name
        self.state = state

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )
