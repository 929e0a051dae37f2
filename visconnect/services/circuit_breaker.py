"""
CircuitBreaker - Prevents cascading failures by stopping requests to failing services.

States:
- CLOSED: Normal operation, requests pass through
- OPEN: Service is failing, requests are blocked
- HALF_OPEN: Testing if service has recovered

Transitions:
- CLOSED → OPEN: When failure_threshold consecutive failures are reached
- OPEN → HALF_OPEN: Once reset_timeout has passed since the last failure
- HALF_OPEN → CLOSED: On successful request
- HALF_OPEN → OPEN: On failed request
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Awaitable, Callable, TypeVar

from loguru import logger

from visconnect.services.clock import Clock, system_clock
from visconnect.services.errors import CircuitOpenError

T = TypeVar("T")


class CircuitState(str, Enum):
    """Circuit breaker states."""

    CLOSED = "CLOSED"  # Normal operation
    OPEN = "OPEN"  # Blocking requests
    HALF_OPEN = "HALF_OPEN"  # Testing recovery


@dataclass
class CircuitBreakerConfig:
    """Configuration for circuit breaker."""

    failure_threshold: int = 5  # Failures before opening
    reset_timeout: timedelta = timedelta(seconds=60)  # Time before half-open
    half_open_max_requests: int = 1  # Probes allowed in half-open state


class CircuitBreaker:
    """
    Circuit breaker for a single upstream target.

    The breaker is the outermost wrapper: an open circuit rejects before any
    retry attempts are spent. It never retries on its own.

    Usage:
        cb = CircuitBreaker("vis")
        result = await cb.execute(lambda: retrier.retry(call))
    """

    def __init__(
        self,
        service_id: str,
        config: CircuitBreakerConfig | None = None,
        clock: Clock | None = None,
    ):
        self.service_id = service_id
        self.config = config or CircuitBreakerConfig()
        self._clock = clock or system_clock

        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._last_failure_time: datetime | None = None
        self._half_open_requests = 0

    @property
    def state(self) -> CircuitState:
        """Get current state, checking for automatic transitions."""
        if self._state == CircuitState.OPEN and self._cooldown_elapsed():
            self._state = CircuitState.HALF_OPEN
            self._half_open_requests = 0
            logger.info(f"Circuit breaker '{self.service_id}' transitioned to HALF_OPEN")
        return self._state

    @property
    def failure_count(self) -> int:
        return self._failure_count

    @property
    def last_failure_time(self) -> datetime | None:
        return self._last_failure_time

    def _cooldown_elapsed(self) -> bool:
        if self._last_failure_time is None:
            return True
        return self._clock.now() - self._last_failure_time > self.config.reset_timeout

    def can_request(self) -> bool:
        """Check if a request is allowed."""
        current_state = self.state

        if current_state == CircuitState.CLOSED:
            return True

        if current_state == CircuitState.OPEN:
            return False

        # HALF_OPEN: Allow limited requests
        return self._half_open_requests < self.config.half_open_max_requests

    async def execute(self, operation: Callable[[], Awaitable[T]]) -> T:
        """
        Run ``operation`` under the breaker.

        Raises:
            CircuitOpenError: If the circuit is open (operation not invoked)
        """
        if not self.can_request():
            raise CircuitOpenError(self.service_id, self.get_time_until_reset() or 0)

        if self._state == CircuitState.HALF_OPEN:
            self._half_open_requests += 1

        try:
            result = await operation()
        except Exception:
            self.record_failure()
            raise
        except asyncio.CancelledError:
            # A cancelled trial call neither succeeded nor failed; free its slot
            if self._state == CircuitState.HALF_OPEN:
                self._half_open_requests = max(0, self._half_open_requests - 1)
            raise

        self.record_success()
        return result

    def record_success(self) -> None:
        """A probe success closes the circuit; in CLOSED it clears the streak."""
        if self._state == CircuitState.OPEN:
            return
        if self._state == CircuitState.HALF_OPEN:
            self._transition(CircuitState.CLOSED, "recovered")
        self._failure_count = 0

    def record_failure(self) -> None:
        """Count a failure; opens at the threshold, or immediately when probing."""
        self._failure_count += 1
        self._last_failure_time = self._clock.now()

        if self._state == CircuitState.HALF_OPEN:
            self._failure_count = max(self._failure_count, self.config.failure_threshold)
            self._transition(CircuitState.OPEN, "probe failed")
        elif self._failure_count >= self.config.failure_threshold:
            self._transition(CircuitState.OPEN, f"{self._failure_count} consecutive failures")

    def _transition(self, state: CircuitState, reason: str) -> None:
        self._state = state
        self._half_open_requests = 0
        if state == CircuitState.OPEN:
            logger.warning(f"Circuit breaker '{self.service_id}' OPENED: {reason}")
        else:
            logger.info(f"Circuit breaker '{self.service_id}' {state.value}: {reason}")

    def reset(self) -> None:
        """Manually close the circuit and forget past failures."""
        self._last_failure_time = None
        self._failure_count = 0
        self._transition(CircuitState.CLOSED, "manual reset")

    def get_time_until_reset(self) -> float | None:
        """Seconds until an OPEN circuit admits a probe; None unless OPEN."""
        if self._state != CircuitState.OPEN or self._last_failure_time is None:
            return None
        elapsed = self._clock.now() - self._last_failure_time
        return max(0.0, (self.config.reset_timeout - elapsed).total_seconds())

    def get_status(self) -> dict[str, Any]:
        state = self.state
        last_failure = self._last_failure_time
        return {
            "service_id": self.service_id,
            "state": state.value,
            "failure_count": self._failure_count,
            "last_failure": last_failure.isoformat() if last_failure else None,
            "time_until_reset": self.get_time_until_reset(),
        }
