"""Circuit breakers for upstream APIs (OpenAI, Google).

States: CLOSED → OPEN → HALF_OPEN → CLOSED (or back to OPEN)

An open breaker fails the call immediately. Nothing is retried.
"""

import time
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from app.core.metrics import CIRCUIT_BREAKER_STATE

logger = logging.getLogger(__name__)


class CircuitState(Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


_STATE_GAUGE_VALUE = {
    CircuitState.CLOSED: 0,
    CircuitState.OPEN: 1,
    CircuitState.HALF_OPEN: 2,
}


class CircuitBreakerOpen(Exception):
    """Raised when a call is blocked by an open circuit breaker."""
    def __init__(self, breaker_name: str):
        self.breaker_name = breaker_name
        super().__init__(f"Circuit breaker '{breaker_name}' is OPEN")


@dataclass
class CircuitBreaker:
    """Fails fast on an upstream that keeps erroring.

    Args:
        name: Identifier for this breaker (e.g., "openai", "google")
        failure_threshold: Consecutive failures before opening the circuit
        recovery_timeout: Seconds to wait before letting a probe call through
        half_open_max_calls: Probe calls allowed in half-open state
    """
    name: str
    failure_threshold: int = 5
    recovery_timeout: float = 30.0
    half_open_max_calls: int = 1

    state: CircuitState = field(default=CircuitState.CLOSED, init=False)
    failure_count: int = field(default=0, init=False)
    success_count: int = field(default=0, init=False)
    last_failure_time: float = field(default=0.0, init=False)
    half_open_calls: int = field(default=0, init=False)

    def can_execute(self) -> bool:
        if self.state == CircuitState.CLOSED:
            return True

        if self.state == CircuitState.OPEN:
            if time.monotonic() - self.last_failure_time >= self.recovery_timeout:
                self._transition(CircuitState.HALF_OPEN)
                return True
            return False

        return self.half_open_calls < self.half_open_max_calls

    def record_success(self) -> None:
        if self.state == CircuitState.HALF_OPEN:
            self.success_count += 1
            if self.success_count >= self.half_open_max_calls:
                self._transition(CircuitState.CLOSED)
        elif self.state == CircuitState.CLOSED:
            self.failure_count = 0

    def record_failure(self) -> None:
        self.failure_count += 1
        self.last_failure_time = time.monotonic()

        if self.state == CircuitState.HALF_OPEN:
            self._transition(CircuitState.OPEN)
        elif self.state == CircuitState.CLOSED and self.failure_count >= self.failure_threshold:
            self._transition(CircuitState.OPEN)

    async def call(self, func: Callable[..., Awaitable[Any]], *args, **kwargs) -> Any:
        """Run ``func`` through the breaker, re-raising its exception on failure."""
        if not self.can_execute():
            raise CircuitBreakerOpen(self.name)
        if self.state == CircuitState.HALF_OPEN:
            self.half_open_calls += 1
        try:
            result = await func(*args, **kwargs)
        except Exception:
            self.record_failure()
            raise
        self.record_success()
        return result

    def reset(self) -> None:
        self._transition(CircuitState.CLOSED)

    def _transition(self, new_state: CircuitState) -> None:
        old = self.state
        self.state = new_state
        if old != new_state:
            logger.warning("Circuit breaker '%s': %s → %s", self.name, old.value, new_state.value)
        CIRCUIT_BREAKER_STATE.labels(name=self.name).set(_STATE_GAUGE_VALUE[new_state])

        self.half_open_calls = 0
        self.success_count = 0
        if new_state == CircuitState.CLOSED:
            self.failure_count = 0

    @property
    def is_open(self) -> bool:
        return self.state == CircuitState.OPEN

    def get_status(self) -> dict:
        return {
            "name": self.name,
            "state": self.state.value,
            "failure_count": self.failure_count,
            "last_failure_time": self.last_failure_time,
        }


# ── Global breakers ──────────────────────────────────────────

openai_breaker = CircuitBreaker(
    name="openai",
    failure_threshold=5,
    recovery_timeout=30.0,
)

google_breaker = CircuitBreaker(
    name="google",
    failure_threshold=5,
    recovery_timeout=60.0,
)


def get_all_breakers() -> list[CircuitBreaker]:
    return [openai_breaker, google_breaker]
