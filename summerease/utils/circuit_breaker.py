"""
Circuit Breaker for the Generative Model Endpoint
=================================================

Fails fast while the model endpoint is repeatedly failing, instead of
sending every new ingestion into a request that is likely to fail.

The breaker never retries. A synthesis call is not idempotent, so callers
decide what to do with a rejected call.

Usage:
    breaker = CircuitBreaker(name="gemini", failure_threshold=5)

    async with breaker:
        text = await backend.generate(...)
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Any, Optional

logger = logging.getLogger(__name__)


class CircuitState(Enum):
    """Circuit breaker states."""
    CLOSED = "closed"        # Normal operation, requests pass through
    OPEN = "open"            # Failing, reject requests immediately
    HALF_OPEN = "half_open"  # Testing if service recovered


@dataclass
class CircuitStats:
    """Statistics for circuit breaker."""
    total_calls: int = 0
    successful_calls: int = 0
    failed_calls: int = 0
    rejected_calls: int = 0
    last_failure_time: Optional[float] = None
    consecutive_failures: int = 0
    consecutive_successes: int = 0


class CircuitOpenError(Exception):
    """Raised when the circuit is open and rejecting calls."""
    pass


class CircuitBreaker:
    """
    Async circuit breaker.

    States:
    - CLOSED: Normal operation
    - OPEN: Service failing, reject calls immediately
    - HALF_OPEN: After reset_timeout, let a single probe call through
    """

    def __init__(
        self,
        name: str,
        failure_threshold: int = 5,
        success_threshold: int = 1,
        reset_timeout: float = 60.0,
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Args:
            name: Service name for logging
            failure_threshold: Consecutive failures before opening
            success_threshold: Successes in half-open before closing
            reset_timeout: Seconds before an open circuit lets a probe through
            clock: Time source (monotonic seconds)
        """
        self.name = name
        self.failure_threshold = failure_threshold
        self.success_threshold = success_threshold
        self.reset_timeout = reset_timeout
        self._clock = clock

        self._state = CircuitState.CLOSED
        self._stats = CircuitStats()
        self._lock = asyncio.Lock()
        self._probe_in_flight = False

    @property
    def state(self) -> CircuitState:
        """Current state, moving OPEN -> HALF_OPEN once the reset timeout passed."""
        if self._state == CircuitState.OPEN and self._stats.last_failure_time is not None:
            if self._clock() - self._stats.last_failure_time >= self.reset_timeout:
                self._state = CircuitState.HALF_OPEN
                self._probe_in_flight = False
                logger.info(f"Circuit {self.name}: OPEN -> HALF_OPEN")
        return self._state

    @property
    def is_closed(self) -> bool:
        return self.state == CircuitState.CLOSED

    @property
    def stats(self) -> CircuitStats:
        return self._stats

    async def __aenter__(self):
        async with self._lock:
            state = self.state

            if state == CircuitState.OPEN:
                self._stats.rejected_calls += 1
                raise CircuitOpenError(f"Circuit {self.name} is OPEN")

            if state == CircuitState.HALF_OPEN:
                if self._probe_in_flight:
                    self._stats.rejected_calls += 1
                    raise CircuitOpenError(f"Circuit {self.name} is probing")
                self._probe_in_flight = True

            self._stats.total_calls += 1
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        async with self._lock:
            if exc_type is None:
                self._on_success()
            else:
                self._on_failure(exc_val)
        return False

    def _on_success(self) -> None:
        self._stats.successful_calls += 1
        self._stats.consecutive_successes += 1
        self._stats.consecutive_failures = 0

        if self._state == CircuitState.HALF_OPEN:
            self._probe_in_flight = False
            if self._stats.consecutive_successes >= self.success_threshold:
                self._state = CircuitState.CLOSED
                logger.info(f"Circuit {self.name}: HALF_OPEN -> CLOSED")

    def _on_failure(self, error: Optional[BaseException]) -> None:
        self._stats.failed_calls += 1
        self._stats.last_failure_time = self._clock()
        self._stats.consecutive_failures += 1
        self._stats.consecutive_successes = 0

        logger.warning(f"Circuit {self.name}: failure #{self._stats.consecutive_failures}: {error}")

        if self._state == CircuitState.HALF_OPEN:
            self._state = CircuitState.OPEN
            self._probe_in_flight = False
            logger.warning(f"Circuit {self.name}: HALF_OPEN -> OPEN")
        elif (
            self._state == CircuitState.CLOSED
            and self._stats.consecutive_failures >= self.failure_threshold
        ):
            self._state = CircuitState.OPEN
            logger.warning(f"Circuit {self.name}: CLOSED -> OPEN")

    def reset(self) -> None:
        """Manually reset the circuit to closed."""
        self._state = CircuitState.CLOSED
        self._stats = CircuitStats()
        self._probe_in_flight = False
        logger.info(f"Circuit {self.name}: manually reset to CLOSED")

    def snapshot(self) -> Dict[str, Any]:
        """Health view of the breaker."""
        return {
            "state": self.state.value,
            "total_calls": self._stats.total_calls,
            "failed": self._stats.failed_calls,
            "rejected": self._stats.rejected_calls,
            "consecutive_failures": self._stats.consecutive_failures,
            "healthy": self.is_closed,
        }
