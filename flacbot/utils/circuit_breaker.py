"""
Circuit breaker guarding calls to the remote catalog.

When the catalog is down every search would otherwise wait out its full
timeout before falling back to demo results. Once the breaker opens, calls fail
immediately until the recovery window has passed.
"""

import logging
import time
from enum import Enum
from typing import Callable, Optional, Tuple, Type

log = logging.getLogger(__name__)


class CircuitState(Enum):
    """States of the circuit breaker."""

    CLOSED = "closed"  # Normal operation
    OPEN = "open"  # Blocking requests
    HALF_OPEN = "half_open"  # Testing if service recovered


class CircuitBreakerError(Exception):
    """Raised when circuit breaker is open."""


class CircuitBreaker:
    """
    Counts consecutive failures of a remote dependency.

    States:
    - CLOSED: Normal operation, requests pass through
    - OPEN: Too many failures, requests blocked
    - HALF_OPEN: Recovery window elapsed, a single trial request is let through

    Only exceptions listed in ``tracked_exceptions`` count as failures, so an
    API that answers with an error payload does not trip the breaker.
    """

    def __init__(
        self,
        failure_threshold: int = 5,
        recovery_timeout: float = 30.0,
        tracked_exceptions: Tuple[Type[BaseException], ...] = (Exception,),
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize circuit breaker.

        Args:
            failure_threshold: Consecutive failures before opening the circuit.
            recovery_timeout: Seconds to wait before letting a trial request through.
            tracked_exceptions: Exception types that count as failures.
            clock: Monotonic time source, injectable for tests.
        """
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.tracked_exceptions = tracked_exceptions
        self._clock = clock

        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._opened_at: Optional[float] = None
        self._trial_in_flight = False

    @property
    def state(self) -> CircuitState:
        """Current circuit state, moving OPEN to HALF_OPEN once the window passed."""
        if (
            self._state == CircuitState.OPEN
            and self._opened_at is not None
            and self._clock() - self._opened_at >= self.recovery_timeout
        ):
            log.info("Circuit breaker half-open, trying the catalog again.")
            self._state = CircuitState.HALF_OPEN
        return self._state

    def allow_request(self) -> bool:
        """Lets requests through unless open. In HALF_OPEN, only the first one."""
        state = self.state
        if state == CircuitState.OPEN:
            return False
        if state == CircuitState.HALF_OPEN:
            if self._trial_in_flight:
                return False
            self._trial_in_flight = True
        return True

    def record_success(self) -> None:
        if self._state != CircuitState.CLOSED:
            log.info("[green]✓ Catalog reachable again, circuit closed.[/green]")
        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._opened_at = None
        self._trial_in_flight = False

    def record_failure(self) -> None:
        self._failure_count += 1
        self._trial_in_flight = False
        if self._state == CircuitState.HALF_OPEN or (
            self._failure_count >= self.failure_threshold
        ):
            if self._state != CircuitState.OPEN:
                log.warning(
                    f"[yellow]Circuit breaker opened after {self._failure_count} "
                    f"failure(s). Catalog calls blocked for "
                    f"{self.recovery_timeout:.0f}s.[/yellow]"
                )
            self._state = CircuitState.OPEN
            self._opened_at = self._clock()

    async def __aenter__(self):
        """Enter context, check if circuit is open."""
        if not self.allow_request():
            raise CircuitBreakerError(
                f"Circuit is open. Will try to recover after "
                f"{self.recovery_timeout:.0f} seconds."
            )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Exit context. Untracked exceptions mean the remote answered."""
        if exc_type is not None and issubclass(exc_type, self.tracked_exceptions):
            self.record_failure()
        else:
            self.record_success()
        return False
