"""
API resilience utilities including circuit breaker pattern.

Stops hammering the Gemini API while it is failing. An open breaker fails
fast with ServiceUnavailableError, which the inference client converts into
a fallback result like any other provider error.
"""

from pybreaker import CircuitBreaker, CircuitBreakerError, CircuitBreakerListener
import structlog
from functools import wraps
from typing import Callable

logger = structlog.get_logger()


class ServiceUnavailableError(Exception):
    """Raised when a service is unavailable due to circuit breaker."""
    pass


class LoggingCircuitBreakerListener(CircuitBreakerListener):
    """Circuit breaker listener that logs state changes."""

    def state_change(self, cb, old_state, new_state):
        """Called when circuit breaker changes state."""
        logger.warning(
            "circuit_breaker_state_change",
            breaker=cb.name,
            old_state=getattr(old_state, "name", str(old_state)),
            new_state=getattr(new_state, "name", str(new_state))
        )

    def failure(self, cb, exc):
        """Called when a function wrapped by the circuit breaker fails."""
        logger.debug(
            "circuit_breaker_failure",
            breaker=cb.name,
            error=str(exc),
            fail_counter=cb.fail_counter
        )


gemini_breaker = CircuitBreaker(
    fail_max=5,           # Open after 5 failures
    reset_timeout=60,     # Try again after 60 seconds
    name="gemini",
    listeners=[LoggingCircuitBreakerListener()]
)


def with_circuit_breaker(breaker: CircuitBreaker):
    """
    Decorator routing a blocking call through a circuit breaker.

    The wrapped function must do its I/O synchronously (run it in a worker
    thread from async code) so that the breaker sees the real outcome. The
    call that trips the breaker, and every call while it is open, raises
    ServiceUnavailableError.

    Usage:
        @with_circuit_breaker(gemini_breaker)
        def call_gemini_api(model, prompt):
            return model.generate_content(prompt)

        response = await asyncio.to_thread(call_gemini_api, model, prompt)
    """
    def decorator(func: Callable):
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return breaker.call(func, *args, **kwargs)
            except CircuitBreakerError:
                logger.error(
                    "circuit_breaker_open",
                    breaker=breaker.name,
                    message="Service unavailable, circuit breaker open"
                )
                raise ServiceUnavailableError(
                    f"{breaker.name} service is temporarily unavailable"
                )
        return wrapper
    return decorator


def get_breaker_status(breaker: CircuitBreaker) -> dict:
    """
    Get the current status of a circuit breaker.

    Returns:
        Dict with state, fail_count, and other stats
    """
    return {
        "name": breaker.name,
        "state": str(breaker.current_state),
        "fail_counter": breaker.fail_counter,
        "fail_max": breaker.fail_max,
        "reset_timeout": breaker.reset_timeout,
    }
