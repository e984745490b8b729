"""
Unit tests for API Resilience components.

Tests cover:
- Circuit breaker configuration
- Failure counting and fail-fast behaviour
- Breaker status reporting
"""

import pytest
from pybreaker import CircuitBreaker
from unittest.mock import Mock


class TestCircuitBreaker:
    """Test circuit breaker pattern."""

    def test_circuit_breaker_configuration(self):
        """Test circuit breaker configuration."""
        from legalease.services.api_resilience import gemini_breaker

        assert gemini_breaker.name == "gemini"
        assert gemini_breaker.fail_max == 5
        assert gemini_breaker.reset_timeout == 60

    def test_successful_call_passes_through(self):
        """Test that a healthy call returns its result."""
        from legalease.services.api_resilience import with_circuit_breaker

        breaker = CircuitBreaker(fail_max=2, reset_timeout=60, name="test")

        @with_circuit_breaker(breaker)
        def call(x):
            return x * 2

        assert call(21) == 42
        assert breaker.fail_counter == 0

    def test_failures_are_counted_and_trip_the_breaker(self):
        """Test that the breaker opens after fail_max failures."""
        from legalease.services.api_resilience import (
            ServiceUnavailableError,
            with_circuit_breaker,
        )

        breaker = CircuitBreaker(fail_max=2, reset_timeout=60, name="test")
        func = Mock(side_effect=RuntimeError("503 Service Unavailable"))
        call = with_circuit_breaker(breaker)(func)

        with pytest.raises(RuntimeError):
            call()
        assert breaker.fail_counter == 1

        with pytest.raises(ServiceUnavailableError):
            call()
        assert breaker.current_state == "open"

        with pytest.raises(ServiceUnavailableError, match="test service is temporarily unavailable"):
            call()
        assert func.call_count == 2

    def test_success_resets_failure_count(self):
        """Test that a success between failures keeps the breaker closed."""
        from legalease.services.api_resilience import with_circuit_breaker

        breaker = CircuitBreaker(fail_max=2, reset_timeout=60, name="test")
        func = Mock(side_effect=[RuntimeError("boom"), "ok", RuntimeError("boom")])
        call = with_circuit_breaker(breaker)(func)

        with pytest.raises(RuntimeError):
            call()
        assert call() == "ok"
        with pytest.raises(RuntimeError):
            call()

        assert breaker.current_state == "closed"

    def test_get_breaker_status(self):
        """Test getting circuit breaker status."""
        from legalease.services.api_resilience import gemini_breaker, get_breaker_status

        status = get_breaker_status(gemini_breaker)

        assert status["name"] == "gemini"
        assert status["state"] == "closed"
        assert status["fail_counter"] == 0
        assert status["fail_max"] == 5


class TestTimeout:
    """Test timeout configuration."""

    def test_timeout_configuration(self):
        """Test that GeminiRouter accepts timeout configuration."""
        from legalease.services.gemini_router import GeminiRouter

        router = GeminiRouter(
            api_key="test-key",
            default_timeout=10.0,
            max_timeout=60.0
        )

        assert router.default_timeout == 10.0
        assert router.max_timeout == 60.0

    def test_default_timeout_values(self):
        """Test default timeout values."""
        from legalease.services.gemini_router import GeminiRouter

        router = GeminiRouter(api_key="test-key")

        assert router.default_timeout == 30.0
        assert router.max_timeout == 120.0
