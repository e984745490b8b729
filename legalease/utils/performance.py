"""
Timing helpers for pipeline operations.
"""

import asyncio
import time
from functools import wraps
from typing import Callable, Optional

import structlog

logger = structlog.get_logger()


def _report(operation: str, started: float, error: Optional[BaseException] = None) -> None:
    duration_ms = round((time.perf_counter() - started) * 1000, 2)
    if error is None:
        logger.info("operation_complete", operation=operation, duration_ms=duration_ms)
    else:
        logger.warning(
            "operation_failed",
            operation=operation,
            duration_ms=duration_ms,
            error_type=type(error).__name__,
            error=str(error)
        )


def log_execution_time(operation_name: Optional[str] = None):
    """
    Decorator logging how long a function took and whether it raised.

    Works on both coroutine functions and plain functions. Exceptions are
    logged and re-raised unchanged.

    Usage:
        @log_execution_time("document_analysis")
        async def analyze(self, source, media_type):
            ...
    """
    def decorator(func: Callable):
        name = operation_name or func.__name__

        if asyncio.iscoroutinefunction(func):
            @wraps(func)
            async def async_wrapper(*args, **kwargs):
                started = time.perf_counter()
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    _report(name, started, e)
                    raise
                _report(name, started)
                return result
            return async_wrapper

        @wraps(func)
        def sync_wrapper(*args, **kwargs):
            started = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                _report(name, started, e)
                raise
            _report(name, started)
            return result
        return sync_wrapper

    return decorator
