"""Performance Logging.

Timing helpers for backend round-trips and platform calls. Slow
operations are logged at WARNING, everything else at DEBUG.
"""

import asyncio
import functools
import logging
import time
from typing import Any, Callable, Optional

from src.logging_config.config import DEFAULT_LOGGING_CONFIG

logger = logging.getLogger(__name__)


def _log_duration(
    log: logging.Logger,
    operation: str,
    duration_ms: float,
    threshold_ms: float,
    error: Optional[BaseException] = None,
    **extra: Any,
) -> None:
    extra["duration_ms"] = round(duration_ms, 2)
    if error is not None:
        log.error(
            f"{operation} failed after {duration_ms:.1f}ms: {type(error).__name__}",
            extra=extra,
        )
    elif duration_ms >= threshold_ms:
        log.warning(f"Slow operation: {operation} took {duration_ms:.1f}ms", extra=extra)
    else:
        log.debug(f"{operation} completed in {duration_ms:.1f}ms", extra=extra)


def log_performance(
    threshold_ms: Optional[float] = None,
    logger_name: Optional[str] = None,
) -> Callable:
    """Decorator that logs coroutine execution time.

    Example:
        @log_performance(threshold_ms=500)
        async def load(self):
            ...
    """
    if threshold_ms is None:
        threshold_ms = DEFAULT_LOGGING_CONFIG.slow_threshold_ms

    def decorator(func: Callable) -> Callable:
        if not asyncio.iscoroutinefunction(func):
            raise TypeError(f"log_performance expects a coroutine function, got {func!r}")

        _logger = logging.getLogger(logger_name or func.__module__)

        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            start = time.perf_counter()
            try:
                result = await func(*args, **kwargs)
            except Exception as exc:
                _log_duration(_logger, func.__qualname__, (time.perf_counter() - start) * 1000, threshold_ms, exc)
                raise
            _log_duration(_logger, func.__qualname__, (time.perf_counter() - start) * 1000, threshold_ms)
            return result

        return wrapper

    return decorator


class PerformanceTimer:
    """Context manager for timing code blocks.

    Example:
        with PerformanceTimer("GET /notifications", method="GET") as timer:
            response = await client.get("/notifications")
    """

    def __init__(self, operation_name: str, threshold_ms: Optional[float] = None, **extra: Any):
        self.operation_name = operation_name
        self.threshold_ms = threshold_ms or DEFAULT_LOGGING_CONFIG.slow_threshold_ms
        self.extra = extra
        self.start_time: float = 0
        self.duration_ms: float = 0

    def __enter__(self) -> "PerformanceTimer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.duration_ms = (time.perf_counter() - self.start_time) * 1000
        _log_duration(
            logger, self.operation_name, self.duration_ms, self.threshold_ms, exc_val, **self.extra
        )
