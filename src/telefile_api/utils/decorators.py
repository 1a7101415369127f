"""Decorator utilities for cross-cutting concerns."""
import time
import logging
import functools
from typing import Any, Callable, TypeVar, cast

logger = logging.getLogger(__name__)

F = TypeVar('F', bound=Callable[..., Any])


def log_execution_time(func: F) -> F:
    """Decorator to log how long a pipeline operation took.

    Failures are logged with their duration and re-raised unchanged.

    Args:
        func: The function to decorate

    Returns:
        Decorated function that logs execution time
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        start_time = time.perf_counter()
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            duration = time.perf_counter() - start_time
            logger.warning(f"{func.__qualname__} failed after {duration:.3f}s: {type(e).__name__}: {e}")
            raise
        duration = time.perf_counter() - start_time
        logger.info(f"{func.__qualname__} completed in {duration:.3f}s")
        return result
    return cast(F, wrapper)
