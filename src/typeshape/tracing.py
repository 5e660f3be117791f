"""
Performance tracing decorator for the traversal and resolution entry points.
"""

import time
import functools
from typing import Callable, Any
from typeshape.logging_config import logger


def trace(func: Callable) -> Callable:
    """
    Decorator that logs function entry, exit, and execution time.

    Usage:
        @trace
        def visit(self, root, sink):
            ...

    Logs:
        - Entry with function name
        - Exit with function name; status and duration are bound fields
          (see logging_config.console_format)
        - Any exceptions raised during execution (re-raised unchanged)
    """
    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        func_name = func.__qualname__

        logger.debug(f"TRACE_ENTER: {func_name}")

        start_time = time.perf_counter()

        try:
            result = func(*args, **kwargs)
            duration = time.perf_counter() - start_time

            logger.bind(
                traced_function=func_name,
                duration_seconds=duration,
                status="success",
            ).info(f"TRACE_EXIT: {func_name}")

            return result

        except Exception as e:
            duration = time.perf_counter() - start_time

            logger.bind(
                traced_function=func_name,
                duration_seconds=duration,
                status="error",
                exception_type=type(e).__name__,
            ).error(
                f"TRACE_EXIT: {func_name} raised {type(e).__name__}: {e}"
            )

            raise

    return wrapper
