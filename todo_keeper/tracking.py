"""Command usage tracking decorator."""
from __future__ import annotations

import functools
import logging
import time
from typing import Any, Callable

logger = logging.getLogger(__name__)


def track_command(func: Callable) -> Callable:
    """Decorator to log chat command outcome and duration."""

    @functools.wraps(func)
    async def wrapper(*args, **kwargs) -> Any:
        command_name = func.__name__
        start_time = time.perf_counter()
        success = False
        error_type = None

        try:
            result = await func(*args, **kwargs)
            success = True
            return result

        except Exception as e:
            error_type = type(e).__name__
            logger.error("Command %s raised %s: %s", command_name, error_type, e)
            raise

        finally:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.info(
                "command=%s success=%s duration_ms=%.1f",
                command_name,
                success,
                duration_ms,
            )

    return wrapper


__all__ = ["track_command"]
