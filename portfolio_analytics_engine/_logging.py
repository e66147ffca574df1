"""Logging helpers.

Package logger plus the instrumentation decorators used on public entry points.
Everything routes through stdlib ``logging``; callers configure handlers.
"""

from __future__ import annotations

import functools
import logging
import time
from typing import Any, Callable


analytics_logger = logging.getLogger("portfolio_analytics_engine")


def _slow_threshold() -> float:
    from portfolio_analytics_engine import config

    return float(config.SLOW_OPERATION_SECONDS)


def log_operation(name: str) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Emit debug lines when ``name`` starts and finishes."""

    def deco(fn: Callable[..., Any]) -> Callable[..., Any]:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            analytics_logger.debug("[%s] start", name)
            result = fn(*args, **kwargs)
            analytics_logger.debug("[%s] done", name)
            return result

        return wrapper

    return deco


def log_timing(threshold: float | None = None) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Warn when the wrapped call takes longer than ``threshold`` seconds.

    ``None`` reads ``config.SLOW_OPERATION_SECONDS`` on every call.
    """

    def deco(fn: Callable[..., Any]) -> Callable[..., Any]:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            started = time.perf_counter()
            try:
                return fn(*args, **kwargs)
            finally:
                elapsed = time.perf_counter() - started
                limit = _slow_threshold() if threshold is None else threshold
                if limit and elapsed > limit:
                    analytics_logger.warning(
                        "slow_operation: %s took %.3fs (threshold %.3fs)",
                        fn.__qualname__,
                        elapsed,
                        limit,
                    )

        return wrapper

    return deco


def log_errors(severity: str = "medium") -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Log exceptions raised by the wrapped call with a severity tag, then re-raise."""

    def deco(fn: Callable[..., Any]) -> Callable[..., Any]:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return fn(*args, **kwargs)
            except Exception as exc:
                analytics_logger.error(
                    "[%s] %s failed: %s: %s",
                    severity,
                    fn.__qualname__,
                    type(exc).__name__,
                    exc,
                )
                raise

        return wrapper

    return deco


def log_analytics_operation(
    event: str,
    details: dict[str, Any] | None = None,
    execution_time: float | None = None,
) -> dict[str, Any]:
    if details:
        analytics_logger.info("[%s] %s", event, details)
    else:
        analytics_logger.info("[%s]", event)
    return {"event": event, "details": details or {}, "execution_time": execution_time}
