"""Retry decorator for transient store errors."""

from __future__ import annotations

import logging
import time
from functools import wraps
from typing import Callable, ParamSpec, Tuple, Type, TypeVar


P = ParamSpec("P")
R = TypeVar("R")

_logger = logging.getLogger(__name__)


def retry(
    *,
    attempts: int = 3,
    delay: float = 0.05,
    backoff: float = 2.0,
    exceptions: Tuple[Type[BaseException], ...] = (Exception,),
    logger: logging.Logger | None = None,
    retry_if: Callable[[BaseException], bool] | None = None,
) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Retry ``exceptions`` with exponential backoff, re-raising the last one.

    ``retry_if`` narrows the retried errors further; errors it rejects are
    raised immediately.
    """

    if attempts < 1:
        raise ValueError("attempts must be at least 1")
    log = logger or _logger

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            current_delay = delay
            for attempt in range(1, attempts + 1):
                try:
                    return func(*args, **kwargs)
                except exceptions as exc:
                    if attempt == attempts or (retry_if is not None and not retry_if(exc)):
                        raise
                    log.warning(
                        "retrying_call",
                        extra={
                            "function": func.__qualname__,
                            "attempt": attempt,
                            "delay": current_delay,
                            "error": str(exc),
                        },
                    )
                    time.sleep(current_delay)
                    current_delay *= backoff
            raise RuntimeError("unreachable")  # pragma: no cover

        return wrapper

    return decorator
