"""@never_raises decorator for public debug entry points."""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable
from typing import Any, TypeVar

F = TypeVar("F", bound=Callable[..., Any])

logger = logging.getLogger("momolog")


def never_raises(func: F) -> F:
    """Run ``func`` and discard any exception it raises.

    Debug calls must behave as no-ops towards the caller's control flow, so
    the wrapped function always returns None. Errors are logged at DEBUG.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> None:
        try:
            func(*args, **kwargs)
        except Exception:  # noqa: BLE001
            logger.debug("%s() failed", func.__name__, exc_info=True)

    return wrapper  # type: ignore[return-value]
