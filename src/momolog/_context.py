"""Dispatch context: marks code running inside a momolog delivery.

Log records the HTTP client emits while a delivery is in progress are
dropped so debugging never writes to the host application's logs.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

_in_dispatch: ContextVar[bool] = ContextVar("_in_dispatch", default=False)

# Filters only apply to records created on the logger itself, not children.
_QUIET_LOGGERS = (
    "httpx",
    "httpcore.connection",
    "httpcore.connection_pool",
    "httpcore.http11",
    "httpcore.http2",
    "httpcore.proxy",
)


def in_dispatch() -> bool:
    """Return True while the current context is delivering a payload."""
    return _in_dispatch.get()


@contextmanager
def dispatching() -> Iterator[None]:
    """Mark the enclosed block as a momolog delivery."""
    token = _in_dispatch.set(True)
    try:
        yield
    finally:
        _in_dispatch.reset(token)


class _DispatchFilter(logging.Filter):
    """Drops records emitted from inside a delivery."""

    def filter(self, record: logging.LogRecord) -> bool:
        return not in_dispatch()


_filter = _DispatchFilter()


def install_log_filter() -> None:
    """Attach the dispatch filter to the HTTP client loggers. Idempotent."""
    for name in _QUIET_LOGGERS:
        target = logging.getLogger(name)
        if _filter not in target.filters:
            target.addFilter(_filter)
