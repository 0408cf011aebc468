"""MomoLog: send variables to a real-time debug viewer over HTTP.

Every debug call is best-effort: it never raises, never blocks longer than
the configured timeout and never changes the caller's control flow.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from momolog._config import MomologConfig
from momolog._guard import never_raises
from momolog._introspect import Inspectable, caller_info
from momolog._payload import (
    array_payload,
    detect_query_type,
    object_payload,
    quick_label,
    sql_payload,
    trace_payload,
)
from momolog._sdk import _get_debugger, shutdown
from momolog._types import CallerInfo, Envelope, Metadata, SendResult

__version__ = "2.0.0"

__all__ = [
    "CallerInfo",
    "Envelope",
    "Inspectable",
    "Metadata",
    "MomologConfig",
    "SendResult",
    "__version__",
    "build",
    "configure",
    "dd",
    "debug",
    "debug_array",
    "debug_object",
    "debug_sql",
    "debug_trace",
    "detect_query_type",
    "enable",
    "get_config",
    "install_excepthook",
    "is_enabled",
    "set_async",
    "set_server",
    "shutdown",
]


@never_raises
def debug(value: Any, label: str | None = None) -> None:
    """Send any value to the debug viewer.

    Usage::

        momolog.debug(user)
        momolog.debug(response.json(), "API response")
    """
    _get_debugger().debug(value, label)


@never_raises
def debug_array(value: Any, label: str | None = None) -> None:
    """Send a collection; non-collections are wrapped in an error report."""
    debugger = _get_debugger()
    if not debugger.enabled:
        return
    payload, label = array_payload(value, label)
    debugger.debug(payload, label)


@never_raises
def debug_object(value: Any, label: str | None = None) -> None:
    """Send an instance's class, attributes and method names.

    Types can implement :class:`Inspectable` to choose what is exposed.
    """
    debugger = _get_debugger()
    if not debugger.enabled:
        return
    payload, label = object_payload(value, label)
    debugger.debug(payload, label)


@never_raises
def debug_sql(
    query: str,
    params: Sequence[Any] | Mapping[str, Any] | None = None,
    label: str | None = None,
) -> None:
    """Send a SQL statement, its parameters and its detected query type."""
    debugger = _get_debugger()
    if not debugger.enabled:
        return
    payload, label = sql_payload(query, params, label)
    debugger.debug(payload, label)


@never_raises
def debug_trace(value: Any, label: str | None = None) -> None:
    """Send a value together with the current call stack (10 frames)."""
    debugger = _get_debugger()
    if not debugger.enabled:
        return
    payload, label = trace_payload(value, label)
    debugger.debug(payload, label)


@never_raises
def dd(value: Any) -> None:
    """Quick debug, labeled ``DD Debug - <file>:<line>`` from the call site."""
    debugger = _get_debugger()
    if not debugger.enabled:
        return
    caller = caller_info()
    debugger.debug(value, quick_label(caller), caller=caller)


def build(value: Any, label: str | None = None) -> Envelope:
    """Return the envelope ``debug()`` would send for ``value``, without sending it."""
    return _get_debugger().build(value, label)


def configure(options: Mapping[str, Any] | None = None, **kwargs: Any) -> None:
    """Merge configuration options over the current settings.

    Accepts ``server_url``, ``timeout``, ``enabled`` (``None`` to auto-detect),
    ``async`` (or ``async_mode``) and ``verify_tls``. Unspecified options keep
    their current values.
    """
    merged: dict[str, Any] = dict(options or {})
    merged.update(kwargs)
    _get_debugger().configure(merged)


def enable(enabled: bool = True) -> None:
    """Enable or disable sending."""
    configure(enabled=enabled)


def set_server(url: str) -> None:
    """Point the debugger at another viewer endpoint."""
    configure(server_url=url)


def set_async(async_mode: bool = True) -> None:
    """Toggle fire-and-forget delivery."""
    configure(async_mode=async_mode)


def is_enabled() -> bool:
    """Whether debug calls are sent, auto-detecting on first use."""
    return _get_debugger().enabled


def get_config() -> MomologConfig:
    """Return the current configuration snapshot."""
    return _get_debugger().raw_config


def install_excepthook() -> None:
    """Report uncaught exceptions to the viewer. Installed on first use."""
    _get_debugger().install_hooks()
