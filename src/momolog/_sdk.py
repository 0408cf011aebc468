"""Debugger singleton — owns the configuration snapshot, emitter and hooks."""

from __future__ import annotations

import atexit
import dataclasses
import logging
import sys
import threading
import traceback
from collections.abc import Callable, Mapping
from types import TracebackType
from typing import Any

import httpx

from momolog._config import MomologConfig
from momolog._emitter import HttpEmitter
from momolog._env import is_development_environment
from momolog._introspect import UNKNOWN
from momolog._payload import build
from momolog._types import CallerInfo, Envelope, SendResult

logger = logging.getLogger("momolog.sdk")

FATAL_LABEL = "Python Fatal Error"

_debugger_instance: _Debugger | None = None
_instance_lock = threading.Lock()
_atexit_registered = False


def _safe_str(value: object) -> str:
    try:
        return str(value)
    except Exception as exc:  # noqa: BLE001
        return f"<str() failed: {type(exc).__name__}>"


def fatal_payload(
    exc_type: type[BaseException],
    exc: BaseException | None,
    tb: TracebackType | None,
) -> dict[str, Any]:
    """Describe an uncaught exception by its innermost traceback frame."""
    frames = traceback.extract_tb(tb) if tb is not None else []
    last = frames[-1] if frames else None
    return {
        "fatal_error": True,
        "message": _safe_str(exc) if exc is not None else "",
        "file": last.filename if last is not None else UNKNOWN,
        "line": (last.lineno or 0) if last is not None else 0,
        "type": exc_type.__qualname__,
    }


class _FatalHook:
    """Chains ``sys.excepthook`` and ``threading.excepthook``.

    Reports each uncaught exception once, then defers to the previous hook.
    """

    def __init__(self, report: Callable[..., object]) -> None:
        self._report = report
        self._sys_handler = self._handle_sys
        self._thread_handler = self._handle_thread
        self._previous_sys: Callable[..., Any] | None = None
        self._previous_thread: Callable[..., Any] | None = None

    @property
    def installed(self) -> bool:
        return sys.excepthook is self._sys_handler

    def install(self) -> None:
        if self._previous_sys is not None:
            return
        self._previous_sys = sys.excepthook
        self._previous_thread = threading.excepthook
        sys.excepthook = self._sys_handler
        threading.excepthook = self._thread_handler

    def uninstall(self) -> None:
        """Restore the previous hooks if nobody replaced ours meanwhile."""
        if sys.excepthook is self._sys_handler and self._previous_sys is not None:
            sys.excepthook = self._previous_sys
        if threading.excepthook is self._thread_handler and self._previous_thread is not None:
            threading.excepthook = self._previous_thread
        self._previous_sys = None
        self._previous_thread = None

    def _safe_report(
        self,
        exc_type: type[BaseException],
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if issubclass(exc_type, KeyboardInterrupt):
            return
        try:
            self._report(exc_type, exc, tb)
        except Exception:  # noqa: BLE001
            logger.debug("Fatal error report failed", exc_info=True)

    def _handle_sys(
        self,
        exc_type: type[BaseException],
        exc: BaseException,
        tb: TracebackType | None,
    ) -> None:
        self._safe_report(exc_type, exc, tb)
        previous = self._previous_sys or sys.__excepthook__
        previous(exc_type, exc, tb)

    def _handle_thread(self, args: threading.ExceptHookArgs) -> None:
        if args.exc_type is not SystemExit:
            self._safe_report(args.exc_type, args.exc_value, args.exc_traceback)
        previous = self._previous_thread or threading.__excepthook__
        previous(args)


class _Debugger:
    """Internal debugger singleton. Not part of the public API."""

    def __init__(
        self,
        config: MomologConfig,
        *,
        transport: httpx.BaseTransport | None = None,
        detect: Callable[[], bool] = is_development_environment,
    ) -> None:
        self._config = config
        self._lock = threading.Lock()
        self._detect = detect
        self.emitter = HttpEmitter(transport=transport)
        self._fatal_hook = _FatalHook(self.report_fatal)

    @property
    def config(self) -> MomologConfig:
        """Current configuration with ``enabled`` resolved."""
        config = self._config
        if config.enabled is None:
            config = self._resolve_enabled()
        return config

    @property
    def raw_config(self) -> MomologConfig:
        """Current configuration as set, without running auto-detection."""
        return self._config

    @property
    def enabled(self) -> bool:
        return bool(self.config.enabled)

    def _resolve_enabled(self) -> MomologConfig:
        with self._lock:
            if self._config.enabled is None:
                try:
                    enabled = bool(self._detect())
                except Exception:  # noqa: BLE001
                    logger.debug("Environment detection failed", exc_info=True)
                    enabled = False
                logger.debug("Auto-detected enabled=%s", enabled)
                self._config = dataclasses.replace(self._config, enabled=enabled)
            return self._config

    def configure(self, options: Mapping[str, Any]) -> None:
        """Merge ``options`` over the current configuration."""
        with self._lock:
            self._config = self._config.merged(options)

    def build(
        self,
        value: Any,
        label: str | None = None,
        *,
        caller: CallerInfo | None = None,
    ) -> Envelope:
        """Build an envelope, resolving auto-detection first."""
        if self._config.enabled is None:
            self._resolve_enabled()
        return build(value, label, caller=caller)

    def debug(
        self,
        value: Any,
        label: str | None = None,
        *,
        caller: CallerInfo | None = None,
    ) -> None:
        config = self.config
        if not config.enabled:
            return
        envelope = build(value, label, caller=caller)
        self.emitter.emit(envelope, config)

    def report_fatal(
        self,
        exc_type: type[BaseException],
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> SendResult | None:
        """Synchronously send one envelope describing an uncaught exception."""
        config = self.config
        if not config.enabled:
            return None
        payload = fatal_payload(exc_type, exc, tb)
        caller = CallerInfo(payload["file"], payload["line"])
        envelope = build(payload, FATAL_LABEL, caller=caller)
        # The process may be about to exit, so do not hand off to a thread.
        return self.emitter.send(envelope, dataclasses.replace(config, async_mode=False))

    def install_hooks(self) -> None:
        self._fatal_hook.install()

    @property
    def hooks_installed(self) -> bool:
        return self._fatal_hook.installed

    def shutdown(self) -> None:
        """Remove hooks and give in-flight deliveries a last chance."""
        self._fatal_hook.uninstall()
        self.emitter.flush(timeout=self._config.timeout)


def _get_debugger() -> _Debugger:
    """Return the active debugger, creating it from the environment if needed."""
    global _debugger_instance, _atexit_registered  # noqa: PLW0603
    debugger = _debugger_instance
    if debugger is not None:
        return debugger
    with _instance_lock:
        if _debugger_instance is None:
            _debugger_instance = _Debugger(MomologConfig.from_env())
            _debugger_instance.install_hooks()
            if not _atexit_registered:
                atexit.register(shutdown)
                _atexit_registered = True
        return _debugger_instance


def shutdown() -> None:
    """Flush in-flight deliveries and drop the debugger.

    The next debug call starts over from the environment configuration.
    """
    global _debugger_instance  # noqa: PLW0603
    with _instance_lock:
        debugger = _debugger_instance
        _debugger_instance = None
    if debugger is not None:
        debugger.shutdown()
