"""Debugger configuration."""

from __future__ import annotations

import dataclasses
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger("momolog.config")

DEFAULT_SERVER_URL = "http://localhost:9090/debug"
DEFAULT_TIMEOUT = 1.0

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})
_AUTO_VALUES = frozenset({"", "auto", "null", "none"})

# Option keys accepted by configure(); "async" is a keyword in Python.
_OPTION_ALIASES: dict[str, str] = {"async": "async_mode"}


@dataclass(frozen=True)
class MomologConfig:
    """Immutable debugger configuration.

    ``enabled=None`` means "auto-detect from the environment on first use".
    """

    server_url: str = DEFAULT_SERVER_URL
    timeout: float = DEFAULT_TIMEOUT
    enabled: bool | None = None
    async_mode: bool = True
    verify_tls: bool = True

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> MomologConfig:
        """Build a config from ``MOMOLOG_*`` environment variables."""
        env = os.environ if environ is None else environ
        return cls(
            server_url=env.get("MOMOLOG_SERVER_URL") or DEFAULT_SERVER_URL,
            timeout=_parse_timeout(env.get("MOMOLOG_TIMEOUT")),
            enabled=_parse_tristate(env.get("MOMOLOG_ENABLED")),
            async_mode=_parse_bool(env.get("MOMOLOG_ASYNC"), default=True),
        )

    def merged(self, options: Mapping[str, Any]) -> MomologConfig:
        """Return a copy with ``options`` applied over this config.

        Keys not present in ``options`` keep their current values. String
        values are parsed the same way as the environment variables.
        """
        valid = {f.name for f in dataclasses.fields(self)}
        changes: dict[str, Any] = {}
        for key, value in options.items():
            name = _OPTION_ALIASES.get(key, key)
            if name not in valid:
                raise TypeError(f"Unknown momolog option: {key!r}")
            changes[name] = _coerce_option(name, value, getattr(self, name))
        return dataclasses.replace(self, **changes)

    def as_options(self) -> dict[str, Any]:
        """Config as the option mapping accepted by ``configure()``."""
        return {
            "server_url": self.server_url,
            "timeout": self.timeout,
            "enabled": self.enabled,
            "async": self.async_mode,
            "verify_tls": self.verify_tls,
        }


def _parse_bool(raw: str | None, *, default: bool) -> bool:
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    logger.debug("Ignoring unrecognized boolean %r", raw)
    return default


def _parse_tristate(raw: str | None) -> bool | None:
    if raw is None or raw.strip().lower() in _AUTO_VALUES:
        return None
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    logger.debug("Ignoring unrecognized enabled=%r, using auto-detect", raw)
    return None


def _parse_timeout(raw: str | None) -> float:
    if raw is None or not raw.strip():
        return DEFAULT_TIMEOUT
    try:
        timeout = float(raw)
    except ValueError:
        logger.debug("Ignoring malformed timeout %r", raw)
        return DEFAULT_TIMEOUT
    if timeout <= 0:
        logger.debug("Ignoring non-positive timeout %r", raw)
        return DEFAULT_TIMEOUT
    return timeout


def _coerce_option(name: str, value: Any, current: Any) -> Any:
    if name == "enabled":
        if value is None or isinstance(value, bool):
            return value
        if isinstance(value, str):
            return _parse_tristate(value)
        return bool(value)
    if name in ("async_mode", "verify_tls"):
        if isinstance(value, str):
            return _parse_bool(value, default=current)
        return bool(value)
    if name == "timeout":
        if isinstance(value, bool):
            return DEFAULT_TIMEOUT
        return _parse_timeout(value if isinstance(value, str) else str(value))
    if name == "server_url":
        return str(value) if value else DEFAULT_SERVER_URL
    return value
