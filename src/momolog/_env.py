"""Development-environment auto-detection."""

from __future__ import annotations

import os
import platform
from collections.abc import Mapping

_LOCAL_HOST_MARKERS = ("localhost", "127.0.0.1")
_LOCAL_HOST_SUFFIX = ".local"

_DEBUG_FLAGS = ("MOMOLOG_DEBUG", "APP_DEBUG", "WP_DEBUG", "DEBUG")
_ENV_NAME_VARS = ("APP_ENV", "ENV", "ENVIRONMENT", "PYTHON_ENV")
_DEV_ENV_NAMES = frozenset({"local", "dev", "development"})
_TRUTHY = frozenset({"1", "true", "yes", "on"})


def current_hostname(environ: Mapping[str, str] | None = None) -> str:
    """Server name if the host application exported one, else the node name."""
    env = os.environ if environ is None else environ
    return env.get("SERVER_NAME") or platform.node()


def is_local_hostname(hostname: str) -> bool:
    name = hostname.strip().lower()
    if any(marker in name for marker in _LOCAL_HOST_MARKERS):
        return True
    return name.endswith(_LOCAL_HOST_SUFFIX)


def is_development_environment(
    *,
    hostname: str | None = None,
    environ: Mapping[str, str] | None = None,
) -> bool:
    """Guess whether this process runs in a development environment.

    True when the host name looks local, a debug flag is set, or an
    environment-name variable says ``local``/``dev``/``development``.
    """
    env = os.environ if environ is None else environ
    host = current_hostname(env) if hostname is None else hostname

    if is_local_hostname(host):
        return True

    for flag in _DEBUG_FLAGS:
        if env.get(flag, "").strip().lower() in _TRUTHY:
            return True

    for var in _ENV_NAME_VARS:
        if env.get(var, "").strip().lower() in _DEV_ENV_NAMES:
            return True

    return False
