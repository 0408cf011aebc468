"""Runtime introspection: type tags, call sites, memory and object reflection.

Every helper here degrades to a placeholder instead of raising.
"""

from __future__ import annotations

import inspect
import logging
import numbers
import os
import sys
from collections.abc import Mapping, Sequence, Set
from types import FrameType
from typing import Any, Protocol, runtime_checkable

import psutil

from momolog._types import CallerInfo

# resource is POSIX-only; Windows reports peak usage through psutil instead.
try:
    import resource
except ImportError:  # pragma: no cover
    resource = None  # type: ignore[assignment]

logger = logging.getLogger("momolog.introspect")

_PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))

UNKNOWN = "unknown"
DEFAULT_TRACE_DEPTH = 10


@runtime_checkable
class Inspectable(Protocol):
    """Types implementing this control what ``debug_object`` reports.

    The returned mapping replaces the reflected instance attributes.
    """

    def momolog_inspect(self) -> Mapping[str, Any]: ...


def type_tag(value: Any) -> str:
    """Describe the runtime shape of ``value``."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, numbers.Number):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (bytes, bytearray, memoryview)):
        return "bytes"
    if isinstance(value, Mapping):
        return "mapping"
    if isinstance(value, (Sequence, Set)):
        return "sequence"
    if inspect.isclass(value):
        return "class"
    if inspect.isroutine(value):
        return "callable"
    return f"object:{type(value).__qualname__}"


def is_collection(value: Any) -> bool:
    return type_tag(value) in ("mapping", "sequence")


def is_instance(value: Any) -> bool:
    return type_tag(value).startswith("object:")


def _is_library_file(filename: str) -> bool:
    path = os.path.abspath(filename)
    return path.startswith(_PACKAGE_DIR + os.sep)


def _outer_frames() -> list[FrameType]:
    frames: list[FrameType] = []
    # Skip this helper and its direct caller.
    frame = sys._getframe(2)
    while frame is not None:
        frames.append(frame)
        frame = frame.f_back  # type: ignore[assignment]
    return frames


def caller_info() -> CallerInfo:
    """Locate the first stack frame outside this package.

    Falls back to the innermost available frame, with the file reported as
    ``"unknown"``, when every frame belongs to the package.
    """
    try:
        frames = _outer_frames()
        try:
            for frame in frames:
                filename = frame.f_code.co_filename
                if filename and not _is_library_file(filename):
                    return CallerInfo(filename, frame.f_lineno, frame.f_code.co_name)
            if frames:
                first = frames[0]
                return CallerInfo(UNKNOWN, first.f_lineno, first.f_code.co_name)
        finally:
            del frames
    except Exception:  # noqa: BLE001
        logger.debug("Caller lookup failed", exc_info=True)
    return CallerInfo(UNKNOWN, 0, UNKNOWN)


def stack_snapshot(limit: int = DEFAULT_TRACE_DEPTH) -> list[dict[str, Any]]:
    """Capture up to ``limit`` frames, starting at the caller of the package."""
    snapshot: list[dict[str, Any]] = []
    try:
        frames = _outer_frames()
        try:
            outside = False
            for frame in frames:
                filename = frame.f_code.co_filename
                if not outside and _is_library_file(filename):
                    continue
                outside = True
                snapshot.append({
                    "file": filename,
                    "line": frame.f_lineno,
                    "function": frame.f_code.co_name,
                })
                if len(snapshot) >= limit:
                    break
        finally:
            del frames
    except Exception:  # noqa: BLE001
        logger.debug("Stack snapshot failed", exc_info=True)
    return snapshot


def memory_stats() -> tuple[int, int]:
    """Return ``(current_rss_bytes, peak_rss_bytes)``; 0 where unavailable."""
    current = 0
    peak = 0
    try:
        info = psutil.Process().memory_info()
        current = int(info.rss)
        peak = int(getattr(info, "peak_wset", 0))
    except Exception:  # noqa: BLE001
        logger.debug("psutil memory lookup failed", exc_info=True)

    if not peak and resource is not None:
        try:
            max_rss = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
            # Linux reports kilobytes, macOS reports bytes.
            peak = int(max_rss if sys.platform == "darwin" else max_rss * 1024)
        except Exception:  # noqa: BLE001
            logger.debug("getrusage failed", exc_info=True)
    return current, max(peak, current)


def qualified_name(cls: type) -> str:
    module = getattr(cls, "__module__", None)
    if module in (None, "builtins"):
        return cls.__qualname__
    return f"{module}.{cls.__qualname__}"


def _unreadable(exc: BaseException) -> str:
    return f"<unreadable: {type(exc).__name__}>"


def _slot_names(cls: type) -> list[str]:
    names: list[str] = []
    for klass in cls.__mro__:
        slots = klass.__dict__.get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        for name in slots:
            if name in ("__dict__", "__weakref__"):
                continue
            # Private slots are stored under their mangled name.
            if name.startswith("__") and not name.endswith("__"):
                name = f"_{klass.__name__.lstrip('_')}{name}"
            if name not in names:
                names.append(name)
    return names


def object_properties(obj: Any) -> dict[str, Any]:
    """All instance attributes of ``obj``, private ones included."""
    if isinstance(obj, Inspectable):
        try:
            return dict(obj.momolog_inspect())
        except Exception:  # noqa: BLE001
            logger.debug("momolog_inspect() failed, falling back", exc_info=True)

    props: dict[str, Any] = {}
    try:
        attrs = object.__getattribute__(obj, "__dict__")
    except AttributeError:
        attrs = {}
    except Exception as exc:  # noqa: BLE001
        props["__dict__"] = _unreadable(exc)
        attrs = {}
    for key, value in dict(attrs).items():
        props[str(key)] = value

    for name in _slot_names(type(obj)):
        try:
            props[name] = object.__getattribute__(obj, name)
        except AttributeError:
            continue
        except Exception as exc:  # noqa: BLE001
            props[name] = _unreadable(exc)
    return props


def object_methods(obj: Any) -> list[str]:
    """Sorted names of the callable, non-dunder members of ``obj``'s class."""
    cls = type(obj)
    names: list[str] = []
    for name in dir(cls):
        if name.startswith("__") and name.endswith("__"):
            continue
        try:
            attr = inspect.getattr_static(cls, name)
        except AttributeError:
            continue
        if isinstance(attr, (staticmethod, classmethod)) or callable(attr):
            names.append(name)
    return sorted(names)


def object_info(obj: Any) -> dict[str, Any]:
    """Class name, flattened properties and method names of ``obj``."""
    info: dict[str, Any] = {"class": qualified_name(type(obj))}
    try:
        info["properties"] = object_properties(obj)
    except Exception as exc:  # noqa: BLE001
        info["properties"] = {"error": _unreadable(exc)}
    try:
        info["methods"] = object_methods(obj)
    except Exception as exc:  # noqa: BLE001
        info["methods"] = [_unreadable(exc)]
    return info
