"""JSON encoding of envelopes for the wire.

The viewer expects ``{"data": {"data": <value>, "metadata": {...}}}``.
Arbitrary Python values are reduced to JSON-compatible ones first so that
encoding an envelope cannot fail on exotic payloads.
"""

from __future__ import annotations

import dataclasses
import datetime as dt
import enum
import json
import math
import uuid
from collections.abc import Mapping, Sequence, Set
from decimal import Decimal
from pathlib import PurePath
from typing import Any

from momolog._types import Envelope

MAX_DEPTH = 32
RECURSION_MARKER = "*RECURSION*"
DEPTH_MARKER = "*MAX DEPTH*"

_SCALARS = (str, int, bool, type(None))


def _safe_repr(value: Any) -> str:
    try:
        return repr(value)
    except Exception as exc:  # noqa: BLE001
        return f"<{type(value).__qualname__} (repr failed: {type(exc).__name__})>"


def _key(key: Any) -> str:
    if isinstance(key, str):
        return key
    if isinstance(key, enum.Enum):
        return str(key.value)
    if isinstance(key, _SCALARS + (float,)):
        return json.dumps(key)
    return _safe_repr(key)


def to_jsonable(value: Any, *, _depth: int = 0, _seen: set[int] | None = None) -> Any:
    """Convert ``value`` into something ``json.dumps`` accepts."""
    if isinstance(value, _SCALARS):
        return value
    if isinstance(value, float):
        # NaN and infinities are not valid JSON.
        return value if math.isfinite(value) else str(value)

    if _depth >= MAX_DEPTH:
        return DEPTH_MARKER
    if _seen is None:
        _seen = set()
    marker = id(value)
    if marker in _seen:
        return RECURSION_MARKER

    _seen.add(marker)
    try:
        return _convert(value, _depth + 1, _seen)
    except Exception:  # noqa: BLE001
        return _safe_repr(value)
    finally:
        _seen.discard(marker)


def _convert(value: Any, depth: int, seen: set[int]) -> Any:
    def recurse(item: Any) -> Any:
        return to_jsonable(item, _depth=depth, _seen=seen)

    if isinstance(value, enum.Enum):
        return recurse(value.value)
    if isinstance(value, (dt.datetime, dt.date, dt.time)):
        return value.isoformat()
    if isinstance(value, dt.timedelta):
        return value.total_seconds()
    if isinstance(value, (Decimal, uuid.UUID, PurePath, complex)):
        return str(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8", errors="replace")
    if isinstance(value, Mapping):
        return {_key(k): recurse(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [recurse(item) for item in value]
    if isinstance(value, Set):
        items = [recurse(item) for item in value]
        try:
            return sorted(items)
        except TypeError:
            return items
    if isinstance(value, Sequence):
        return [recurse(item) for item in value]
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        fields = {f.name: getattr(value, f.name) for f in dataclasses.fields(value)}
        return {"__class__": type(value).__qualname__, **recurse(fields)}

    # pydantic-style models
    model_dump = getattr(type(value), "model_dump", None)
    if callable(model_dump):
        return {"__class__": type(value).__qualname__, **recurse(value.model_dump())}

    attrs = getattr(value, "__dict__", None)
    if isinstance(attrs, dict) and not isinstance(value, type) and not callable(value):
        return {"__class__": type(value).__qualname__, **recurse(attrs)}

    return _safe_repr(value)


def envelope_to_dict(envelope: Envelope) -> dict[str, Any]:
    return {
        "data": to_jsonable(envelope.value),
        "metadata": envelope.metadata.to_dict(),
    }


def encode_envelope(envelope: Envelope) -> bytes:
    """Serialize an envelope into the POST body sent to the viewer."""
    body = {"data": envelope_to_dict(envelope)}
    return json.dumps(body, ensure_ascii=False, allow_nan=False).encode("utf-8")
