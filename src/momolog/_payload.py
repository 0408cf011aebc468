"""Payload builder: turns a value into an Envelope and shapes debug variants."""

from __future__ import annotations

import os
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any

from momolog._introspect import (
    DEFAULT_TRACE_DEPTH,
    UNKNOWN,
    caller_info,
    is_collection,
    is_instance,
    memory_stats,
    object_info,
    stack_snapshot,
    type_tag,
)
from momolog._types import CallerInfo, Envelope, Metadata

ARRAY_LABEL = "Array Debug"
OBJECT_LABEL = "Object Debug"
SQL_LABEL = "SQL Debug"
TRACE_LABEL = "Debug with Trace"

# Order matters: the first matching prefix wins.
QUERY_TYPES = ("SELECT", "INSERT", "UPDATE", "DELETE", "CREATE", "ALTER", "DROP")


def build(
    value: Any,
    label: str | None = None,
    *,
    caller: CallerInfo | None = None,
) -> Envelope:
    """Wrap ``value`` with its label, type, timestamp, call site and memory."""
    if caller is None:
        caller = caller_info()
    memory_usage, peak_memory = memory_stats()
    metadata = Metadata(
        label=label,
        type_tag=type_tag(value),
        timestamp=datetime.now(timezone.utc).isoformat(),
        file=caller.file,
        line=caller.line,
        memory_usage=memory_usage,
        peak_memory=peak_memory,
    )
    return Envelope(value=value, metadata=metadata)


def _type_mismatch(message: str, value: Any) -> dict[str, Any]:
    return {"error": message, "actual_type": type_tag(value), "value": value}


def array_payload(value: Any, label: str | None = None) -> tuple[Any, str]:
    if not is_collection(value):
        value = _type_mismatch("Variable is not an array", value)
    return value, label if label is not None else ARRAY_LABEL


def object_payload(value: Any, label: str | None = None) -> tuple[Any, str]:
    if not is_instance(value):
        payload = _type_mismatch("Variable is not an object", value)
        return payload, label if label is not None else OBJECT_LABEL
    info = object_info(value)
    if label is None:
        label = f"{OBJECT_LABEL}: {type(value).__qualname__}"
    return info, label


def detect_query_type(query: str) -> str:
    """Classify a SQL statement by its leading keyword.

    >>> detect_query_type("  select * from t")
    'SELECT'
    """
    normalized = str(query).strip().upper()
    for query_type in QUERY_TYPES:
        if normalized.startswith(query_type):
            return query_type
    return "UNKNOWN"


def sql_payload(
    query: str,
    params: Sequence[Any] | dict[str, Any] | None = None,
    label: str | None = None,
) -> tuple[dict[str, Any], str]:
    payload = {
        "query": query,
        "parameters": params,
        "query_type": detect_query_type(query),
    }
    return payload, label if label is not None else SQL_LABEL


def trace_payload(
    value: Any,
    label: str | None = None,
    *,
    depth: int = DEFAULT_TRACE_DEPTH,
) -> tuple[dict[str, Any], str]:
    payload = {"data": value, "stack_trace": stack_snapshot(depth)}
    return payload, label if label is not None else TRACE_LABEL


def quick_label(caller: CallerInfo) -> str:
    """Label used by ``dd()``: ``DD Debug - <file basename>:<line>``."""
    filename = os.path.basename(caller.file) if caller.file != UNKNOWN else UNKNOWN
    return f"DD Debug - {filename}:{caller.line}"
