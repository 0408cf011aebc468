"""Core types: debug envelopes and delivery results."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class CallerInfo:
    """Source location of the code that invoked a debug entry point."""

    file: str
    line: int
    function: str = "unknown"


@dataclass(frozen=True)
class Metadata:
    """Immutable metadata captured alongside a debugged value."""

    label: str | None
    type_tag: str
    timestamp: str
    file: str
    line: int
    memory_usage: int = 0
    peak_memory: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "label": self.label,
            "python_type": self.type_tag,
            "timestamp": self.timestamp,
            "file": self.file,
            "line": self.line,
            "memory_usage": self.memory_usage,
            "peak_memory": self.peak_memory,
        }


@dataclass(frozen=True)
class Envelope:
    """A value plus its metadata, ready to be shipped to the viewer.

    Lives only for the duration of a single emit call.
    """

    value: Any
    metadata: Metadata


@dataclass(frozen=True)
class SendResult:
    """Outcome of one delivery attempt. Never surfaced to debug callers."""

    ok: bool
    status_code: int | None = None
    error: str | None = None

    @classmethod
    def failed(cls, exc: BaseException) -> SendResult:
        return cls(ok=False, error=f"{type(exc).__name__}: {exc}")
