"""Tests for the never_raises decorator."""

import logging

import pytest

from momolog._guard import never_raises


def test_returns_none_on_success() -> None:
    calls: list[int] = []

    @never_raises
    def record(value: int) -> int:
        calls.append(value)
        return value

    assert record(3) is None
    assert calls == [3]


def test_swallows_exceptions() -> None:
    @never_raises
    def broken() -> None:
        raise RuntimeError("boom")

    broken()  # Should not raise


def test_preserves_metadata() -> None:
    @never_raises
    def documented(value: int) -> None:
        """Docstring survives."""

    assert documented.__name__ == "documented"
    assert documented.__doc__ == "Docstring survives."


def test_failure_logged_at_debug(caplog: pytest.LogCaptureFixture) -> None:
    @never_raises
    def broken() -> None:
        raise ValueError("bad value")

    with caplog.at_level(logging.DEBUG, logger="momolog"):
        broken()

    assert len(caplog.records) == 1
    record = caplog.records[0]
    assert record.levelno == logging.DEBUG
    assert record.getMessage() == "broken() failed"
    assert record.exc_info is not None and record.exc_info[0] is ValueError


def test_keyboard_interrupt_propagates() -> None:
    @never_raises
    def interrupted() -> None:
        raise KeyboardInterrupt

    with pytest.raises(KeyboardInterrupt):
        interrupted()
