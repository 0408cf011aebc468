"""Tests for _context module."""

import logging
import threading

import pytest

from momolog._context import dispatching, in_dispatch, install_log_filter


def test_default_is_false() -> None:
    assert in_dispatch() is False


def test_dispatching_sets_and_restores() -> None:
    with dispatching():
        assert in_dispatch() is True
        with dispatching():
            assert in_dispatch() is True
        assert in_dispatch() is True
    assert in_dispatch() is False


def test_restored_after_exception() -> None:
    try:
        with dispatching():
            raise ValueError("boom")
    except ValueError:
        pass
    assert in_dispatch() is False


def test_thread_isolation() -> None:
    seen_in_thread: list[bool] = []

    def check() -> None:
        seen_in_thread.append(in_dispatch())

    with dispatching():
        t = threading.Thread(target=check)
        t.start()
        t.join()

    assert seen_in_thread == [False]


def test_http_client_logs_dropped_during_dispatch(caplog: pytest.LogCaptureFixture) -> None:
    install_log_filter()
    httpx_logger = logging.getLogger("httpx")

    with caplog.at_level(logging.INFO, logger="httpx"):
        with dispatching():
            httpx_logger.info("HTTP Request: POST http://localhost:9090/debug")
        httpx_logger.info("HTTP Request: GET http://example.com")

    messages = [r.getMessage() for r in caplog.records]
    assert messages == ["HTTP Request: GET http://example.com"]


def test_install_is_idempotent() -> None:
    install_log_filter()
    install_log_filter()
    filters = logging.getLogger("httpx").filters
    assert sum(1 for f in filters if type(f).__name__ == "_DispatchFilter") == 1
