"""HTTP emitter: ships encoded envelopes to the debug viewer.

Delivery is best-effort. Failures are recorded in a SendResult and logged at
DEBUG, but never raised: debugging must not affect the host application.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import TYPE_CHECKING

import httpx

from momolog._context import dispatching, install_log_filter
from momolog._encoding import encode_envelope
from momolog._types import SendResult

if TYPE_CHECKING:
    from momolog._config import MomologConfig
    from momolog._types import Envelope

logger = logging.getLogger("momolog.emitter")

_HEADERS = {"Content-Type": "application/json"}

# Fire-and-forget messages beyond this many in-flight deliveries are dropped.
MAX_INFLIGHT = 32


class HttpEmitter:
    """Posts envelopes to ``config.server_url``.

    In async mode each call hands the request to a short-lived daemon thread
    and returns immediately; at most ``max_inflight`` such threads run at
    once and further messages are dropped. In sync mode the request runs on
    the caller's thread and waits for the response, bounded by
    ``config.timeout``.
    """

    def __init__(
        self,
        *,
        transport: httpx.BaseTransport | None = None,
        max_inflight: int = MAX_INFLIGHT,
    ) -> None:
        self._transport = transport
        self._max_inflight = max_inflight
        self._inflight: set[threading.Thread] = set()
        self._lock = threading.Lock()
        install_log_filter()

    def emit(self, envelope: Envelope, config: MomologConfig) -> None:
        """Deliver an envelope. Never raises, never reports the outcome."""
        if not config.enabled:
            return
        try:
            body = encode_envelope(envelope)
        except Exception:  # noqa: BLE001
            logger.debug("Failed to encode debug payload", exc_info=True)
            return
        if config.async_mode:
            self._dispatch_background(body, config)
        else:
            self._post(body, config, follow_redirects=True)

    def send(self, envelope: Envelope, config: MomologConfig) -> SendResult:
        """Deliver an envelope on the calling thread and report the outcome."""
        if not config.enabled:
            return SendResult(ok=False, error="disabled")
        try:
            body = encode_envelope(envelope)
        except Exception as exc:  # noqa: BLE001
            logger.debug("Failed to encode debug payload", exc_info=True)
            return SendResult.failed(exc)
        return self._post(body, config, follow_redirects=True)

    def flush(self, timeout: float = 1.0) -> bool:
        """Wait up to ``timeout`` seconds for background deliveries.

        Returns True if none are left in flight.
        """
        deadline = time.monotonic() + timeout
        with self._lock:
            pending = list(self._inflight)
        for thread in pending:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            thread.join(timeout=remaining)
        with self._lock:
            return not self._inflight

    @property
    def inflight(self) -> int:
        """Number of background deliveries that have not finished."""
        with self._lock:
            return len(self._inflight)

    def _client(self, config: MomologConfig, *, follow_redirects: bool) -> httpx.Client:
        return httpx.Client(
            timeout=httpx.Timeout(config.timeout),
            verify=config.verify_tls,
            follow_redirects=follow_redirects,
            transport=self._transport,
        )

    def _post(
        self,
        body: bytes,
        config: MomologConfig,
        *,
        follow_redirects: bool,
    ) -> SendResult:
        with dispatching():
            try:
                with self._client(config, follow_redirects=follow_redirects) as client:
                    # The response body is never read; closing the stream
                    # releases the connection.
                    with client.stream(
                        "POST", config.server_url, content=body, headers=_HEADERS
                    ) as response:
                        status = response.status_code
                if 200 <= status < 300:
                    return SendResult(ok=True, status_code=status)
                logger.debug("Debug viewer answered HTTP %d", status)
                return SendResult(ok=False, status_code=status, error=f"HTTP {status}")
            except Exception as exc:  # noqa: BLE001
                logger.debug(
                    "Failed to deliver debug payload to %s", config.server_url,
                    exc_info=True,
                )
                return SendResult.failed(exc)

    def _dispatch_background(self, body: bytes, config: MomologConfig) -> None:
        thread = threading.Thread(
            target=self._run_background,
            args=(body, config),
            name="momolog-dispatch",
            daemon=True,
        )
        with self._lock:
            if len(self._inflight) >= self._max_inflight:
                logger.debug(
                    "Dropping debug payload: %d deliveries in flight", len(self._inflight)
                )
                return
            self._inflight.add(thread)
        try:
            thread.start()
        except RuntimeError:
            # Interpreter shutdown or thread exhaustion: drop the message.
            with self._lock:
                self._inflight.discard(thread)
            logger.debug("Could not start dispatch thread", exc_info=True)

    def _run_background(self, body: bytes, config: MomologConfig) -> None:
        try:
            self._post(body, config, follow_redirects=False)
        finally:
            with self._lock:
                self._inflight.discard(threading.current_thread())
