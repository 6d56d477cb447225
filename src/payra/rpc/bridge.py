"""
Blocking wrapper around the callback-style RPC transport
"""

import logging
import threading
from typing import Protocol, Sequence

from payra.config import DEFAULT_RPC_TIMEOUT
from payra.exceptions import RpcError, RpcTimeoutError
from payra.rpc.transport import RpcCallback

logger = logging.getLogger(__name__)


class Cancellable(Protocol):
    """Dispatch handle, e.g. a concurrent.futures.Future"""

    def cancel(self) -> bool:
        ...


class CallbackTransport(Protocol):
    """Anything that dispatches a read-only call and reports through a callback

    ``call`` may return a handle whose ``cancel()`` withdraws a call that has
    not started yet.
    """

    def call(
        self, urls: Sequence[str], to: str, data: bytes, callback: RpcCallback
    ) -> Cancellable | None:
        ...


class PendingCall:
    """
    One-shot result cell shared by a dispatcher callback and a waiting caller.

    The first of ``resolve`` (callback) or ``abandon`` (timeout) settles the
    cell; anything arriving afterwards is dropped. Abandoning also cancels the
    bound dispatch handle so a call still queued is never sent.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._event = threading.Event()
        self._settled = False
        self._abandoned = False
        self._error: Exception | None = None
        self._result: bytes | None = None
        self._handle: Cancellable | None = None

    @property
    def settled(self) -> bool:
        return self._settled

    @property
    def abandoned(self) -> bool:
        return self._abandoned

    def bind(self, handle: Cancellable | None) -> None:
        """Attach the dispatch handle to cancel on abandon"""
        with self._lock:
            self._handle = handle
            abandoned = self._abandoned
        if abandoned:
            _cancel(handle)

    def resolve(self, error: Exception | None, result: bytes | None) -> bool:
        """Record the callback outcome. Returns False if the cell was already settled."""
        with self._lock:
            if self._settled:
                logger.debug("Dropping late RPC callback (abandoned=%s)", self._abandoned)
                return False
            self._error = error
            self._result = result
            self._settled = True
        self._event.set()
        return True

    def abandon(self) -> bool:
        """Settle the cell as timed out. Returns False if a callback got there first."""
        with self._lock:
            if self._settled:
                return False
            self._settled = True
            self._abandoned = True
            handle = self._handle
        self._event.set()
        _cancel(handle)
        return True

    def wait(self, timeout: float) -> bytes:
        """Block until the callback fires or ``timeout`` seconds elapse

        Raises:
            RpcTimeoutError: No callback within ``timeout``
            RpcError: The transport reported an error
        """
        if not self._event.wait(timeout):
            if self.abandon():
                raise RpcTimeoutError(timeout)
        if self._abandoned:
            raise RpcTimeoutError(timeout)
        if self._error is not None:
            raise RpcError(f"RPC call failed: {self._error}") from self._error
        if self._result is None:
            raise RpcError("RPC call returned no result")
        return self._result


def call_read_only(
    transport: CallbackTransport,
    urls: Sequence[str],
    to: str,
    data: bytes,
    timeout: float = DEFAULT_RPC_TIMEOUT,
) -> bytes:
    """Dispatch one read-only call and wait for its result (no retries)"""
    pending = PendingCall()
    pending.bind(transport.call(urls, to, data, pending.resolve))
    return pending.wait(timeout)


def _cancel(handle: Cancellable | None) -> None:
    if handle is not None and handle.cancel():
        logger.debug("Cancelled queued RPC call after timeout")
