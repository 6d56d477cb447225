"""
RpcTransport - callback-style read-only JSON-RPC calls (eth_call)
"""

import logging
import random
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Sequence

from web3 import Web3

from payra.config import DEFAULT_RPC_TIMEOUT
from payra.encoding import bytes_to_hex
from payra.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# callback(error, result): exactly one of the two is set
RpcCallback = Callable[[Exception | None, bytes | None], None]


class RpcTransport:
    """
    Issues ``eth_call`` against one endpoint chosen at random from a pool.

    Completion is reported through a callback from a worker thread. There is
    no failover: a failing endpoint fails the call, and callers decide whether
    to try again.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_RPC_TIMEOUT,
        max_workers: int = 8,
        chooser: Callable[[Sequence[str]], str] = random.choice,
    ) -> None:
        self._timeout = timeout
        self._chooser = chooser
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="payra-rpc"
        )
        self._clients: dict[str, Web3] = {}
        self._clients_lock = threading.Lock()

    def __enter__(self) -> "RpcTransport":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def close(self) -> None:
        """Stop accepting calls; in-flight calls finish on their own"""
        self._executor.shutdown(wait=False)

    def select_endpoint(self, urls: Sequence[str]) -> str:
        """Uniform random choice among the configured URLs"""
        if not urls:
            raise ConfigurationError("No RPC URLs configured")
        return self._chooser(list(urls))

    def call(self, urls: Sequence[str], to: str, data: bytes, callback: RpcCallback) -> Future:
        """Dispatch a read-only call; ``callback`` fires once when it completes

        Returns:
            Future of the queued call. Cancelling it before a worker picks it
            up means the request is never sent and ``callback`` never fires.
        """
        url = self.select_endpoint(urls)
        logger.debug("Dispatching eth_call to %s via %s (%d bytes)", to, url, len(data))
        return self._executor.submit(self._run, url, to, data, callback)

    def _run(self, url: str, to: str, data: bytes, callback: RpcCallback) -> None:
        try:
            result = self.eth_call(url, to, data)
        except Exception as e:
            logger.warning("eth_call to %s failed: %s", url, e)
            callback(e, None)
            return
        callback(None, result)

    def eth_call(self, url: str, to: str, data: bytes) -> bytes:
        """Blocking eth_call against a single endpoint at the latest block"""
        w3 = self._client_for(url)
        result = w3.eth.call(
            {"to": Web3.to_checksum_address(to), "data": bytes_to_hex(data)},
            "latest",
        )
        return bytes(result)

    def _client_for(self, url: str) -> Web3:
        with self._clients_lock:
            client = self._clients.get(url)
            if client is None:
                client = Web3(Web3.HTTPProvider(url, request_kwargs={"timeout": self._timeout}))
                self._clients[url] = client
            return client
