"""
OrderService - on-chain order status queries through the Payra forwarder
"""

import logging
from typing import Any, Sequence

from payra.abi import AbiRegistry
from payra.config import PayraConfig
from payra.encoding import AbiCodec
from payra.forward import ForwardCallBuilder
from payra.rpc.bridge import CallbackTransport, call_read_only
from payra.rpc.transport import RpcTransport
from payra.types import OrderDetailsResult, OrderPaidResult

logger = logging.getLogger(__name__)

ORDER_DETAILS_FUNCTION = "getOrderStatus"
ORDER_PAID_FUNCTION = "isOrderPaid"


class OrderService:
    """
    Reads order/payment state for the merchant configured on a network.

    Every query is one forward() round trip: resolve configuration, build the
    call, dispatch it, wait with a timeout, decode. Failures at any step are
    returned as ``success=False`` envelopes instead of being raised.
    """

    def __init__(
        self,
        config: PayraConfig,
        registry: AbiRegistry | None = None,
        transport: CallbackTransport | None = None,
        codec: AbiCodec | None = None,
        timeout: float | None = None,
    ) -> None:
        self._config = config
        self._builder = ForwardCallBuilder(config, registry, codec)
        self._owns_transport = transport is None
        self._transport = transport or RpcTransport(timeout=config.rpc_timeout)
        self._timeout = timeout if timeout is not None else config.rpc_timeout

    def close(self) -> None:
        """Release the transport if this service created it"""
        if self._owns_transport:
            self._transport.close()

    def get_order_details(self, network: str, order_id: str) -> OrderDetailsResult:
        """
        Get full payment information for an order.

        Args:
            network: Network name (e.g. "linea", "ethereum", "polygon")
            order_id: Merchant order identifier (e.g. "shop-1-0937266")

        Returns:
            OrderDetailsResult with paid flag, token, amount, fee and timestamp
        """
        try:
            paid, token, amount, fee, timestamp = self._query(
                network, ORDER_DETAILS_FUNCTION, order_id
            )
        except Exception as e:
            logger.error("get_order_details failed for %s/%s: %s", network, order_id, e)
            return OrderDetailsResult.failure(str(e))

        return OrderDetailsResult(
            success=True,
            paid=bool(paid),
            token=token,
            amount=str(amount),
            fee=str(fee),
            timestamp=int(timestamp),
        )

    def is_order_paid(self, network: str, order_id: str) -> OrderPaidResult:
        """Check whether an order has been paid"""
        try:
            (paid,) = self._query(network, ORDER_PAID_FUNCTION, order_id)
        except Exception as e:
            logger.error("isOrderPaid failed for %s/%s: %s", network, order_id, e)
            return OrderPaidResult.failure(str(e))

        return OrderPaidResult(success=True, paid=bool(paid))

    def _query(self, network: str, function_name: str, order_id: str) -> Sequence[Any]:
        settings = self._config.network(network)
        merchant_id, forward_address, rpc_urls = settings.require_query()

        call = self._builder.build_forward_call(network, function_name, [merchant_id, order_id])
        raw = call_read_only(
            self._transport, rpc_urls, forward_address, call.calldata, timeout=self._timeout
        )
        return self._builder.decode_forward_result(call, raw)
