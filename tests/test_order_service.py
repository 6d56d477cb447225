"""
Tests for OrderService
"""

import time

import pytest
from eth_abi import encode

from conftest import FORWARDER_ADDRESS, USDC_ADDRESS, FakeTransport
from payra.config import PayraConfig
from payra.encoding import AbiCodec
from payra.exceptions import AbiError
from payra.services import OrderService
from payra.types import OrderDetailsResult, OrderPaidResult

codec = AbiCodec()

DETAILS_TYPES = ["bool", "address", "uint256", "uint256", "uint256"]


def _forward_response(types, values):
    return encode(["bytes"], [encode(types, values)])


@pytest.fixture
def make_service(payra_config):
    def _make(transport, timeout=1.0):
        return OrderService(payra_config, transport=transport, timeout=timeout)

    return _make


class TestGetOrderDetails:
    def test_success_envelope(self, make_service):
        transport = FakeTransport(
            result=_forward_response(DETAILS_TYPES, [True, USDC_ADDRESS, 1000, 10, 1700000000])
        )

        result = make_service(transport).get_order_details("polygon", "order-1")

        assert result == OrderDetailsResult(
            success=True,
            error=None,
            paid=True,
            token=USDC_ADDRESS,
            amount="1000",
            fee="10",
            timestamp=1700000000,
        )

    def test_dispatches_forward_call(self, make_service):
        transport = FakeTransport(
            result=_forward_response(DETAILS_TYPES, [False, USDC_ADDRESS, 0, 0, 0])
        )

        make_service(transport).get_order_details("POLYGON", "order-1")

        assert len(transport.calls) == 1
        call = transport.calls[0]
        assert call["to"] == FORWARDER_ADDRESS
        assert call["urls"] == ("https://rpc-1.polygon.example", "https://rpc-2.polygon.example")
        assert call["data"][:4] == codec.selector("forward(bytes)")
        (inner,) = codec.decode(["bytes"], call["data"][4:])
        assert inner[:4] == codec.selector("getOrderStatus(uint256,string)")
        assert inner[:4].hex() == "2b765e50"
        assert codec.decode(["uint256", "string"], inner[4:]) == [4, "order-1"]

    def test_large_amounts_are_strings(self, make_service):
        amount = 2**200
        transport = FakeTransport(
            result=_forward_response(DETAILS_TYPES, [True, USDC_ADDRESS, amount, 1, 1])
        )

        result = make_service(transport).get_order_details("polygon", "order-1")

        assert result.amount == str(amount)

    def test_missing_rpc_urls(self, make_service):
        transport = FakeTransport(result=b"")

        result = make_service(transport).get_order_details("linea", "order-1")

        assert result.success is False
        assert "No RPC URLs" in result.error
        assert result.paid is None and result.token is None
        assert transport.calls == []

    def test_unknown_network(self, make_service):
        transport = FakeTransport(result=b"")

        result = make_service(transport).get_order_details("ethereum", "order-1")

        assert result.success is False
        assert "ETHEREUM" in result.error
        assert transport.calls == []

    def test_rpc_error(self, make_service):
        transport = FakeTransport(error=ConnectionError("connection reset"))

        result = make_service(transport).get_order_details("polygon", "order-1")

        assert result == OrderDetailsResult.failure("RPC call failed: connection reset")

    def test_malformed_response(self, make_service):
        transport = FakeTransport(result=b"\x00\x01\x02")

        result = make_service(transport).get_order_details("polygon", "order-1")

        assert result.success is False
        assert result.error

    def test_timeout_and_late_callback(self, make_service):
        transport = FakeTransport(silent=True)
        service = make_service(transport, timeout=0.05)

        start = time.monotonic()
        result = service.get_order_details("polygon", "order-1")

        assert time.monotonic() - start < 1.0
        assert result.success is False
        assert "timeout" in result.error.lower()

        late = transport.callbacks[0]
        payload = _forward_response(DETAILS_TYPES, [True, USDC_ADDRESS, 1, 1, 1])
        assert late(None, payload) is False
        assert result.paid is None


class TestIsOrderPaid:
    @pytest.mark.parametrize("paid", [True, False])
    def test_paid_flag(self, make_service, paid):
        transport = FakeTransport(result=_forward_response(["bool"], [paid]))

        result = make_service(transport).is_order_paid("polygon", "order-1")

        assert result == OrderPaidResult(success=True, error=None, paid=paid)
        (inner,) = codec.decode(["bytes"], transport.calls[0]["data"][4:])
        assert inner[:4] == codec.selector("isOrderPaid(uint256,string)")

    def test_missing_rpc_urls(self, make_service):
        transport = FakeTransport(result=b"")

        result = make_service(transport).is_order_paid("linea", "order-1")

        assert result == OrderPaidResult.failure("No RPC URLs found for network: LINEA")
        assert transport.calls == []

    def test_timeout(self, make_service):
        result = make_service(FakeTransport(silent=True), timeout=0.05).is_order_paid(
            "polygon", "order-1"
        )

        assert result.success is False
        assert result.paid is None


def test_close_leaves_injected_transport_alone(payra_config):
    class ClosableTransport(FakeTransport):
        closed = False

        def close(self):
            self.closed = True

    transport = ClosableTransport()
    OrderService(payra_config, transport=transport).close()
    assert transport.closed is False


def test_default_transport_uses_config_timeout(payra_env):
    config = PayraConfig.from_mapping({**payra_env, "PAYRA_RPC_TIMEOUT": "2.5"})
    service = OrderService(config)
    try:
        assert service._timeout == 2.5
        assert service._transport._timeout == 2.5
    finally:
        service.close()


def test_abi_file_from_config_is_used(payra_env, paid_only_abi_file):
    config = PayraConfig.from_mapping({**payra_env, "PAYRA_ABI_FILE": str(paid_only_abi_file)})
    transport = FakeTransport(result=_forward_response(["bool"], [True]))
    service = OrderService(config, transport=transport, timeout=1.0)

    assert service.is_order_paid("polygon", "order-1") == OrderPaidResult(success=True, paid=True)

    details = service.get_order_details("polygon", "order-1")
    assert details.success is False
    assert details.error == "Function getOrderStatus not found in ABI"
    assert len(transport.calls) == 1


def test_missing_abi_file_fails_at_construction(payra_env, tmp_path):
    config = PayraConfig.from_mapping(
        {**payra_env, "PAYRA_ABI_FILE": str(tmp_path / "missing.json")}
    )

    with pytest.raises(AbiError):
        OrderService(config, transport=FakeTransport())
