"""
Pytest configuration and fixtures
"""

import json

import pytest

from payra.abi import PAYRA_ABI
from payra.config import PayraConfig

MOCK_PRIVATE_KEY = "0x0123456789abcdef0123456789abcdef0123456789abcdef0123456789abcdef"

FORWARDER_ADDRESS = "0x1111111111111111111111111111111111111111"
GATEWAY_ADDRESS = "0x3333333333333333333333333333333333333333"
USDC_ADDRESS = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"
PAYER_ADDRESS = "0x2222222222222222222222222222222222222222"


class FakeTransport:
    """Callback transport that records dispatches and answers, fails or stays silent"""

    def __init__(self, result=None, error=None, silent=False):
        self.result = result
        self.error = error
        self.silent = silent
        self.calls = []
        self.callbacks = []

    def call(self, urls, to, data, callback):
        self.calls.append({"urls": tuple(urls), "to": to, "data": data})
        self.callbacks.append(callback)
        if self.silent:
            return
        if self.error is not None:
            callback(self.error, None)
        else:
            callback(None, self.result)


@pytest.fixture
def mock_evm_private_key():
    """Mock EVM private key for tests"""
    return MOCK_PRIVATE_KEY


@pytest.fixture
def payra_env():
    """Environment for a fully configured POLYGON and a LINEA without RPC URLs"""
    return {
        "PAYRA_POLYGON_PRIVATE_KEY": MOCK_PRIVATE_KEY,
        "PAYRA_POLYGON_MERCHANT_ID": "4",
        "PAYRA_POLYGON_RPC_URL_1": "https://rpc-1.polygon.example",
        "PAYRA_POLYGON_RPC_URL_2": " https://rpc-2.polygon.example ",
        "PAYRA_POLYGON_CORE_FORWARD_CONTRACT_ADDRESS": FORWARDER_ADDRESS,
        "PAYRA_POLYGON_OCP_GATEWAY_CONTRACT_ADDRESS": GATEWAY_ADDRESS,
        "PAYRA_LINEA_PRIVATE_KEY": MOCK_PRIVATE_KEY,
        "PAYRA_LINEA_MERCHANT_ID": "7",
        "PAYRA_LINEA_CORE_FORWARD_CONTRACT_ADDRESS": FORWARDER_ADDRESS,
    }


@pytest.fixture
def payra_config(payra_env):
    return PayraConfig.from_mapping(payra_env)


@pytest.fixture
def paid_only_abi_file(tmp_path):
    """ABI document declaring only forward() and isOrderPaid()"""
    path = tmp_path / "payraABI.json"
    entries = [e for e in PAYRA_ABI if e["name"] in ("forward", "isOrderPaid")]
    path.write_text(json.dumps({"abi": entries}))
    return path
