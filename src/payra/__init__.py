"""
payra - Merchant-side client for the Payra payment gateway

Generates the off-chain order signatures Payra contracts verify and reads
order/payment state through the Payra forwarder contract.
"""

__version__ = "0.1.0"

from payra.abi import PAYRA_ABI, AbiFunction, AbiParam, AbiRegistry, AbiType
from payra.config import NetworkSettings, PayraConfig, normalize_network
from payra.encoding import AbiCodec
from payra.exceptions import (
    AbiError,
    ConfigurationError,
    ExchangeRateError,
    FunctionNotFoundError,
    MissingCredentialsError,
    PayraError,
    RpcError,
    RpcTimeoutError,
    SignatureCreationError,
    SignatureError,
    UnsupportedNetworkError,
)
from payra.forward import ForwardCall, ForwardCallBuilder
from payra.rpc import PendingCall, RpcTransport, call_read_only
from payra.services import OrderService
from payra.signers import SignatureGenerator
from payra.types import OrderDetailsResult, OrderPaidResult, SignatureResult

__all__ = [
    "__version__",
    # ABI
    "PAYRA_ABI",
    "AbiCodec",
    "AbiFunction",
    "AbiParam",
    "AbiRegistry",
    "AbiType",
    # Configuration
    "NetworkSettings",
    "PayraConfig",
    "normalize_network",
    # Exceptions
    "PayraError",
    "ConfigurationError",
    "UnsupportedNetworkError",
    "MissingCredentialsError",
    "AbiError",
    "FunctionNotFoundError",
    "RpcError",
    "RpcTimeoutError",
    "SignatureError",
    "SignatureCreationError",
    "ExchangeRateError",
    # Calls
    "ForwardCall",
    "ForwardCallBuilder",
    "PendingCall",
    "RpcTransport",
    "call_read_only",
    # Services
    "OrderService",
    "SignatureGenerator",
    # Types
    "OrderDetailsResult",
    "OrderPaidResult",
    "SignatureResult",
]
