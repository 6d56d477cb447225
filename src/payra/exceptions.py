"""
Payra custom exception hierarchy
"""


class PayraError(Exception):
    """Payra base exception"""

    pass


class ConfigurationError(PayraError):
    """Configuration-related error"""

    pass


class UnsupportedNetworkError(ConfigurationError):
    """Network has no configuration"""

    pass


class MissingCredentialsError(ConfigurationError):
    """Merchant private key or merchant id missing for a network"""

    def __init__(self, network: str, message: str | None = None):
        self.network = network
        super().__init__(message or f"Missing merchant credentials for network: {network}")


class AbiError(PayraError):
    """ABI encoding, decoding or definition error"""

    pass


class FunctionNotFoundError(AbiError):
    """Function is not present in the loaded ABI"""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Function {name} not found in ABI")


class RpcError(PayraError):
    """JSON-RPC transport reported a failure"""

    pass


class RpcTimeoutError(RpcError, TimeoutError):
    """No RPC response within the allowed time"""

    def __init__(self, timeout: float, message: str | None = None):
        self.timeout = timeout
        super().__init__(message or f"RPC timeout after {timeout:g}s")


class SignatureError(PayraError):
    """Signature-related error"""

    pass


class SignatureCreationError(SignatureError):
    """Signature creation failed"""

    pass


class ExchangeRateError(PayraError):
    """Exchange rate lookup failed"""

    pass
