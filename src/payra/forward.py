"""
Forward-call construction for the Payra forwarder contract

Core functions are never called directly: their calldata is wrapped as the
single ``bytes`` argument of ``forward(bytes)`` and sent to the per-network
forwarder address, which relays it to the current core implementation.
"""

import logging
from dataclasses import dataclass
from typing import Any, Sequence

from payra.abi import FORWARD_FUNCTION, AbiFunction, AbiRegistry
from payra.config import PayraConfig
from payra.encoding import AbiCodec
from payra.exceptions import AbiError, ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ForwardCall:
    """A ready-to-dispatch forwarder call"""

    forwarder_address: str
    calldata: bytes
    inner_calldata: bytes
    function: AbiFunction


class ForwardCallBuilder:
    """Builds forward(bytes) calls for core functions and decodes their results"""

    def __init__(
        self,
        config: PayraConfig,
        registry: AbiRegistry | None = None,
        codec: AbiCodec | None = None,
    ) -> None:
        self._config = config
        self._registry = registry or AbiRegistry.load(config.abi_file)
        self._codec = codec or AbiCodec()
        # Resolved eagerly so a document without forward() fails at startup
        self._forward_fn = self._registry.get(FORWARD_FUNCTION)
        if self._forward_fn.input_types != ["bytes"] or self._forward_fn.output_types != ["bytes"]:
            raise AbiError(f"Unexpected forwarder signature: {self._forward_fn.signature}")

    def build_forward_call(
        self,
        network: str,
        function_name: str,
        args: Sequence[Any],
    ) -> ForwardCall:
        """
        Build the forwarder call for ``function_name(*args)`` on ``network``.

        Args:
            network: Network name (case-insensitive)
            function_name: Core function name as declared in the ABI
            args: Arguments in the function's declared input order

        Returns:
            ForwardCall addressed to the network's forwarder contract

        Raises:
            ConfigurationError: Network has no forwarder address
            FunctionNotFoundError: Function not in the ABI
            AbiError: Arguments do not match the declared inputs
        """
        settings = self._config.network(network)
        if not settings.forward_address:
            raise ConfigurationError(
                f"Missing forward contract address for network: {settings.name}"
            )

        function = self._registry.get(function_name)
        inner = self._codec.encode_call(function, args)
        outer = self._codec.encode_call(self._forward_fn, [inner])

        logger.debug(
            "Built forward call %s for %s (inner %d bytes)",
            function.signature,
            settings.name,
            len(inner),
        )
        return ForwardCall(
            forwarder_address=settings.forward_address,
            calldata=outer,
            inner_calldata=inner,
            function=function,
        )

    def decode_forward_result(self, call: ForwardCall, raw: bytes) -> list[Any]:
        """Unwrap forward()'s bytes result and decode it with the core function's outputs"""
        if not raw:
            raise AbiError(f"Empty result from forward() for {call.function.name}")
        (inner,) = self._codec.decode(self._forward_fn.output_types, raw)
        if not inner and call.function.outputs:
            raise AbiError(f"Empty result from {call.function.name}")
        return self._codec.decode(call.function.output_types, inner)
