"""
Solidity ABI codec and hex helpers
"""

import re
from typing import Any, Sequence

from Crypto.Hash import keccak
from eth_abi import decode as abi_decode
from eth_abi import encode as abi_encode
from eth_abi.exceptions import ABITypeError, DecodingError, EncodingError, ParseError
from eth_abi.grammar import ABIType, TupleType, parse
from eth_utils import to_checksum_address

from payra.abi import AbiFunction
from payra.exceptions import AbiError

_HEX_RE = re.compile(r"^[0-9a-fA-F]*$")
_INTEGER_RE = re.compile(r"^-?[0-9]+$")

SELECTOR_SIZE = 4


def keccak256(data: bytes) -> bytes:
    """Keccak-256 digest (the pre-standard SHA-3 variant used by Ethereum)"""
    k = keccak.new(digest_bits=256)
    k.update(data)
    return k.digest()


def bytes_to_hex(data: bytes, prefix: bool = True) -> str:
    """Convert bytes to hex string"""
    hex_str = data.hex()
    return f"0x{hex_str}" if prefix else hex_str


def hex_to_bytes(hex_str: str) -> bytes:
    """Convert hex string (0x optional) to bytes"""
    if hex_str[:2].lower() == "0x":
        hex_str = hex_str[2:]
    if len(hex_str) % 2 or not _HEX_RE.match(hex_str):
        raise ValueError(f"Invalid hex string: {hex_str[:20]}")
    return bytes.fromhex(hex_str)


class AbiCodec:
    """
    Typed parameter encoder/decoder following the Solidity ABI.

    Inputs are coerced before encoding: addresses may be short hex strings
    (left-padded to 20 bytes), integers may be decimal strings and ``bytes``
    values may be 0x-hex. Decoded addresses come back checksummed.
    """

    def selector(self, signature: str) -> bytes:
        """First 4 bytes of keccak256 of a canonical signature like ``f(uint256,string)``"""
        if " " in signature or "(" not in signature or not signature.endswith(")"):
            raise AbiError(f"Not a canonical function signature: {signature!r}")
        return keccak256(signature.encode("utf-8"))[:SELECTOR_SIZE]

    def encode(self, types: Sequence[str], values: Sequence[Any]) -> bytes:
        """ABI-encode ``values`` as the tuple ``types``

        Raises:
            AbiError: On arity mismatch or a value not representable in its type
        """
        types = list(types)
        values = list(values)
        if len(types) != len(values):
            raise AbiError(f"Expected {len(types)} values for {types}, got {len(values)}")
        parsed = [self._parse_type(t) for t in types]
        coerced = [_coerce(t, v) for t, v in zip(parsed, values)]
        try:
            return abi_encode(types, coerced)
        except (EncodingError, ABITypeError, TypeError, ValueError, OverflowError) as e:
            raise AbiError(f"Failed to encode {types}: {e}") from e

    def decode(self, types: Sequence[str], data: bytes | str) -> list[Any]:
        """Decode ABI-encoded ``data`` as the tuple ``types``

        Raises:
            AbiError: If the data does not match the declared types
        """
        types = list(types)
        parsed = [self._parse_type(t) for t in types]
        try:
            raw = hex_to_bytes(data) if isinstance(data, str) else bytes(data)
            decoded = abi_decode(types, raw)
        except (DecodingError, ABITypeError, TypeError, ValueError, OverflowError) as e:
            raise AbiError(f"Failed to decode {types}: {e}") from e
        return [_normalize(t, v) for t, v in zip(parsed, decoded)]

    def encode_call(self, function: AbiFunction, args: Sequence[Any]) -> bytes:
        """Selector of ``function`` followed by its encoded arguments"""
        return self.selector(function.signature) + self.encode(function.input_types, args)

    @staticmethod
    def _parse_type(type_str: str) -> ABIType:
        try:
            abi_type = parse(type_str)
            abi_type.validate()
        except (ParseError, ABITypeError) as e:
            raise AbiError(f"Invalid ABI type {type_str!r}: {e}") from e
        return abi_type


def _coerce(abi_type: ABIType, value: Any) -> Any:
    if abi_type.is_array:
        if not isinstance(value, (list, tuple)):
            raise AbiError(f"Expected a sequence for {abi_type.to_type_str()}, got {value!r}")
        return [_coerce(abi_type.item_type, v) for v in value]

    if isinstance(abi_type, TupleType):
        if not isinstance(value, (list, tuple)) or len(value) != len(abi_type.components):
            raise AbiError(f"Tuple arity mismatch for {abi_type.to_type_str()}: {value!r}")
        return tuple(_coerce(c, v) for c, v in zip(abi_type.components, value))

    if abi_type.base == "address":
        return _coerce_address(value)
    if abi_type.base in ("uint", "int") and isinstance(value, str):
        text = value.strip()
        if not _INTEGER_RE.match(text):
            raise AbiError(f"Invalid integer for {abi_type.to_type_str()}: {value!r}")
        return int(text)
    if abi_type.base == "bytes" and isinstance(value, str):
        try:
            return hex_to_bytes(value)
        except ValueError as e:
            raise AbiError(str(e)) from e
    return value


def _coerce_address(value: Any) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        if len(value) != 20:
            raise AbiError(f"Address must be 20 bytes, got {len(value)}")
        return bytes(value)
    if isinstance(value, str):
        digits = value[2:] if value[:2].lower() == "0x" else value
        if not digits or len(digits) > 40 or not _HEX_RE.match(digits):
            raise AbiError(f"Invalid address: {value!r}")
        return bytes.fromhex(digits.rjust(40, "0"))
    raise AbiError(f"Invalid address: {value!r}")


def _normalize(abi_type: ABIType, value: Any) -> Any:
    if abi_type.is_array:
        return [_normalize(abi_type.item_type, v) for v in value]
    if isinstance(abi_type, TupleType):
        return tuple(_normalize(c, v) for c, v in zip(abi_type.components, value))
    if abi_type.base == "address":
        return to_checksum_address(value)
    return value
