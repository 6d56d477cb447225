"""
Payra contract ABI definitions and the typed ABI model built from them
"""

import json
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, List, Mapping

from payra.exceptions import AbiError, FunctionNotFoundError

FORWARD_FUNCTION = "forward"

# Payra forwarder / core contract ABI (functions used by the merchant client).
# The forwarder relays forward(bytes) to the current core implementation and
# returns the core function's ABI-encoded result as bytes.
PAYRA_ABI: List[dict[str, Any]] = [
    {
        "name": "forward",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "data", "type": "bytes"}],
        "outputs": [{"name": "", "type": "bytes"}],
    },
    {
        "name": "getOrderStatus",
        "type": "function",
        "stateMutability": "view",
        "inputs": [
            {"name": "merchantId", "type": "uint256"},
            {"name": "orderId", "type": "string"},
        ],
        "outputs": [
            {"name": "paid", "type": "bool"},
            {"name": "token", "type": "address"},
            {"name": "amount", "type": "uint256"},
            {"name": "fee", "type": "uint256"},
            {"name": "timestamp", "type": "uint256"},
        ],
    },
    {
        "name": "isOrderPaid",
        "type": "function",
        "stateMutability": "view",
        "inputs": [
            {"name": "merchantId", "type": "uint256"},
            {"name": "orderId", "type": "string"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
    },
    {
        "name": "getRegistryDetails",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [
            {"name": "gateway", "type": "address"},
            {"name": "signatureVerifier", "type": "address"},
            {"name": "userData", "type": "address"},
            {"name": "feeManager", "type": "address"},
        ],
    },
]

_ARRAY_SUFFIX_RE = re.compile(r"^(?P<base>.+?)(?P<dims>(\[[0-9]*\])+)$")
_UINT_RE = re.compile(r"^uint(?P<bits>[0-9]*)$")
_INT_RE = re.compile(r"^int(?P<bits>[0-9]*)$")
_FIXED_BYTES_RE = re.compile(r"^bytes(?P<size>[0-9]+)$")


class AbiType(str, Enum):
    """Closed set of supported ABI type tags"""

    ADDRESS = "address"
    BOOL = "bool"
    STRING = "string"
    BYTES = "bytes"
    FIXED_BYTES = "bytesN"
    UINT = "uintN"
    INT = "intN"
    TUPLE = "tuple"
    ARRAY = "array"


def _classify(type_str: str) -> AbiType:
    """Map a scalar Solidity type name to its tag, or raise AbiError"""
    if type_str in ("address", "bool", "string", "bytes", "tuple"):
        return AbiType(type_str)
    for regex, tag in ((_UINT_RE, AbiType.UINT), (_INT_RE, AbiType.INT)):
        match = regex.match(type_str)
        if match:
            bits = int(match.group("bits") or 256)
            if bits % 8 or not 8 <= bits <= 256:
                raise AbiError(f"Invalid integer width in ABI type: {type_str}")
            return tag
    match = _FIXED_BYTES_RE.match(type_str)
    if match:
        if not 1 <= int(match.group("size")) <= 32:
            raise AbiError(f"Invalid fixed bytes size in ABI type: {type_str}")
        return AbiType.FIXED_BYTES
    raise AbiError(f"Unsupported ABI type: {type_str}")


@dataclass(frozen=True)
class AbiParam:
    """A typed function input or output"""

    name: str
    type: str
    tag: AbiType
    components: tuple["AbiParam", ...] = ()
    array_suffix: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AbiParam":
        """Build a parameter from its JSON ABI description.

        Raises:
            AbiError: If the type is missing or outside the supported set
        """
        type_str = data.get("type")
        if not isinstance(type_str, str) or not type_str:
            raise AbiError(f"ABI parameter without a type: {dict(data)}")

        base, suffix = type_str, ""
        match = _ARRAY_SUFFIX_RE.match(type_str)
        if match:
            base, suffix = match.group("base"), match.group("dims")

        components: tuple[AbiParam, ...] = ()
        if base == "tuple":
            raw_components = data.get("components")
            if not raw_components:
                raise AbiError("Tuple ABI parameter without components")
            components = tuple(cls.from_dict(c) for c in raw_components)

        scalar_tag = _classify(base)
        return cls(
            name=data.get("name") or "",
            type=type_str,
            tag=AbiType.ARRAY if suffix else scalar_tag,
            components=components,
            array_suffix=suffix,
        )

    @property
    def canonical_type(self) -> str:
        """Type as it appears in a canonical function signature"""
        if self.components:
            inner = ",".join(c.canonical_type for c in self.components)
            return f"({inner}){self.array_suffix}"
        base = self.type[: len(self.type) - len(self.array_suffix)]
        if base in ("uint", "int"):
            # bare aliases of the 256-bit types
            return f"{base}256{self.array_suffix}"
        return self.type


@dataclass(frozen=True)
class AbiFunction:
    """A contract function with its typed inputs and outputs"""

    name: str
    inputs: tuple[AbiParam, ...]
    outputs: tuple[AbiParam, ...]
    state_mutability: str = "view"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AbiFunction":
        name = data.get("name")
        if not isinstance(name, str) or not name:
            raise AbiError("ABI function entry without a name")
        return cls(
            name=name,
            inputs=tuple(AbiParam.from_dict(p) for p in data.get("inputs", [])),
            outputs=tuple(AbiParam.from_dict(p) for p in data.get("outputs", [])),
            state_mutability=data.get("stateMutability", "view"),
        )

    @property
    def input_types(self) -> list[str]:
        return [p.canonical_type for p in self.inputs]

    @property
    def output_types(self) -> list[str]:
        return [p.canonical_type for p in self.outputs]

    @property
    def signature(self) -> str:
        """Canonical signature, e.g. ``isOrderPaid(uint256,string)``"""
        return f"{self.name}({','.join(self.input_types)})"


class AbiRegistry:
    """Function name -> AbiFunction mapping, validated once at load time"""

    def __init__(self, functions: Iterable[AbiFunction]) -> None:
        self._functions: dict[str, AbiFunction] = {}
        for fn in functions:
            # Overloads are not addressable by name alone; the first one wins
            self._functions.setdefault(fn.name, fn)

    @classmethod
    def from_abi(cls, abi: Iterable[Mapping[str, Any]]) -> "AbiRegistry":
        """Build a registry from a JSON ABI list, skipping non-function entries"""
        if isinstance(abi, (str, bytes)) or not hasattr(abi, "__iter__"):
            raise AbiError("ABI document must be a list of entries")
        functions = []
        for entry in abi:
            if not isinstance(entry, Mapping):
                raise AbiError(f"Malformed ABI entry: {entry!r}")
            if entry.get("type", "function") == "function":
                functions.append(AbiFunction.from_dict(entry))
        return cls(functions)

    @classmethod
    def from_file(cls, path: str | Path) -> "AbiRegistry":
        """Load an ABI JSON document (a list, or an object with an "abi" key)"""
        try:
            document = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise AbiError(f"Failed to load ABI document {path}: {e}") from e
        if isinstance(document, dict):
            document = document.get("abi")
        return cls.from_abi(document)

    @classmethod
    def default(cls) -> "AbiRegistry":
        """Registry over the bundled PAYRA_ABI"""
        return cls.from_abi(PAYRA_ABI)

    @classmethod
    def load(cls, path: str | Path | None = None) -> "AbiRegistry":
        """Registry from the ABI document at ``path``, or the bundled one when unset"""
        if path:
            return cls.from_file(path)
        return cls.default()

    def get(self, name: str) -> AbiFunction:
        """Look up a function by name

        Raises:
            FunctionNotFoundError: If the function is not defined
        """
        try:
            return self._functions[name]
        except KeyError:
            raise FunctionNotFoundError(name) from None

    def __contains__(self, name: object) -> bool:
        return name in self._functions

    def names(self) -> list[str]:
        return list(self._functions)
