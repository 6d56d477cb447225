"""
Payra Network Configuration

Per-network credentials, RPC endpoints and contract addresses, built once per
process from environment variables (optionally seeded from a .env file) and
injected into every component.
"""

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

from dotenv import dotenv_values

from payra.exceptions import ConfigurationError, MissingCredentialsError, UnsupportedNetworkError

logger = logging.getLogger(__name__)

DEFAULT_RPC_TIMEOUT = 5.0
DEFAULT_EXCHANGE_RATE_CACHE_TTL = 3600

_NETWORK_KEY_RE = re.compile(
    r"^PAYRA_(?P<network>[A-Z0-9_]+?)_"
    r"(?P<field>PRIVATE_KEY|MERCHANT_ID|CORE_FORWARD_CONTRACT_ADDRESS"
    r"|OCP_GATEWAY_CONTRACT_ADDRESS|RPC_URL_(?P<index>[0-9]+))$"
)
_DECIMALS_KEY_RE = re.compile(r"^PAYRA_(?P<key>[A-Z0-9_]+)_DECIMALS$")


def normalize_network(name: str) -> str:
    """Normalize a network name for configuration lookup ("polygon" -> "POLYGON")"""
    if not isinstance(name, str) or not name.strip():
        raise UnsupportedNetworkError("Network name is required")
    return name.strip().upper()


@dataclass(frozen=True)
class NetworkSettings:
    """Configuration of a single network"""

    name: str
    private_key: str | None = field(default=None, repr=False)
    merchant_id: int | None = None
    rpc_urls: tuple[str, ...] = ()
    forward_address: str | None = None
    gateway_address: str | None = None

    def require_signing(self) -> tuple[int, str]:
        """Return (merchant_id, private_key) or raise MissingCredentialsError"""
        if self.merchant_id is None or not self.private_key:
            raise MissingCredentialsError(self.name)
        return self.merchant_id, self.private_key

    def require_query(self) -> tuple[int, str, tuple[str, ...]]:
        """Return (merchant_id, forward_address, rpc_urls) or raise ConfigurationError"""
        if not self.rpc_urls:
            raise ConfigurationError(f"No RPC URLs found for network: {self.name}")
        if self.merchant_id is None or not self.forward_address:
            raise ConfigurationError(
                f"Missing merchant ID or forward contract address for network: {self.name}"
            )
        return self.merchant_id, self.forward_address, self.rpc_urls


@dataclass(frozen=True)
class PayraConfig:
    """Process-wide, read-only Payra configuration"""

    networks: Mapping[str, NetworkSettings] = field(default_factory=dict)
    token_decimals: Mapping[str, int] = field(default_factory=dict)
    rpc_timeout: float = DEFAULT_RPC_TIMEOUT
    exchange_rate_api_key: str | None = field(default=None, repr=False)
    exchange_rate_cache_file: str | None = None
    exchange_rate_cache_ttl: int = DEFAULT_EXCHANGE_RATE_CACHE_TTL
    abi_file: str | None = None

    def network(self, name: str) -> NetworkSettings:
        """Get settings for a network (case-insensitive)

        Raises:
            UnsupportedNetworkError: If the network is not configured at all
        """
        key = normalize_network(name)
        settings = self.networks.get(key)
        if settings is None:
            raise UnsupportedNetworkError(f"Unsupported network: {key}")
        return settings

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        dotenv_path: str | Path | None = None,
    ) -> "PayraConfig":
        """Build configuration from environment variables.

        Values from ``dotenv_path`` are loaded first; variables already present
        in ``environ`` take precedence over them.

        Args:
            environ: Variable mapping (default: os.environ)
            dotenv_path: Optional .env file to seed values from

        Returns:
            PayraConfig instance
        """
        values: dict[str, str] = {}
        if dotenv_path is not None:
            values.update(
                {k: v for k, v in dotenv_values(dotenv_path).items() if v is not None}
            )
        values.update(os.environ if environ is None else environ)
        return cls.from_mapping(values)

    @classmethod
    def from_mapping(cls, values: Mapping[str, str]) -> "PayraConfig":
        """Build configuration from an already merged key/value mapping"""
        raw: dict[str, dict[str, str]] = {}
        urls: dict[str, dict[int, str]] = {}
        decimals: dict[str, int] = {}

        for key, value in values.items():
            if value is None:
                continue
            match = _NETWORK_KEY_RE.match(key)
            if match:
                network = match.group("network")
                if match.group("index") is not None:
                    urls.setdefault(network, {})[int(match.group("index"))] = value.strip()
                else:
                    raw.setdefault(network, {})[match.group("field")] = value.strip()
                continue
            match = _DECIMALS_KEY_RE.match(key)
            if match:
                decimals[match.group("key")] = _parse_int(key, value)

        networks = {}
        for name in sorted(set(raw) | set(urls)):
            fields = raw.get(name, {})
            merchant_id = fields.get("MERCHANT_ID")
            networks[name] = NetworkSettings(
                name=name,
                private_key=fields.get("PRIVATE_KEY") or None,
                merchant_id=_parse_int(f"PAYRA_{name}_MERCHANT_ID", merchant_id)
                if merchant_id
                else None,
                rpc_urls=_contiguous_urls(urls.get(name, {})),
                forward_address=fields.get("CORE_FORWARD_CONTRACT_ADDRESS") or None,
                gateway_address=fields.get("OCP_GATEWAY_CONTRACT_ADDRESS") or None,
            )
            logger.debug(
                "Loaded network %s: %d RPC URL(s), forwarder=%s",
                name,
                len(networks[name].rpc_urls),
                networks[name].forward_address,
            )

        timeout = values.get("PAYRA_RPC_TIMEOUT")
        ttl = values.get("PAYRA_EXCHANGE_RATE_CACHE_TTL")
        return cls(
            networks=networks,
            token_decimals=decimals,
            rpc_timeout=_parse_float("PAYRA_RPC_TIMEOUT", timeout) if timeout else DEFAULT_RPC_TIMEOUT,
            exchange_rate_api_key=values.get("EXCHANGE_RATE_API_KEY") or None,
            exchange_rate_cache_file=values.get("PAYRA_EXCHANGE_RATE_CACHE_FILE") or None,
            exchange_rate_cache_ttl=_parse_int("PAYRA_EXCHANGE_RATE_CACHE_TTL", ttl)
            if ttl
            else DEFAULT_EXCHANGE_RATE_CACHE_TTL,
            abi_file=(values.get("PAYRA_ABI_FILE") or "").strip() or None,
        )


def _contiguous_urls(indexed: dict[int, str]) -> tuple[str, ...]:
    """RPC_URL_1..RPC_URL_N, stopping at the first gap or empty value"""
    result = []
    i = 1
    while indexed.get(i):
        result.append(indexed[i])
        i += 1
    return tuple(result)


def _parse_int(key: str, value: str) -> int:
    text = value.strip()
    if not text.isdigit():
        raise ConfigurationError(f"{key} must be a non-negative integer, got {value!r}")
    return int(text)


def _parse_float(key: str, value: str) -> float:
    try:
        parsed = float(value)
    except ValueError as e:
        raise ConfigurationError(f"{key} must be a number, got {value!r}") from e
    if parsed <= 0:
        raise ConfigurationError(f"{key} must be positive, got {value!r}")
    return parsed
