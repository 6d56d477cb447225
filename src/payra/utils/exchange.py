"""
Fiat exchange rates (ExchangeRate-API) with a TTL file cache
"""

import json
import logging
import os
import tempfile
import time
from pathlib import Path
from typing import Any, Callable

import httpx

from payra.config import DEFAULT_EXCHANGE_RATE_CACHE_TTL, PayraConfig
from payra.exceptions import ConfigurationError, ExchangeRateError

logger = logging.getLogger(__name__)

EXCHANGE_RATE_API_URL = "https://v6.exchangerate-api.com/v6/{api_key}/latest/USD"
DEFAULT_CACHE_FILE = Path(tempfile.gettempdir()) / "payra_exchange_rates.json"


class ExchangeRateClient:
    """
    USD conversion rates with a file cache.

    The whole ``latest/USD`` response is cached together with its fetch time
    and reused until it is ``ttl`` seconds old.
    """

    def __init__(
        self,
        api_key: str | None,
        cache_file: str | Path | None = None,
        ttl: int = DEFAULT_EXCHANGE_RATE_CACHE_TTL,
        timeout: float = 10.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._api_key = api_key
        self._cache_file = Path(cache_file) if cache_file else DEFAULT_CACHE_FILE
        self._ttl = ttl
        self._timeout = timeout
        self._clock = clock

    @classmethod
    def from_config(cls, config: PayraConfig) -> "ExchangeRateClient":
        return cls(
            api_key=config.exchange_rate_api_key,
            cache_file=config.exchange_rate_cache_file,
            ttl=config.exchange_rate_cache_ttl,
        )

    def convert_to_usd(self, amount: float, currency: str) -> float:
        """Convert ``amount`` in ``currency`` to USD, rounded to cents"""
        currency = currency.strip().upper()
        rates = self.get_rates()
        rate = rates.get(currency)
        if not rate:
            raise ExchangeRateError(f"Conversion rate for {currency} not found in API response.")
        return round(amount / float(rate), 2)

    def get_rates(self) -> dict[str, Any]:
        """``conversion_rates`` from cache if fresh, otherwise from the API"""
        data = self._read_cache()
        if data is None:
            data = self._fetch()
            self._write_cache(data)
        rates = data.get("conversion_rates")
        if not isinstance(rates, dict):
            raise ExchangeRateError("ExchangeRate API response has no conversion_rates")
        return rates

    def _fetch(self) -> dict[str, Any]:
        if not self._api_key:
            raise ConfigurationError("EXCHANGE_RATE_API_KEY is not set")
        url = EXCHANGE_RATE_API_URL.format(api_key=self._api_key)
        try:
            response = httpx.get(url, timeout=self._timeout)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise ExchangeRateError(f"Failed to connect to ExchangeRate API: {e}") from e
        if not isinstance(data, dict):
            raise ExchangeRateError("Unexpected ExchangeRate API response")
        logger.info("Fetched exchange rates (base USD)")
        return data

    def _read_cache(self) -> dict[str, Any] | None:
        try:
            entry = json.loads(self._cache_file.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable exchange rate cache %s: %s", self._cache_file, e)
            return None

        fetched_at = entry.get("fetched_at") if isinstance(entry, dict) else None
        if not isinstance(fetched_at, (int, float)):
            return None
        if self._clock() - fetched_at >= self._ttl:
            logger.debug("Exchange rate cache expired")
            return None
        data = entry.get("data")
        return data if isinstance(data, dict) else None

    def _write_cache(self, data: dict[str, Any]) -> None:
        entry = {"fetched_at": self._clock(), "data": data}
        tmp = self._cache_file.with_suffix(self._cache_file.suffix + ".tmp")
        try:
            self._cache_file.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(entry), encoding="utf-8")
            os.replace(tmp, self._cache_file)
        except OSError as e:
            # non-fatal
            logger.warning("Could not write exchange rate cache %s: %s", self._cache_file, e)
