"""
Token unit helpers: decimals lookup and wei conversion
"""

from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal, InvalidOperation

from payra.config import PayraConfig

DEFAULT_DECIMALS = 18

_DEFAULT_TOKEN_DECIMALS: dict[str, int] = {
    "POLYGON_USDT": 6,
    "POLYGON_USDC": 6,
}


def get_token_decimals(network: str, symbol: str, config: PayraConfig | None = None) -> int:
    """Decimals for a token: PAYRA_<NETWORK>_<SYMBOL>_DECIMALS, built-in default, else 18"""
    key = f"{network}_{symbol}".strip().upper()
    if config is not None and key in config.token_decimals:
        return config.token_decimals[key]
    return _DEFAULT_TOKEN_DECIMALS.get(key, DEFAULT_DECIMALS)


def to_wei(
    amount: str | int | float | Decimal,
    network: str,
    symbol: str,
    config: PayraConfig | None = None,
) -> str:
    """Convert a human amount to the token's smallest unit, truncating extra digits"""
    decimals = get_token_decimals(network, symbol, config)
    value = _to_decimal(amount) * (Decimal(10) ** decimals)
    return str(value.quantize(Decimal(1), rounding=ROUND_DOWN))


def from_wei(
    amount_wei: str | int,
    network: str,
    symbol: str,
    precision: int = 2,
    config: PayraConfig | None = None,
) -> str:
    """Convert a smallest-unit amount to a human amount with ``precision`` decimals"""
    decimals = get_token_decimals(network, symbol, config)
    value = _to_decimal(amount_wei) / (Decimal(10) ** decimals)
    return f"{value.quantize(Decimal(1).scaleb(-precision), rounding=ROUND_HALF_UP):f}"


def _to_decimal(amount: str | int | float | Decimal) -> Decimal:
    try:
        # str() first so floats convert by their shortest repr (0.1 -> "0.1")
        value = Decimal(str(amount).strip())
    except InvalidOperation as e:
        raise ValueError(f"Invalid amount: {amount!r}") from e
    if not value.is_finite():
        raise ValueError(f"Invalid amount: {amount!r}")
    return value
