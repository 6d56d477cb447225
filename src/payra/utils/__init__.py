"""
Payra Utility Functions
"""

from payra.utils.exchange import ExchangeRateClient
from payra.utils.units import from_wei, get_token_decimals, to_wei

__all__ = [
    "ExchangeRateClient",
    "from_wei",
    "get_token_decimals",
    "to_wei",
]
