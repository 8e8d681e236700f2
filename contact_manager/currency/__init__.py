"""Exchange rates and salary conversion."""
from .rates import (
    DEFAULT_TTL,
    FALLBACK_EUR_RATE,
    FALLBACK_USD_RATE,
    RateCache,
    RateSnapshot,
    fallback_snapshot,
)
from .client import RateFetchResult, RateSourceClient, parse_rates_payload
from .converter import ConvertedSalary, CurrencyConverter, format_display, round2

__all__ = [
    "DEFAULT_TTL",
    "FALLBACK_EUR_RATE",
    "FALLBACK_USD_RATE",
    "RateCache",
    "RateSnapshot",
    "fallback_snapshot",
    "RateFetchResult",
    "RateSourceClient",
    "parse_rates_payload",
    "ConvertedSalary",
    "CurrencyConverter",
    "format_display",
    "round2",
]
