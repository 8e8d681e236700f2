"""Salary conversion from BRL into USD and EUR."""
from __future__ import annotations

import logging
import math
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Callable, Dict, Optional, Tuple

from .client import RateSourceClient
from .rates import RateCache, RateSnapshot, fallback_snapshot

logger = logging.getLogger(__name__)

_CENT = Decimal("0.01")
# enough digits for any finite float quantized to cents
_PRECISION = 400

# code -> (thousands sep, decimal sep, layout)
_DISPLAY_FORMATS: Dict[str, Tuple[str, str, str]] = {
    "BRL": (".", ",", "R$\u00a0{}"),  # pt-BR
    "USD": (",", ".", "${}"),  # en-US
    "EUR": (".", ",", "{}\u00a0€"),  # de-DE
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def round2(value: float) -> float:
    """Round to cents, halves away from zero (2.675 -> 2.68, -0.005 -> -0.01).

    Raises:
        ValueError: if ``value`` is infinite or NaN.
    """
    if not math.isfinite(value):
        raise ValueError(f"Cannot round non-finite amount: {value!r}")
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        return float(Decimal(repr(value)).quantize(_CENT, rounding=ROUND_HALF_UP))


def format_display(amount: float, currency: str) -> str:
    """Render ``amount`` the way its home locale shows money."""
    code = currency.upper()
    if code not in _DISPLAY_FORMATS:
        raise ValueError(f"Unsupported currency: {currency}")
    thousands, decimal_sep, layout = _DISPLAY_FORMATS[code]

    rounded = round2(amount)
    number = f"{abs(rounded):,.2f}"
    number = number.replace(",", "\0").replace(".", decimal_sep).replace("\0", thousands)
    sign = "-" if rounded < 0 else ""
    return sign + layout.format(number)


@dataclass(frozen=True, slots=True)
class ConvertedSalary:
    usd: float
    eur: float


class CurrencyConverter:
    """Converts base-currency amounts using cached rates.

    Rates are served from ``cache`` while fresh. When stale, one fetch is
    attempted; if it fails the fallback rates are cached for a full window
    so a dead rate source is not retried on every call.
    """

    def __init__(
        self,
        client: RateSourceClient,
        cache: Optional[RateCache] = None,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.client = client
        self.cache = cache if cache is not None else RateCache()
        self.clock = clock
        self._refresh_lock = threading.Lock()

    def get_rates(self) -> RateSnapshot:
        snapshot = self.cache.get(self.clock())
        if snapshot is not None:
            return snapshot

        with self._refresh_lock:
            # Another caller may have refreshed while we waited.
            now = self.clock()
            snapshot = self.cache.get(now)
            if snapshot is not None:
                return snapshot

            result = self.client.fetch(now)
            if result.ok:
                snapshot = result.snapshot
            else:
                logger.warning(
                    f"[Rates] Fetch failed, using fallback rates: {result.error}"
                )
                snapshot = fallback_snapshot(now)
            self.cache.put(snapshot)
            return snapshot

    def convert(self, amount_base: float) -> ConvertedSalary:
        rates = self.get_rates()
        return ConvertedSalary(
            usd=round2(amount_base / rates.usd),
            eur=round2(amount_base / rates.eur),
        )
