"""HTTP client for the HG Brasil finance endpoint."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

import requests

from .rates import RateSnapshot

logger = logging.getLogger(__name__)

DEFAULT_URL = "https://api.hgbrasil.com/finance"


@dataclass(frozen=True, slots=True)
class RateFetchResult:
    """Outcome of one fetch: a snapshot on success, an error message otherwise."""

    snapshot: Optional[RateSnapshot] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.snapshot is not None


def _buy_rate(currencies: Dict[str, Any], code: str) -> float:
    value = currencies[code]["buy"]
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ValueError(f"{code} buy rate is not a positive number: {value!r}")
    return float(value)


def parse_rates_payload(payload: Any, fetched_at: datetime) -> RateSnapshot:
    """Build a snapshot from a decoded response body.

    Raises:
        ValueError: if the payload is unsuccessful or missing rates.
    """
    if not isinstance(payload, dict):
        raise ValueError("Response body is not a JSON object")
    if payload.get("success") is not True:
        raise ValueError("Rate source reported success=false")
    try:
        currencies = payload["results"]["currencies"]
        return RateSnapshot(
            usd=_buy_rate(currencies, "USD"),
            eur=_buy_rate(currencies, "EUR"),
            fetched_at=fetched_at,
        )
    except (KeyError, TypeError) as exc:
        raise ValueError(f"Missing rate field: {exc}") from exc


class RateSourceClient:
    """Very small wrapper around the finance quote endpoint."""

    def __init__(
        self,
        *,
        url: str = DEFAULT_URL,
        api_key: str = "",
        timeout_seconds: float = 10,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.url = url
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds
        self.session = session or requests.Session()

    def fetch(self, now: datetime) -> RateFetchResult:
        """Fetch USD and EUR buy rates. Never raises."""
        params = {"format": "json-cors", "key": self.api_key}
        try:
            response = self.session.get(
                self.url, params=params, timeout=self.timeout_seconds
            )
        except requests.RequestException as exc:
            return RateFetchResult(error=f"Request failed: {exc}")

        if response.status_code != 200:
            return RateFetchResult(error=f"HTTP {response.status_code}")

        try:
            snapshot = parse_rates_payload(response.json(), now)
        except ValueError as exc:
            # requests' JSONDecodeError is a ValueError too
            return RateFetchResult(error=str(exc))

        logger.debug(f"[Rates] Fetched USD={snapshot.usd} EUR={snapshot.eur}")
        return RateFetchResult(snapshot=snapshot)
