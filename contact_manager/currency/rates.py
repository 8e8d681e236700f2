"""Exchange rate snapshot and its freshness cache."""
from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, Optional

# BRL per unit, used when the rate source cannot be reached.
FALLBACK_USD_RATE = 5.50
FALLBACK_EUR_RATE = 6.00

DEFAULT_TTL = timedelta(minutes=30)


@dataclass(frozen=True, slots=True)
class RateSnapshot:
    """Buy rates (base currency per unit) captured at ``fetched_at``."""

    usd: float
    eur: float
    fetched_at: datetime
    fallback: bool = False

    def to_dict(self) -> Dict[str, object]:
        return {
            "usd": self.usd,
            "eur": self.eur,
            "fetchedAt": self.fetched_at.isoformat(),
            "fallback": self.fallback,
        }


def fallback_snapshot(now: datetime) -> RateSnapshot:
    return RateSnapshot(
        usd=FALLBACK_USD_RATE,
        eur=FALLBACK_EUR_RATE,
        fetched_at=now,
        fallback=True,
    )


class RateCache:
    """Single-slot cache; a snapshot is served until it is older than ``ttl``."""

    def __init__(self, ttl: timedelta = DEFAULT_TTL) -> None:
        self.ttl = ttl
        self._snapshot: Optional[RateSnapshot] = None
        self._lock = threading.Lock()

    def get(self, now: datetime) -> Optional[RateSnapshot]:
        """Return the cached snapshot if still fresh at ``now``."""
        with self._lock:
            snapshot = self._snapshot
        if snapshot is None or now - snapshot.fetched_at >= self.ttl:
            return None
        return snapshot

    def put(self, snapshot: RateSnapshot) -> None:
        with self._lock:
            self._snapshot = snapshot

    def invalidate(self) -> None:
        with self._lock:
            self._snapshot = None

    def peek(self) -> Optional[RateSnapshot]:
        """Cached snapshot regardless of age."""
        with self._lock:
            return self._snapshot
