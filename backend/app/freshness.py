from __future__ import annotations

import enum
from dataclasses import dataclass


class Freshness(enum.Enum):
    EMPTY = "EMPTY"
    FRESH = "FRESH"
    STALE_OK = "STALE_OK"
    EXPIRED = "EXPIRED"


def classify(age: float | None, refresh_window: float, stale_tolerance: float) -> Freshness:
    """Classify a cache entry by its age in seconds (``None`` means no entry).

    FRESH entries are served without a network call, STALE_OK entries trigger
    a live refresh but remain a valid fallback, EXPIRED entries are no longer
    acceptable even as a fallback.
    """
    if age is None:
        return Freshness.EMPTY
    if age < refresh_window:
        return Freshness.FRESH
    if age <= stale_tolerance:
        return Freshness.STALE_OK
    return Freshness.EXPIRED


@dataclass(frozen=True)
class FreshnessPolicy:
    refresh_window: float = 10.0
    stale_tolerance: float = 300.0

    def __post_init__(self) -> None:
        if self.refresh_window < 0 or self.stale_tolerance < self.refresh_window:
            raise ValueError("stale_tolerance must be >= refresh_window >= 0")

    def state(self, age: float | None) -> Freshness:
        return classify(age, self.refresh_window, self.stale_tolerance)

    def is_fresh(self, age: float | None) -> bool:
        return self.state(age) is Freshness.FRESH

    def servable_stale(self, age: float | None) -> bool:
        """Whether an entry of this age may still answer a failed live fetch."""
        return self.state(age) in (Freshness.FRESH, Freshness.STALE_OK)
