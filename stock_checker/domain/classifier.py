"""Rule-based confidence that reported stock is physically present."""
from __future__ import annotations

import math
from dataclasses import dataclass

from .models import Expectation, Tier

NEAR_MATCH_DELTA = 5.0
RECENT_DAYS = 14.0
STALE_RECEIPT_DAYS = 90.0
STALE_COUNT_DAYS = 180.0
MAX_RATIONALE_LINES = 3

NO_STOCK_MESSAGE = "Reported SOH is 0 (no stock expected)."


@dataclass(frozen=True)
class ExpectationSignals:
    """Numeric evidence for one key; missing day counts are NaN."""

    reported: float
    expected: float
    delta: float
    days_since_count: float = math.nan
    days_since_sale: float = math.nan
    days_since_receipt: float = math.nan
    loss_sum: float = 0.0


def _defined(days: float) -> bool:
    return days is not None and math.isfinite(days)


class ExpectationClassifier:
    """Turns reconciliation signals into a tier and a short rationale.

    Every rule may append one rationale line and move the provisional tier by
    at most one step. Only the first three lines are kept.
    """

    def __init__(self, tolerance: float = 0.0) -> None:
        if tolerance < 0:
            raise ValueError("tolerance must be non-negative")
        self._tolerance = tolerance

    def classify(self, signals: ExpectationSignals) -> Expectation:
        if signals.reported <= 0:
            return Expectation(tier=Tier.NOT_APPLICABLE, rationale=NO_STOCK_MESSAGE)

        reasons: list[str] = []

        if abs(signals.delta) <= self._tolerance:
            reasons.append("Reported SOH matches movement replay (consistent).")
            tier = Tier.HIGH
        else:
            reasons.append(f"Reported SOH differs from movement replay by {signals.delta:.2f} (mismatch).")
            tier = Tier.MEDIUM if abs(signals.delta) <= NEAR_MATCH_DELTA else Tier.LOW

        receipt = signals.days_since_receipt
        if _defined(receipt) and receipt <= RECENT_DAYS:
            reasons.append("Recent receipt -> stock likely exists somewhere (backroom possible).")
            if tier is Tier.MEDIUM:
                tier = Tier.HIGH
        elif not _defined(receipt) or receipt > STALE_RECEIPT_DAYS:
            reasons.append("No recent receipts -> less likely to be in backroom.")
            tier = tier.capped(Tier.MEDIUM)

        if _defined(signals.days_since_sale) and signals.days_since_sale <= RECENT_DAYS:
            reasons.append("Recent sales -> item is active (stock movement ongoing).")

        if signals.loss_sum < 0:
            reasons.append(f"Write-down history ({signals.loss_sum:.2f}) -> higher chance of shrink / missing stock.")
            tier = tier.demoted()

        count = signals.days_since_count
        if not _defined(count):
            reasons.append("No count adjustment found -> confidence weaker.")
            tier = tier.capped(Tier.MEDIUM)
        elif count > STALE_COUNT_DAYS:
            reasons.append("Last count is old -> more uncertainty.")
            tier = tier.capped(Tier.MEDIUM)

        return Expectation(tier=tier, rationale=" ".join(reasons[:MAX_RATIONALE_LINES]))
