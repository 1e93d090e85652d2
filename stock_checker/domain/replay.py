"""Replay of the movement log into expected stock and last-event facts."""
from __future__ import annotations

import logging
import math
from collections import defaultdict
from datetime import datetime
from typing import Iterable, Mapping, Sequence

from .models import EventCategory, LastEvent, MovementRecord

logger = logging.getLogger(__name__)

COUNT = EventCategory("count", frozenset({"701", "702"}))
SALE = EventCategory("sale", frozenset({"251", "601"}))
RECEIPT = EventCategory("receipt", frozenset({"101"}))

# Physical inventory write-down; the negative half of COUNT.
LOSS_MOVEMENT_TYPE = "702"

SECONDS_PER_DAY = 86400.0


def expected_on_hand(records: Iterable[MovementRecord]) -> dict[str, float]:
    """Sum every signed movement quantity per key."""
    totals: dict[str, float] = defaultdict(float)
    for record in records:
        totals[record.key] += record.quantity or 0.0
    return dict(totals)


def last_events(records: Sequence[MovementRecord], category: EventCategory) -> dict[str, LastEvent]:
    """Return the latest event of ``category`` per key.

    Only a strictly later timestamp replaces the current candidate, so the
    first of several simultaneous events wins.
    """
    latest: dict[str, MovementRecord] = {}
    for record in records:
        if not category.matches(record.movement_type):
            continue
        if record.posted_at is None:
            continue
        current = latest.get(record.key)
        if current is None or current.posted_at < record.posted_at:
            latest[record.key] = record

    return {
        key: LastEvent(
            category=category.name,
            posted_at=record.posted_at,
            quantity=record.quantity,
            movement_type=record.movement_type,
            movement_type_text=record.movement_type_text,
        )
        for key, record in latest.items()
    }


def loss_sums(records: Iterable[MovementRecord], loss_movement_type: str = LOSS_MOVEMENT_TYPE) -> dict[str, float]:
    """Sum write-down quantities per key; every key of the log is present."""
    totals: dict[str, float] = {}
    for record in records:
        totals.setdefault(record.key, 0.0)
        if record.movement_type == loss_movement_type:
            totals[record.key] += record.quantity or 0.0
    return totals


def days_since(moment: datetime | None, now: datetime) -> float:
    if moment is None:
        return math.nan
    return (now - moment).total_seconds() / SECONDS_PER_DAY


class MovementReplay:
    """Precomputed replay facts for one movement log."""

    def __init__(
        self,
        records: Sequence[MovementRecord],
        count: EventCategory = COUNT,
        sale: EventCategory = SALE,
        receipt: EventCategory = RECEIPT,
        loss_movement_type: str = LOSS_MOVEMENT_TYPE,
    ) -> None:
        self.expected = expected_on_hand(records)
        self.last_count = last_events(records, count)
        self.last_sale = last_events(records, sale)
        self.last_receipt = last_events(records, receipt)
        self.losses = loss_sums(records, loss_movement_type)
        self.keys = frozenset(record.key for record in records)
        logger.info(
            "Replayed %d movements over %d keys (%d counted, %d sold, %d received)",
            len(records),
            len(self.keys),
            len(self.last_count),
            len(self.last_sale),
            len(self.last_receipt),
        )

    def expected_for(self, key: str) -> float:
        return self.expected.get(key, 0.0)

    def loss_for(self, key: str) -> float:
        return self.losses.get(key, 0.0)

    def events_for(self, key: str) -> Mapping[str, LastEvent | None]:
        return {
            "count": self.last_count.get(key),
            "sale": self.last_sale.get(key),
            "receipt": self.last_receipt.get(key),
        }
