"""Domain services joining the snapshot report with the movement replay."""
from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime
from typing import Sequence

from .classifier import ExpectationClassifier, ExpectationSignals
from .models import EventCategory, MovementRecord, ReconciledRow, SnapshotRecord
from .replay import COUNT, LOSS_MOVEMENT_TYPE, RECEIPT, SALE, MovementReplay, days_since
from .results import ReconciliationReport, ReconciliationSummary

logger = logging.getLogger(__name__)


def _sort_key(row: ReconciledRow) -> tuple[int, int, float]:
    in_stock = 0 if row.reported > 0 else 1
    return (in_stock, int(row.tier), -row.reported)


def sort_rows(rows: Sequence[ReconciledRow]) -> list[ReconciledRow]:
    """Stock on hand first, then lowest confidence, then largest quantity."""
    return sorted(rows, key=_sort_key)


def count_matched_keys(movements: Sequence[MovementRecord], snapshot: Sequence[SnapshotRecord]) -> int:
    return len({record.key for record in movements} & {record.key for record in snapshot})


class StockReconciler:
    """Rates every snapshot key against the replayed movement history."""

    def __init__(
        self,
        classifier: ExpectationClassifier | None = None,
        count: EventCategory = COUNT,
        sale: EventCategory = SALE,
        receipt: EventCategory = RECEIPT,
        loss_movement_type: str = LOSS_MOVEMENT_TYPE,
    ) -> None:
        self._classifier = classifier or ExpectationClassifier()
        self._categories = (count, sale, receipt)
        self._loss_movement_type = loss_movement_type

    def reconcile(
        self,
        movements: Sequence[MovementRecord],
        snapshot: Sequence[SnapshotRecord],
        as_of: datetime | None = None,
    ) -> ReconciliationReport:
        now = as_of or datetime.now()
        count, sale, receipt = self._categories
        replay = MovementReplay(movements, count, sale, receipt, self._loss_movement_type)

        rows = sort_rows([self._reconcile_record(record, replay, now) for record in snapshot])
        matched = count_matched_keys(movements, snapshot)
        logger.info("Keys matched between movement log and snapshot: %d", matched)

        summary = ReconciliationSummary(
            total_movements=len(movements),
            total_snapshot=len(snapshot),
            matched_keys=matched,
            tier_counts=dict(Counter(row.tier for row in rows)),
            generated_at=now,
        )
        return ReconciliationReport(summary=summary, rows=tuple(rows))

    def _reconcile_record(self, record: SnapshotRecord, replay: MovementReplay, now: datetime) -> ReconciledRow:
        expected = replay.expected_for(record.key)
        delta = record.on_hand - expected
        events = replay.events_for(record.key)
        last_count, last_sale, last_receipt = events["count"], events["sale"], events["receipt"]

        signals = ExpectationSignals(
            reported=record.on_hand,
            expected=expected,
            delta=delta,
            days_since_count=days_since(last_count.posted_at if last_count else None, now),
            days_since_sale=days_since(last_sale.posted_at if last_sale else None, now),
            days_since_receipt=days_since(last_receipt.posted_at if last_receipt else None, now),
            loss_sum=replay.loss_for(record.key),
        )
        expectation = self._classifier.classify(signals)

        return ReconciledRow(
            snapshot=record,
            expected=expected,
            delta=delta,
            last_count=last_count,
            last_sale=last_sale,
            last_receipt=last_receipt,
            days_since_count=signals.days_since_count,
            days_since_sale=signals.days_since_sale,
            days_since_receipt=signals.days_since_receipt,
            loss_sum=signals.loss_sum,
            tier=expectation.tier,
            rationale=expectation.rationale,
        )
