"""Application-level DTOs for stock reconciliation."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from stock_checker.domain.models import MovementRecord, SnapshotRecord
from stock_checker.domain.results import ReconciliationReport


@dataclass(slots=True, frozen=True)
class ReconciliationResponse:
    report: ReconciliationReport
    movements: Sequence[MovementRecord]
    snapshot: Sequence[SnapshotRecord]

    @property
    def matched_keys(self) -> int:
        return self.report.summary.matched_keys
