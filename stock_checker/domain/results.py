"""Domain-level results for a reconciliation run."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Mapping, Sequence

from .models import ReconciledRow, Tier


@dataclass(frozen=True)
class ReconciliationSummary:
    total_movements: int
    total_snapshot: int
    matched_keys: int
    tier_counts: Mapping[Tier, int]
    generated_at: datetime

    def count(self, tier: Tier) -> int:
        return self.tier_counts.get(tier, 0)


@dataclass(frozen=True)
class ReconciliationReport:
    summary: ReconciliationSummary
    rows: Sequence[ReconciledRow] = field(default_factory=tuple)

    def find(self, key: str) -> ReconciledRow | None:
        for row in self.rows:
            if row.key == key:
                return row
        return None
