"""Repository interfaces anchoring the domain layer."""
from __future__ import annotations

from typing import Protocol, Sequence

from .models import MovementRecord, SnapshotRecord


class MovementLogRepository(Protocol):
    """Provides cleaned, time-ordered stock movements."""

    def list_movements(self) -> Sequence[MovementRecord]:
        ...


class SnapshotRepository(Protocol):
    """Provides reported stock on hand, one record per key."""

    def list_snapshot(self) -> Sequence[SnapshotRecord]:
        ...
