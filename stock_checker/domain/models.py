"""Domain models for the stock plausibility pipeline.

These dataclasses capture the canonical schema shared by the movement log,
the snapshot report and the reconciled output.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum


class Tier(IntEnum):
    """Confidence that the reported stock physically exists.

    Ordered so that the lowest confidence sorts first.
    """

    LOW = 0
    MEDIUM = 1
    HIGH = 2
    NOT_APPLICABLE = 3

    @property
    def label(self) -> str:
        return "N/A" if self is Tier.NOT_APPLICABLE else self.name

    def demoted(self) -> "Tier":
        if self is Tier.NOT_APPLICABLE:
            return self
        return Tier(max(self.value - 1, Tier.LOW.value))

    def capped(self, ceiling: "Tier") -> "Tier":
        if self is Tier.NOT_APPLICABLE:
            return self
        return Tier(min(self.value, ceiling.value))


@dataclass(frozen=True)
class MovementRecord:
    """One cleaned row of the stock movement log."""

    plant: str
    material: str
    material_description: str
    storage_location: str
    movement_type: str
    movement_type_text: str
    posting_date: datetime | None
    posted_at: datetime | None
    quantity: float
    key: str
    lineage: str | None = None


@dataclass(frozen=True)
class SnapshotRecord:
    """Reported stock on hand recovered from one block of the snapshot report."""

    plant: str
    material: str
    storage_location: str
    description: str
    on_hand: float
    key: str
    lineage: str | None = None


@dataclass(frozen=True)
class LastEvent:
    category: str
    posted_at: datetime
    quantity: float
    movement_type: str
    movement_type_text: str


@dataclass(frozen=True)
class EventCategory:
    """Named group of movement type codes, e.g. all receipts."""

    name: str
    movement_types: frozenset[str]

    def matches(self, movement_type: str) -> bool:
        return movement_type in self.movement_types


@dataclass(frozen=True)
class Expectation:
    tier: Tier
    rationale: str


@dataclass(frozen=True)
class ReconciledRow:
    """A snapshot record joined with its movement history and verdict."""

    snapshot: SnapshotRecord
    expected: float
    delta: float
    last_count: LastEvent | None
    last_sale: LastEvent | None
    last_receipt: LastEvent | None
    days_since_count: float
    days_since_sale: float
    days_since_receipt: float
    loss_sum: float
    tier: Tier
    rationale: str

    @property
    def key(self) -> str:
        return self.snapshot.key

    @property
    def plant(self) -> str:
        return self.snapshot.plant

    @property
    def material(self) -> str:
        return self.snapshot.material

    @property
    def storage_location(self) -> str:
        return self.snapshot.storage_location

    @property
    def description(self) -> str:
        return self.snapshot.description

    @property
    def reported(self) -> float:
        return self.snapshot.on_hand
