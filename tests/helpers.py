from __future__ import annotations

from datetime import datetime

from stock_checker.domain.identity import make_key
from stock_checker.domain.models import MovementRecord, SnapshotRecord

PLANT = "1000"
MATERIAL = "000123"
SLOC = "0001"
KEY = make_key(PLANT, MATERIAL, SLOC)


def make_movement(
    quantity: float,
    movement_type: str = "101",
    posted_at: datetime | None = datetime(2024, 1, 1),
    material: str = MATERIAL,
    text: str = "",
) -> MovementRecord:
    return MovementRecord(
        plant=PLANT,
        material=material,
        material_description="Widget",
        storage_location=SLOC,
        movement_type=movement_type,
        movement_type_text=text,
        posting_date=posted_at,
        posted_at=posted_at,
        quantity=quantity,
        key=make_key(PLANT, material, SLOC),
    )


def make_snapshot(on_hand: float, material: str = MATERIAL, description: str = "Widget") -> SnapshotRecord:
    return SnapshotRecord(
        plant=PLANT,
        material=material,
        storage_location=SLOC,
        description=description,
        on_hand=on_hand,
        key=make_key(PLANT, material, SLOC),
    )


def movement_row(**overrides: object) -> dict[str, object]:
    row: dict[str, object] = {
        "Plant": 1000,
        "Material": 123,
        "Material Description": "Widget",
        "Storage Location": 1,
        "Movement Type": "101",
        "Movement Type Text": "GR goods receipt",
        "Posting Date": "2024-01-10",
        "Time of Entry": "08:00:00",
        "Qty in unit of entry": "10",
    }
    row.update(overrides)
    return row
