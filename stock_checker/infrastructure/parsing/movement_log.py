"""Movement log (MB51 export) cleaner producing canonical movement records."""
from __future__ import annotations

import logging
from typing import Iterable, Mapping, Sequence

from stock_checker.domain.errors import SchemaError
from stock_checker.domain.identity import (
    make_key,
    normalize_integerish,
    normalize_material,
    normalize_storage_location,
)
from stock_checker.domain.models import MovementRecord
from stock_checker.infrastructure.parsing.utils import (
    UNIX_EPOCH,
    cell_text,
    combine_date_time,
    parse_date_cell,
    parse_quantity,
    parse_time_to_ms,
)

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = [
    "Plant",
    "Material",
    "Material Description",
    "Storage Location",
    "Movement Type",
    "Movement Type Text",
    "Posting Date",
    "Time of Entry",
    "Qty in unit of entry",
]


def missing_columns(columns: Iterable[object]) -> list[str]:
    present = {str(column).strip() for column in columns}
    return [column for column in REQUIRED_COLUMNS if column not in present]


def _trim_keys(row: Mapping[object, object]) -> dict[str, object]:
    return {str(name).strip(): value for name, value in row.items()}


def _timeline_position(record: MovementRecord) -> float:
    if record.posted_at is None:
        return 0.0
    return (record.posted_at - UNIX_EPOCH).total_seconds()


def clean_movement_row(
    row: Mapping[object, object],
    material_pad_width: int = 0,
    storage_location_pad_width: int = 4,
    lineage: str | None = None,
) -> MovementRecord:
    cells = _trim_keys(row)
    plant = normalize_integerish(cells.get("Plant"))
    material = normalize_material(cells.get("Material"), material_pad_width)
    storage_location = normalize_storage_location(cells.get("Storage Location"), storage_location_pad_width)

    posting_date = parse_date_cell(cells.get("Posting Date"))
    posted_at = combine_date_time(posting_date, parse_time_to_ms(cells.get("Time of Entry")))

    return MovementRecord(
        plant=plant,
        material=material,
        material_description=cell_text(cells.get("Material Description")).strip(),
        storage_location=storage_location,
        movement_type=normalize_integerish(cells.get("Movement Type")),
        movement_type_text=cell_text(cells.get("Movement Type Text")).strip(),
        posting_date=posting_date,
        posted_at=posted_at,
        quantity=parse_quantity(cells.get("Qty in unit of entry")),
        key=make_key(plant, material, storage_location),
        lineage=lineage,
    )


def clean_movement_log(
    rows: Sequence[Mapping[object, object]],
    material_pad_width: int = 0,
    storage_location_pad_width: int = 4,
    columns: Iterable[object] | None = None,
) -> list[MovementRecord]:
    """Validate the log header and return records ordered by key, then time.

    Raises:
        SchemaError: if any required column is absent; all of them are listed.
    """
    if columns is None:
        columns = rows[0].keys() if rows else []
    missing = missing_columns(columns)
    if missing:
        raise SchemaError(missing)

    records = [
        clean_movement_row(row, material_pad_width, storage_location_pad_width, lineage=f"row={idx}")
        for idx, row in enumerate(rows)
    ]
    undated = sum(1 for record in records if record.posted_at is None)
    if undated:
        logger.warning("%d movement rows have no parsable posting date", undated)
    logger.info("Cleaned %d movement rows", len(records))

    records.sort(key=lambda record: (record.key, _timeline_position(record)))
    return records
