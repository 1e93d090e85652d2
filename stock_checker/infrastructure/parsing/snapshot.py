"""Snapshot report (MB5B block export) parser producing stock-on-hand records.

The report is a sequence of free-text blocks, one per plant/material, each
opened by a ``Plant ...`` line in the first column. Identity and closing stock
are recovered per block from the first-column text; the storage location is
inferred from the movement detail table nested inside the block.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, Sequence

from stock_checker.domain.errors import FormatError
from stock_checker.domain.identity import (
    make_key,
    normalize_integerish,
    normalize_material,
    normalize_storage_location,
)
from stock_checker.domain.models import SnapshotRecord
from stock_checker.infrastructure.parsing.utils import cell_text

logger = logging.getLogger(__name__)

BLOCK_MARKER = "Plant"
CLOSING_STOCK_PREFIX = "Stock on 31.12.9999"
MULTIPLE_LOCATIONS = "MULTI"
MAX_SCAN_LINES = 140

LOCATION_HEADER = ("Loca", "MvT")

_PLANT = re.compile(r"Plant\s+(\d+)")
_MATERIAL = re.compile(r"Material\s+(\d+)")
_DESCRIPTION = re.compile(r"Description\s+(.*)$")
_QUANTITY = re.compile(r"([0-9]+(?:\.[0-9]+)?)\s*(-)?\s*(?:(?:EA|PC|ST|KG|L)\b)?", re.IGNORECASE)
_RULER = re.compile(r"^[-=_\s]+$")

Grid = Sequence[Sequence[object]]


def detect_material(line: str) -> str | None:
    match = _MATERIAL.search(line)
    return match.group(1) if match else None


def detect_description(line: str) -> str | None:
    if not line.startswith("Description"):
        return None
    match = _DESCRIPTION.match(line)
    return match.group(1).strip() if match else None


def detect_closing_quantity(line: str) -> float | None:
    """Closing stock on the far-future key date, e.g. ``Stock on 31.12.9999  12.000 - EA``."""
    if not line.startswith(CLOSING_STOCK_PREFIX):
        return None
    tail = line[len(CLOSING_STOCK_PREFIX):].replace(",", "").strip()
    match = _QUANTITY.search(tail)
    if not match:
        return None
    quantity = float(match.group(1))
    return -quantity if match.group(2) == "-" else quantity


@dataclass(frozen=True)
class LineDetector:
    field: str
    detect: Callable[[str], object | None]


DETECTORS: tuple[LineDetector, ...] = (
    LineDetector("material", detect_material),
    LineDetector("description", detect_description),
    LineDetector("on_hand", detect_closing_quantity),
)


def scan_lines(lines: Sequence[str], detectors: Sequence[LineDetector] = DETECTORS) -> dict[str, object]:
    """Run every detector over ``lines``; the first hit per field is kept."""
    found: dict[str, object] = {}
    for line in lines[:MAX_SCAN_LINES]:
        for detector in detectors:
            if detector.field in found:
                continue
            value = detector.detect(line)
            if value is not None:
                found[detector.field] = value
        if len(found) == len(detectors):
            break
    return found


def normalize_grid(grid: Grid) -> list[list[str]]:
    """Stringify cells and pad ragged rows with empty strings."""
    rows = [[cell_text(cell) for cell in (row or [])] for row in grid]
    width = max((len(row) for row in rows), default=0)
    return [row + [""] * (width - len(row)) for row in rows]


def _starts_block(row: Sequence[str]) -> bool:
    return bool(row) and row[0].strip().startswith(BLOCK_MARKER)


def split_blocks(rows: Sequence[Sequence[str]]) -> list[tuple[int, Sequence[Sequence[str]]]]:
    starts = [idx for idx, row in enumerate(rows) if _starts_block(row)]
    if not starts:
        raise FormatError(
            "Snapshot format not recognized: no blocks found (no 'Plant' rows). "
            "Export the stock report in detail/block format."
        )
    ends = starts[1:] + [len(rows)]
    return [(start, rows[start:end]) for start, end in zip(starts, ends)]


def _cell(row: Sequence[str], idx: int) -> str:
    return row[idx] if idx < len(row) else ""


def infer_storage_location(block: Sequence[Sequence[str]], pad_width: int = 4) -> str:
    """Storage location of the block's detail table, ``MULTI`` if ambiguous."""
    locations: set[str] = set()
    for idx, row in enumerate(block):
        if (_cell(row, 1).strip(), _cell(row, 2).strip()) != LOCATION_HEADER:
            continue
        for detail in block[idx + 1:]:
            if _starts_block(detail):
                break
            candidate = _cell(detail, 1).strip()
            if not candidate or _RULER.match(candidate):
                continue
            locations.add(normalize_storage_location(candidate, pad_width))
        break

    if len(locations) == 1:
        return next(iter(locations))
    if len(locations) > 1:
        return MULTIPLE_LOCATIONS
    return ""


def parse_block(
    block: Sequence[Sequence[str]],
    material_pad_width: int = 0,
    storage_location_pad_width: int = 4,
    lineage: str | None = None,
) -> SnapshotRecord | None:
    lines = [row[0].strip() for row in block if row and row[0].strip()]
    if not lines:
        return None

    plant_match = _PLANT.search(lines[0])
    plant = normalize_integerish(plant_match.group(1) if plant_match else "")
    found = scan_lines(lines)
    material = normalize_material(found.get("material", ""), material_pad_width)

    storage_location = infer_storage_location(block, storage_location_pad_width)
    if storage_location != MULTIPLE_LOCATIONS:
        storage_location = normalize_storage_location(storage_location, storage_location_pad_width)

    return SnapshotRecord(
        plant=plant,
        material=material,
        storage_location=storage_location,
        description=str(found.get("description", "")),
        on_hand=float(found.get("on_hand", 0.0)),
        key=make_key(plant, material, storage_location),
        lineage=lineage,
    )


def drop_duplicate_keys(records: Sequence[SnapshotRecord]) -> list[SnapshotRecord]:
    seen: set[str] = set()
    unique: list[SnapshotRecord] = []
    for record in records:
        if record.key in seen:
            logger.debug("Dropping duplicate snapshot block for %s (%s)", record.key, record.lineage)
            continue
        seen.add(record.key)
        unique.append(record)
    return unique


def parse_snapshot_blocks(
    grid: Grid,
    material_pad_width: int = 0,
    storage_location_pad_width: int = 4,
) -> list[SnapshotRecord]:
    """Recover one stock-on-hand record per key from a block-format report.

    Raises:
        FormatError: if the grid holds no ``Plant`` block at all.
    """
    rows = normalize_grid(grid)
    blocks = split_blocks(rows)

    records = []
    for start, block in blocks:
        record = parse_block(block, material_pad_width, storage_location_pad_width, lineage=f"row={start}")
        if record is not None:
            records.append(record)

    unique = drop_duplicate_keys(records)
    logger.info("Parsed %d snapshot blocks into %d records", len(blocks), len(unique))
    return unique
