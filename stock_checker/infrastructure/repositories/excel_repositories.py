"""Spreadsheet-backed repositories for the movement log and snapshot report."""
from __future__ import annotations

from io import BytesIO
from pathlib import Path
from typing import Any, Sequence

from stock_checker.domain.models import MovementRecord, SnapshotRecord
from stock_checker.domain.repositories import MovementLogRepository, SnapshotRepository
from stock_checker.infrastructure.parsing.movement_log import clean_movement_log
from stock_checker.infrastructure.parsing.snapshot import parse_snapshot_blocks
from stock_checker.infrastructure.parsing.utils import ensure_bytes
from stock_checker.infrastructure.parsing.workbook import DecodedTable, read_grid, read_table


def _source_name(source: BytesIO | Path | bytes, name: str | None) -> str | None:
    if name:
        return name
    if isinstance(source, (Path, str)):
        return Path(source).name
    return None


class MovementLogExcelRepository(MovementLogRepository):
    def __init__(
        self,
        source: BytesIO | Path | bytes,
        material_pad_width: int = 0,
        storage_location_pad_width: int = 4,
        name: str | None = None,
    ) -> None:
        self._name = _source_name(source, name)
        self._source = ensure_bytes(source)
        self._material_pad_width = material_pad_width
        self._storage_location_pad_width = storage_location_pad_width

    def decode(self) -> DecodedTable:
        return read_table(self._source, self._name)

    def clean(self, table: DecodedTable) -> Sequence[MovementRecord]:
        return clean_movement_log(
            table.rows,
            self._material_pad_width,
            self._storage_location_pad_width,
            columns=table.columns,
        )

    def list_movements(self) -> Sequence[MovementRecord]:
        return self.clean(self.decode())


class SnapshotExcelRepository(SnapshotRepository):
    def __init__(
        self,
        source: BytesIO | Path | bytes,
        material_pad_width: int = 0,
        storage_location_pad_width: int = 4,
        name: str | None = None,
    ) -> None:
        self._name = _source_name(source, name)
        self._source = ensure_bytes(source)
        self._material_pad_width = material_pad_width
        self._storage_location_pad_width = storage_location_pad_width

    def decode(self) -> list[list[Any]]:
        return read_grid(self._source, self._name)

    def parse(self, grid: Sequence[Sequence[Any]]) -> Sequence[SnapshotRecord]:
        return parse_snapshot_blocks(grid, self._material_pad_width, self._storage_location_pad_width)

    def list_snapshot(self) -> Sequence[SnapshotRecord]:
        return self.parse(self.decode())
