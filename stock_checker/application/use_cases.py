"""Application services orchestrating the stock reconciliation workflow."""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime
from io import BytesIO
from pathlib import Path
from typing import Any, Sequence

from stock_checker.application.dto import ReconciliationResponse
from stock_checker.config import SETTINGS, Settings
from stock_checker.domain.classifier import ExpectationClassifier
from stock_checker.domain.services import StockReconciler
from stock_checker.infrastructure.repositories.excel_repositories import (
    MovementLogExcelRepository,
    SnapshotExcelRepository,
)
from stock_checker.infrastructure.parsing.workbook import DecodedTable


@dataclass(slots=True)
class ReconciliationContext:
    movement_repository: MovementLogExcelRepository
    snapshot_repository: SnapshotExcelRepository
    reconciler: StockReconciler

    @classmethod
    def from_sources(
        cls,
        movements: BytesIO | Path | bytes,
        snapshot: BytesIO | Path | bytes,
        settings: Settings = SETTINGS,
        movements_name: str | None = None,
        snapshot_name: str | None = None,
    ) -> "ReconciliationContext":
        return cls(
            movement_repository=MovementLogExcelRepository(
                movements,
                settings.material_pad_width,
                settings.storage_location_pad_width,
                name=movements_name,
            ),
            snapshot_repository=SnapshotExcelRepository(
                snapshot,
                settings.material_pad_width,
                settings.storage_location_pad_width,
                name=snapshot_name,
            ),
            reconciler=StockReconciler(
                ExpectationClassifier(settings.tolerance),
                count=settings.count,
                sale=settings.sale,
                receipt=settings.receipt,
                loss_movement_type=settings.loss_movement_type,
            ),
        )


class ReconcileStockUseCase:
    """One batch run: decode both documents, parse them, reconcile.

    Structural errors propagate before any result is built, so callers see
    either a complete response or an exception.
    """

    def __init__(self, context: ReconciliationContext) -> None:
        self._context = context

    def execute(self, as_of: datetime | None = None) -> ReconciliationResponse:
        table = self._context.movement_repository.decode()
        grid = self._context.snapshot_repository.decode()
        return self._run(table, grid, as_of)

    async def execute_async(self, as_of: datetime | None = None) -> ReconciliationResponse:
        table, grid = await asyncio.gather(
            asyncio.to_thread(self._context.movement_repository.decode),
            asyncio.to_thread(self._context.snapshot_repository.decode),
        )
        return self._run(table, grid, as_of)

    def _run(self, table: DecodedTable, grid: Sequence[Sequence[Any]], as_of: datetime | None) -> ReconciliationResponse:
        movements = self._context.movement_repository.clean(table)
        snapshot = self._context.snapshot_repository.parse(grid)
        report = self._context.reconciler.reconcile(movements, snapshot, as_of=as_of)
        return ReconciliationResponse(report=report, movements=movements, snapshot=snapshot)
