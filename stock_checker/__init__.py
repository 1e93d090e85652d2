"""Stock-on-hand plausibility checks from movement log and snapshot exports."""
from stock_checker.application.use_cases import ReconcileStockUseCase, ReconciliationContext
from stock_checker.domain.classifier import ExpectationClassifier
from stock_checker.domain.errors import FormatError, ReconciliationError, SchemaError
from stock_checker.domain.services import StockReconciler
from stock_checker.infrastructure.repositories.excel_repositories import (
    MovementLogExcelRepository,
    SnapshotExcelRepository,
)

__all__ = [
    "ReconcileStockUseCase",
    "ReconciliationContext",
    "ExpectationClassifier",
    "StockReconciler",
    "MovementLogExcelRepository",
    "SnapshotExcelRepository",
    "ReconciliationError",
    "SchemaError",
    "FormatError",
]
