"""Structural errors that abort a reconciliation run."""
from __future__ import annotations

from typing import Sequence


class ReconciliationError(ValueError):
    """Base class for input documents that cannot be reconciled at all."""


class SchemaError(ReconciliationError):
    """Raised when the movement log lacks one or more required columns."""

    def __init__(self, missing_columns: Sequence[str]) -> None:
        self.missing_columns = tuple(missing_columns)
        super().__init__(f"Movement log missing columns: {', '.join(self.missing_columns)}")


class FormatError(ReconciliationError):
    """Raised when the snapshot report has no recognizable block structure."""
