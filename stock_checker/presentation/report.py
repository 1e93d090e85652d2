"""Flat exports and per-key explanations of a reconciliation report."""
from __future__ import annotations

import csv
import io
from datetime import datetime
from typing import Sequence

import pandas as pd

from stock_checker.domain.models import LastEvent, ReconciledRow

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
SHEET_NAME = "GapScan"

EXPORT_COLUMNS = [
    "Plant",
    "Material",
    "Storage Location",
    "Material Description",
    "Reported SOH",
    "Expected SOH",
    "Delta",
    "Expectation",
    "Summary",
    "Last Count",
    "Last Count Qty",
    "Last Sale",
    "Last Sale Qty",
    "Last Receipt",
    "Last Receipt Qty",
    "Loss Sum",
]


def format_timestamp(value: datetime | None) -> str:
    return value.strftime(TIMESTAMP_FORMAT) if value is not None else ""


def _event_time(event: LastEvent | None) -> str:
    return format_timestamp(event.posted_at if event else None)


def _event_qty(event: LastEvent | None) -> float | str:
    return event.quantity if event else ""


def rows_to_records(rows: Sequence[ReconciledRow]) -> list[dict[str, object]]:
    records: list[dict[str, object]] = []
    for row in rows:
        records.append(
            {
                "Plant": row.plant,
                "Material": row.material,
                "Storage Location": row.storage_location,
                "Material Description": row.description,
                "Reported SOH": row.reported,
                "Expected SOH": row.expected,
                "Delta": row.delta,
                "Expectation": row.tier.label,
                "Summary": row.rationale,
                "Last Count": _event_time(row.last_count),
                "Last Count Qty": _event_qty(row.last_count),
                "Last Sale": _event_time(row.last_sale),
                "Last Sale Qty": _event_qty(row.last_sale),
                "Last Receipt": _event_time(row.last_receipt),
                "Last Receipt Qty": _event_qty(row.last_receipt),
                "Loss Sum": row.loss_sum,
            }
        )
    return records


def rows_to_dataframe(rows: Sequence[ReconciledRow]) -> pd.DataFrame:
    return pd.DataFrame(rows_to_records(rows), columns=EXPORT_COLUMNS)


def render_csv(rows: Sequence[ReconciledRow]) -> bytes:
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=EXPORT_COLUMNS)
    writer.writeheader()
    writer.writerows(rows_to_records(rows))
    return buffer.getvalue().encode("utf-8")


def render_xlsx(rows: Sequence[ReconciledRow]) -> bytes:
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        rows_to_dataframe(rows).to_excel(writer, sheet_name=SHEET_NAME, index=False)
    return buffer.getvalue()


def _checkpoint(event: LastEvent | None) -> str:
    qty = "" if event is None else event.quantity
    return f"{_event_time(event)}  | Qty: {qty}"


def render_details(row: ReconciledRow) -> str:
    """Plain-text explanation of one key for a shelf gap-scan decision."""
    lines = [
        f"KEY: {row.key}",
        f"Material: {row.material}  |  SLoc: {row.storage_location}  |  Plant: {row.plant}",
        f"Description: {row.description}",
        "",
        "WHAT THE STOCK REPORT SAYS NOW:",
        f"  Reported SOH: {row.reported:.2f}",
        "",
        "WHAT MOVEMENT HISTORY IMPLIES:",
        f"  Expected SOH (movement replay): {row.expected:.2f}",
        f"  Difference (Reported - Expected): {row.delta:.2f}",
        "",
        "SHOULD IT BE THERE (WITHOUT COUNTING)?",
        f"  Expectation: {row.tier.label}",
        f"  Why: {row.rationale}",
        "",
        "RECENT CHECKPOINTS:",
        f"  Last count adjustment: {_checkpoint(row.last_count)}",
        f"  Last sale movement: {_checkpoint(row.last_sale)}",
        f"  Last receipt: {_checkpoint(row.last_receipt)}",
        f"  Write-down total: {row.loss_sum:.2f}",
        "",
        "HOW TO USE THIS:",
        "  - Shelf empty and expectation HIGH: stock likely exists somewhere, check the backroom first.",
        "  - Shelf empty and expectation LOW: reported stock may be overstated, count before writing off.",
        "  - Small reported SOH (1-2): low exposure, policy and value decide between count and write-off.",
    ]
    return "\n".join(lines)
