"""Decoding of uploaded workbooks into named-field rows or raw cell grids."""
from __future__ import annotations

import csv
import io
from dataclasses import dataclass
from io import BytesIO
from typing import Any, Sequence

import pandas as pd

XLSX_MAGIC = b"PK\x03\x04"
XLS_MAGIC = b"\xd0\xcf\x11\xe0"


@dataclass(frozen=True)
class DecodedTable:
    columns: Sequence[str]
    rows: Sequence[dict[str, Any]]


def sniff_format(data: bytes, name: str | None = None) -> str:
    if name:
        suffix = name.rsplit(".", 1)[-1].lower() if "." in name else ""
        if suffix in {"xlsx", "xlsm"}:
            return "xlsx"
        if suffix in {"xls", "csv"}:
            return suffix
    if data.startswith(XLSX_MAGIC):
        return "xlsx"
    if data.startswith(XLS_MAGIC):
        return "xls"
    return "csv"


def _engine(fmt: str) -> str:
    return "xlrd" if fmt == "xls" else "openpyxl"


def _first_sheet(data: bytes, fmt: str) -> str:
    xls = pd.ExcelFile(BytesIO(data), engine=_engine(fmt))
    if not xls.sheet_names:
        raise ValueError("Workbook has no sheets")
    return xls.sheet_names[0]


def _decode_text(data: bytes) -> str:
    return data.decode("utf-8-sig", errors="replace")


def read_table(data: bytes, name: str | None = None) -> DecodedTable:
    """First sheet as a header row plus one mapping per data row."""
    fmt = sniff_format(data, name)
    if fmt == "csv":
        frame = pd.read_csv(io.StringIO(_decode_text(data)), dtype=str, keep_default_na=False)
    else:
        frame = pd.read_excel(
            BytesIO(data),
            sheet_name=_first_sheet(data, fmt),
            engine=_engine(fmt),
            dtype=object,
            keep_default_na=False,
        )
    columns = [str(column).strip() for column in frame.columns]
    frame.columns = columns
    return DecodedTable(columns=columns, rows=frame.to_dict(orient="records"))


def read_grid(data: bytes, name: str | None = None) -> list[list[Any]]:
    """First sheet as raw rows of cells, without any header interpretation."""
    fmt = sniff_format(data, name)
    if fmt == "csv":
        return [list(row) for row in csv.reader(io.StringIO(_decode_text(data)))]
    frame = pd.read_excel(
        BytesIO(data),
        sheet_name=_first_sheet(data, fmt),
        engine=_engine(fmt),
        dtype=object,
        header=None,
        keep_default_na=False,
    )
    return frame.values.tolist()
