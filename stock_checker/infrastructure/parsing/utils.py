"""Shared cell parsing utilities for spreadsheet ingestion."""
from __future__ import annotations

import math
import numbers
import re
from datetime import date, datetime, time, timedelta
from io import BytesIO
from pathlib import Path

import pandas as pd

# Excel 1900 date system: serial 25569 is 1970-01-01.
EXCEL_EPOCH_SERIAL = 25569
UNIX_EPOCH = datetime(1970, 1, 1)
SECONDS_PER_DAY = 86400
MS_PER_DAY = SECONDS_PER_DAY * 1000

_CLOCK = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")


def ensure_bytes(source: BytesIO | Path | bytes) -> bytes:
    if isinstance(source, bytes):
        return source
    if isinstance(source, BytesIO):
        return source.getvalue()
    if isinstance(source, (Path, str)):
        return Path(source).read_bytes()
    raise TypeError(f"Unsupported source type: {type(source)!r}")


def is_blank(value: object) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if value is pd.NaT:
        return True
    return isinstance(value, str) and not value.strip()


def cell_text(value: object) -> str:
    return "" if is_blank(value) else str(value)


def _is_number(value: object) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def excel_serial_to_datetime(serial: float) -> datetime:
    whole_days = math.floor(serial - EXCEL_EPOCH_SERIAL)
    seconds = round((serial - math.floor(serial)) * SECONDS_PER_DAY)
    return UNIX_EPOCH + timedelta(days=whole_days, seconds=seconds)


def parse_date_cell(value: object) -> datetime | None:
    """Parse a posting date cell; anything unrecognizable becomes ``None``."""
    if is_blank(value):
        return None
    if isinstance(value, pd.Timestamp):
        return value.tz_localize(None).to_pydatetime() if value.tzinfo else value.to_pydatetime()
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if _is_number(value):
        if not math.isfinite(value):
            return None
        try:
            return excel_serial_to_datetime(float(value))
        except OverflowError:
            return None
    parsed = pd.to_datetime(str(value).strip(), errors="coerce")
    if parsed is pd.NaT or pd.isna(parsed):
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.tz_localize(None)
    return parsed.to_pydatetime()


def _time_to_ms(value: time) -> int:
    return ((value.hour * 3600 + value.minute * 60 + value.second) * 1000) + value.microsecond // 1000


def parse_time_to_ms(value: object) -> int:
    """Milliseconds since midnight for a time-of-entry cell, 0 on failure."""
    if is_blank(value):
        return 0
    if isinstance(value, datetime):
        return _time_to_ms(value.time())
    if isinstance(value, time):
        return _time_to_ms(value)
    if _is_number(value):
        if not math.isfinite(value):
            return 0
        return round(value * MS_PER_DAY)
    text = str(value).strip()
    match = _CLOCK.match(text)
    if match:
        hours, minutes, seconds = (int(part or 0) for part in match.groups())
        return (hours * 3600 + minutes * 60 + seconds) * 1000
    try:
        return _time_to_ms(time.fromisoformat(text))
    except ValueError:
        return 0


def combine_date_time(posting_date: datetime | None, time_ms: int) -> datetime | None:
    if posting_date is None:
        return None
    return posting_date + timedelta(milliseconds=time_ms)


def parse_quantity(value: object) -> float:
    """Parse a quantity with thousands separators; 0.0 when unparsable."""
    if is_blank(value):
        return 0.0
    if _is_number(value):
        number = float(value)
    else:
        try:
            number = float(str(value).replace(",", "").strip())
        except ValueError:
            return 0.0
    return number if math.isfinite(number) else 0.0
