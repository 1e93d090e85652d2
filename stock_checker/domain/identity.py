"""Canonical plant / material / storage location identifiers."""
from __future__ import annotations

import math
import re

_INTEGERISH = re.compile(r"^\d+\.0$")
_DIGITS = re.compile(r"^\d+$")

KEY_DELIMITER = "|"


def normalize_integerish(value: object) -> str:
    """Trim a cell and drop a trailing ``.0`` from integers read as floats."""
    if value is None:
        return ""
    if isinstance(value, float) and math.isnan(value):
        return ""
    text = str(value).strip()
    if _INTEGERISH.match(text):
        text = text.split(".")[0]
    return text


def _pad_digits(text: str, pad_width: int) -> str:
    if pad_width and pad_width > 0 and _DIGITS.match(text):
        return text.zfill(pad_width)
    return text


def normalize_material(value: object, pad_width: int = 0) -> str:
    return _pad_digits(normalize_integerish(value), pad_width)


def normalize_storage_location(value: object, pad_width: int = 4) -> str:
    return _pad_digits(normalize_integerish(value), pad_width)


def make_key(plant: str, material: str, storage_location: str) -> str:
    return KEY_DELIMITER.join((plant, material, storage_location))
