from datetime import datetime

import pytest

from stock_checker.domain.errors import SchemaError
from stock_checker.infrastructure.parsing.movement_log import REQUIRED_COLUMNS, clean_movement_log

from helpers import movement_row


def test_clean_row_normalizes_identity_and_parses_cells():
    records = clean_movement_log([movement_row(**{"Qty in unit of entry": "1,250.5"})], 6, 4)

    assert len(records) == 1
    record = records[0]
    assert record.plant == "1000"
    assert record.material == "000123"
    assert record.storage_location == "0001"
    assert record.key == "1000|000123|0001"
    assert record.movement_type == "101"
    assert record.posted_at == datetime(2024, 1, 10, 8, 0, 0)
    assert record.quantity == 1250.5
    assert record.lineage == "row=0"


def test_numeric_movement_type_matches_code():
    records = clean_movement_log([movement_row(**{"Movement Type": 601.0})], 6, 4)
    assert records[0].movement_type == "601"


def test_bad_cells_degrade_instead_of_failing():
    rows = [movement_row(**{"Posting Date": "??", "Time of Entry": "late", "Qty in unit of entry": "n/a"})]

    record = clean_movement_log(rows, 6, 4)[0]

    assert record.posting_date is None
    assert record.posted_at is None
    assert record.quantity == 0.0


def test_sorted_by_key_then_time_with_stable_ties():
    rows = [
        movement_row(Material=200, **{"Posting Date": "2024-01-05"}),
        movement_row(**{"Posting Date": "2024-01-03", "Movement Type Text": "late"}),
        movement_row(**{"Posting Date": "2024-01-01", "Movement Type Text": "first"}),
        movement_row(**{"Posting Date": "2024-01-01", "Movement Type Text": "second"}),
        movement_row(**{"Posting Date": ""}),
    ]

    records = clean_movement_log(rows, 6, 4)

    assert [r.key for r in records] == ["1000|000123|0001"] * 4 + ["1000|000200|0001"]
    assert [r.movement_type_text for r in records[:4]] == ["GR goods receipt", "first", "second", "late"]
    assert records[0].posted_at is None


def test_column_names_are_trimmed():
    row = {f" {name} ": value for name, value in movement_row().items()}
    assert len(clean_movement_log([row], 6, 4)) == 1


def test_missing_posting_date_column():
    row = movement_row()
    del row["Posting Date"]

    with pytest.raises(SchemaError) as excinfo:
        clean_movement_log([row], 6, 4)

    assert excinfo.value.missing_columns == ("Posting Date",)
    assert "Posting Date" in str(excinfo.value)


def test_all_missing_columns_listed_at_once():
    with pytest.raises(SchemaError) as excinfo:
        clean_movement_log([{"Plant": "1000", "Material": "1"}], 6, 4)

    assert list(excinfo.value.missing_columns) == REQUIRED_COLUMNS[2:]


def test_explicit_columns_allow_empty_log():
    assert clean_movement_log([], 6, 4, columns=REQUIRED_COLUMNS) == []
