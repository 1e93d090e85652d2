import pytest

from stock_checker.domain.errors import FormatError
from stock_checker.infrastructure.parsing.snapshot import (
    MULTIPLE_LOCATIONS,
    detect_closing_quantity,
    infer_storage_location,
    normalize_grid,
    parse_snapshot_blocks,
    scan_lines,
)


def block(plant="1000", material="000123", description="Widget", closing="9999.0 EA", locations=()):
    rows = [
        [f"Plant {plant}"],
        [f"Material {material}"],
        [f"Description {description}"],
        ["Stock on 01.01.2024   5.000 EA"],
    ]
    if closing is not None:
        rows.append([f"Stock on 31.12.9999   {closing}"])
    if locations:
        rows.append(["", "Loca", "MvT", "Posting Date", "Quantity"])
        rows.append(["", "----", "---", "----------", "--------"])
        for loc in locations:
            rows.append(["", loc, "101", "01.01.2024", "5"])
    return rows


def test_two_block_document_end_to_end():
    grid = block() + block(plant="2000", material="456", description="Gadget", closing="12 PC")

    records = parse_snapshot_blocks(grid, material_pad_width=0, storage_location_pad_width=4)

    assert len(records) == 2
    first = records[0]
    assert first.plant == "1000"
    assert first.material == "000123"
    assert first.description == "Widget"
    assert first.on_hand == 9999.0
    assert first.storage_location == ""
    assert first.key == "1000|000123|"
    assert records[1].on_hand == 12.0
    assert records[1].lineage == "row=5"


def test_material_padded_per_width():
    records = parse_snapshot_blocks(block(material="123"), material_pad_width=6)
    assert records[0].material == "000123"


def test_no_blocks_raises_format_error():
    with pytest.raises(FormatError, match="no blocks found"):
        parse_snapshot_blocks([["Some header"], ["Material 1"]])


def test_duplicate_keys_keep_first_block():
    grid = block(description="First", closing="5 EA") + block(description="Second", closing="7 EA")

    records = parse_snapshot_blocks(grid)

    assert len(records) == 1
    assert records[0].description == "First"
    assert records[0].on_hand == 5.0


def test_missing_closing_line_defaults_to_zero():
    assert parse_snapshot_blocks(block(closing=None))[0].on_hand == 0.0


@pytest.mark.parametrize(
    "line, expected",
    [
        ("Stock on 31.12.9999   9999.0 EA", 9999.0),
        ("Stock on 31.12.9999   12.000- EA", -12.0),
        ("Stock on 31.12.9999   12.000 -", -12.0),
        ("Stock on 31.12.9999   1,250.000 KG", 1250.0),
        ("Stock on 31.12.9999   3 l", 3.0),
        ("Stock on 31.12.9999", None),
        ("Stock on 01.01.2024   5 EA", None),
    ],
)
def test_detect_closing_quantity(line, expected):
    assert detect_closing_quantity(line) == expected


def test_first_match_wins_per_field():
    lines = [
        "Plant 1000",
        "Material text without number",
        "Material 111",
        "Material 222",
        "Description   First description  ",
        "Description Second",
    ]
    found = scan_lines(lines)
    assert found["material"] == "111"
    assert found["description"] == "First description"
    assert "on_hand" not in found


def test_scan_limited_to_first_lines():
    lines = ["Plant 1000"] + ["noise"] * 200 + ["Material 999"]
    assert "material" not in scan_lines(lines)


def test_single_storage_location_is_normalized():
    records = parse_snapshot_blocks(block(locations=["1", "1.0", "0001"]), storage_location_pad_width=4)
    assert records[0].storage_location == "0001"
    assert records[0].key == "1000|000123|0001"


def test_multiple_storage_locations_use_sentinel():
    records = parse_snapshot_blocks(block(locations=["1", "2"]))
    assert records[0].storage_location == MULTIPLE_LOCATIONS
    assert records[0].key.endswith("|MULTI")


def test_location_scan_stops_at_next_plant_row():
    rows = normalize_grid(block(locations=["1"]) + [["Plant 2000"], ["", "9", "101"]])
    assert infer_storage_location(rows) == "0001"


def test_ragged_rows_are_padded():
    rows = normalize_grid([["Plant 1"], ["a", "b", "c"], [None, 5]])
    assert rows == [["Plant 1", "", ""], ["a", "b", "c"], ["", "5", ""]]
