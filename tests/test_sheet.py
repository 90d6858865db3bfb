"""Tests for reading .xlsx register exports as parser input."""

from pathlib import Path

import pytest

from modbus_group_advisor import analyze
from modbus_group_advisor.sheet import format_cell, read_workbook_text, rows_to_text

openpyxl = pytest.importorskip("openpyxl")


@pytest.fixture
def workbook(tmp_path: Path) -> Path:
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = "Registers"
    ws.append(["Name", "Register number", "Data type", "Read function code"])
    ws.append(["Supply temp", 40001, "16 bit", 3])
    ws.append(["Energy", 40002.0, "32 bit", "FC03"])
    ws.append(["Run state", 12, "Coil", 1, None])
    other = wb.create_sheet("Other")
    other.append(["A", "B"])
    path = tmp_path / "points.xlsx"
    wb.save(path)
    return path


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, ""),
        (12, "12"),
        (12.0, "12"),
        (12.5, "12.5"),
        (True, "TRUE"),
        ("  line\tbreak\nhere ", "line break here"),
    ],
)
def test_format_cell(value: object, expected: str) -> None:
    assert format_cell(value) == expected


def test_rows_to_text_trims_trailing_empty_cells() -> None:
    assert rows_to_text([("a", 1, None, None), (None, "b")]) == "a\t1\n\tb"


def test_read_active_sheet(workbook: Path) -> None:
    text = read_workbook_text(workbook)
    lines = text.splitlines()
    assert lines[0] == "Name\tRegister number\tData type\tRead function code"
    assert lines[2] == "Energy\t40002\t32 bit\tFC03"
    assert lines[3] == "Run state\t12\tCoil\t1"


def test_read_named_sheet(workbook: Path) -> None:
    assert read_workbook_text(workbook, sheet="Other") == "A\tB"


def test_unknown_sheet_raises(workbook: Path) -> None:
    with pytest.raises(ValueError, match="not found"):
        read_workbook_text(workbook, sheet="Missing")


def test_workbook_text_analyzes(workbook: Path) -> None:
    result = analyze(read_workbook_text(workbook))
    assert [p.address for p in result.points] == [40001, 40002, 12]
    assert len(result.groups) == 2
