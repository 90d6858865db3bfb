"""Read a worksheet from an .xlsx register export as tab-separated text for the parser."""

import logging
from pathlib import Path
from typing import Any

from .errors import GroupAdvisorError

logger = logging.getLogger(__name__)


def format_cell(value: Any) -> str:
    """Render a cell value the way it reads when copied out of Excel."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value).upper()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    # tabs/newlines inside a cell would break the row apart
    return " ".join(str(value).split())


def rows_to_text(rows: list[tuple]) -> str:
    """Join rows as tab-separated lines; trailing empty cells are dropped."""
    lines: list[str] = []
    for row in rows:
        cells = [format_cell(v) for v in row]
        while cells and not cells[-1]:
            cells.pop()
        lines.append("\t".join(cells))
    return "\n".join(lines)


def read_workbook_text(path: Path | str, sheet: str | None = None) -> str:
    """
    Load an .xlsx workbook and return one sheet as tab-separated text.

    Uses the active sheet unless `sheet` names one. Requires openpyxl
    (install the `xlsx` extra).
    """
    try:
        import openpyxl
    except ImportError:
        raise GroupAdvisorError(
            "openpyxl is required to read .xlsx files. Install with: pip install 'modbus-group-advisor[xlsx]'"
        ) from None

    wb = openpyxl.load_workbook(str(path), data_only=True, read_only=True)
    try:
        if sheet is None:
            ws = wb.active
        elif sheet in wb.sheetnames:
            ws = wb[sheet]
        else:
            raise ValueError(f"Sheet {sheet!r} not found; available: {', '.join(wb.sheetnames)}")
        rows = [tuple(row) for row in ws.iter_rows(values_only=True)]
        logger.debug("Read %d rows from %s [%s]", len(rows), path, ws.title)
    finally:
        wb.close()
    return rows_to_text(rows)
