"""Parse pasted register exports (tab, semicolon or comma separated) into Points."""

import logging
import re
from dataclasses import dataclass
from threading import Event

from .errors import (
    AddressParseError,
    FunctionCodeParseError,
    ParseFailedError,
    check_cancelled,
)
from .types import ParseResult, Point, RejectedRow, UnitKind

logger = logging.getLogger(__name__)

HEADER_NOT_RECOGNIZED = (
    "Header not recognized; paste an export with column headers "
    "(Name / Register number / Read function code / ...)."
)

# Candidate delimiters in priority order.
_DELIMITERS = ("\t", ";", ",")

# Characters dropped from header cells before matching.
_HEADER_STRIP = re.compile(r"[\s_\-.:/\\()\[\]]")

# 1.234 / 1,234,567: digit runs of exactly three after the first group
_GROUPED_INT = re.compile(r"^\d{1,3}([.,]\d{3})+$")
_PLAIN_INT = re.compile(r"^[+-]?\d+$")
_DECIMAL = re.compile(r"^[+-]?\d*[.,]\d+$")

_FC_WORDS = re.compile(r"fc|function|code", re.IGNORECASE)
_NON_DIGIT = re.compile(r"\D")

_COIL_WORDS = ("coil", "discrete", "bool")
_REGISTER_WIDTHS = ("16 bit", "32 bit", "64 bit")
_COIL_FUNCTION_CODES = frozenset({1, 2, 15})

# Max reject messages listed in the partial-success warning block.
MAX_WARNING_REJECTS = 12


@dataclass(frozen=True)
class ColumnRule:
    """One logical column and the normalized header names that identify it."""

    key: str
    candidates: tuple[str, ...]
    required: bool = True


COLUMN_RULES: tuple[ColumnRule, ...] = (
    ColumnRule("name", ("name", "naam", "pointname", "tag", "objectname")),
    ColumnRule(
        "address",
        (
            "registernumber",
            "register",
            "address",
            "adres",
            "startaddress",
            "registeraddress",
            "regnr",
            "registernr",
            "registerno",
        ),
    ),
    ColumnRule("type", ("registertype", "datatype", "type", "pointtype"), required=False),
    ColumnRule(
        "function_code",
        (
            "readfunctioncode",
            "functioncode",
            "readfunction",
            "fc",
            "readfc",
            "modbusfunction",
            "function",
        ),
    ),
)


def normalize_header(cell: str) -> str:
    """Lowercase a header cell and drop spaces and punctuation used as separators."""
    return _HEADER_STRIP.sub("", (cell or "").strip().lower())


def find_column(headers: list[str], candidates: tuple[str, ...]) -> int | None:
    """
    Return the index of the first normalized header matching a candidate.

    Exact matches win over substring matches; None when neither finds a column.
    """
    cands = [c for c in (normalize_header(c) for c in candidates) if c]
    for i, h in enumerate(headers):
        if h in cands:
            return i
    for i, h in enumerate(headers):
        for c in cands:
            if c in h:
                return i
    return None


def resolve_columns(header_cells: list[str]) -> dict[str, int | None]:
    """Map each COLUMN_RULES key to a column index (or None)."""
    headers = [normalize_header(c) for c in header_cells]
    return {rule.key: find_column(headers, rule.candidates) for rule in COLUMN_RULES}


def detect_delimiter(lines: list[str]) -> str:
    """Pick the delimiter from the first line containing tab, ';' or ','; default tab."""
    for line in lines:
        for delim in _DELIMITERS:
            if delim in line:
                return delim
    return "\t"


def split_lines(raw: str) -> list[str]:
    """Normalize line endings and return only non-blank lines."""
    text = (raw or "").replace("\r\n", "\n").replace("\r", "\n")
    return [ln for ln in text.split("\n") if ln.strip()]


def parse_address(value: str) -> int:
    """
    Parse an address cell.

    - Plain integers, leading zeros allowed ("0300" -> 300).
    - Thousands-grouped integers with '.' or ',' ("1.234.567" -> 1234567).
    - Decimals within 1e-9 of an integer ("40001.0" -> 40001).

    Raises AddressParseError for anything else or a negative result.
    """
    t = (value or "").strip().replace(" ", "")
    if not t:
        raise AddressParseError(value, "Empty address")

    if _GROUPED_INT.match(t):
        num = int(t.replace(".", "").replace(",", ""))
    elif _PLAIN_INT.match(t):
        num = int(t)
    elif _DECIMAL.match(t):
        f = float(t.replace(",", "."))
        if abs(f - round(f)) >= 1e-9:
            raise AddressParseError(value, f"Address is not an integer: {value!r}")
        num = int(round(f))
    else:
        raise AddressParseError(value)

    if num < 0:
        raise AddressParseError(value, f"Address must be >= 0, got {num}")
    return num


def parse_function_code(value: str) -> int:
    """Extract the function code digits from cells like "FC03", "3" or "Function code 4"."""
    digits = _NON_DIGIT.sub("", _FC_WORDS.sub("", value or ""))
    if not digits:
        raise FunctionCodeParseError(value)
    return int(digits)


def length_from_type(raw_type: str) -> int:
    """Number of protocol units implied by a type description (64 -> 4, 32 -> 2, else 1)."""
    t = (raw_type or "").lower()
    if "64" in t:
        return 4
    if "32" in t:
        return 2
    return 1


def unit_kind_from_type(raw_type: str, function_code: int) -> UnitKind:
    """Infer register vs coil from the type text, falling back on the function code."""
    t = (raw_type or "").lower()
    if any(w in t for w in _REGISTER_WIDTHS):
        return UnitKind.REGISTER
    if any(w in t for w in _COIL_WORDS):
        return UnitKind.COIL
    if function_code in _COIL_FUNCTION_CODES:
        return UnitKind.COIL
    return UnitKind.REGISTER


def _cell(row: list[str], idx: int | None) -> str:
    if idx is None or idx >= len(row):
        return ""
    return row[idx]


def _parse_row(
    row: list[str],
    row_number: int,
    raw_line: str,
    columns: dict[str, int | None],
) -> Point | RejectedRow:
    """Turn one data row into a Point, or a RejectedRow describing why it failed."""
    name_cell = _cell(row, columns["name"])
    try:
        addr_raw = _cell(row, columns["address"])
        if not addr_raw:
            raise AddressParseError(addr_raw, "No register/address found")
        address = parse_address(addr_raw)

        fc_raw = _cell(row, columns["function_code"])
        if not fc_raw:
            raise FunctionCodeParseError(fc_raw, "No function code found")
        function_code = parse_function_code(fc_raw)
    except (AddressParseError, FunctionCodeParseError) as e:
        return RejectedRow(
            row_number=row_number,
            name=name_cell or None,
            reason=str(e),
            raw_line=raw_line,
        )

    raw_type = _cell(row, columns["type"]) or "unknown"
    unit_kind = unit_kind_from_type(raw_type, function_code)
    length = 1 if unit_kind == UnitKind.COIL else length_from_type(raw_type)
    return Point(
        name=name_cell or f"Row{row_number}",
        address=address,
        length=length,
        function_code=function_code,
        unit_kind=unit_kind,
        raw_type=raw_type,
    )


def parse_points(raw: str, *, cancel_event: Event | None = None) -> ParseResult:
    """
    Parse pasted tabular text into Points plus rejected-row diagnostics.

    The first non-blank line is the header. An unrecognized header yields an
    empty result with a single warning. Raises ParseFailedError when rows were
    present but every one of them was rejected, and AnalysisCancelled if
    cancel_event is set while rows are being parsed.
    """
    lines = split_lines(raw)
    if not lines:
        return ParseResult()

    delim = detect_delimiter(lines)
    rows = [[cell.strip() for cell in ln.split(delim)] for ln in lines]
    columns = resolve_columns(rows[0])
    logger.debug("Delimiter %r, columns %s, %d data lines", delim, columns, len(rows) - 1)

    missing = [r.key for r in COLUMN_RULES if r.required and columns[r.key] is None]
    if missing:
        logger.debug("Header not recognized, missing columns: %s", missing)
        return ParseResult(warnings=(HEADER_NOT_RECOGNIZED,))

    points: list[Point] = []
    rejects: list[RejectedRow] = []
    # header is row 1, first data row is row 2
    for row_number, (row, raw_line) in enumerate(zip(rows[1:], lines[1:]), start=2):
        check_cancelled(cancel_event)
        if not any(row):
            continue
        outcome = _parse_row(row, row_number, raw_line, columns)
        if isinstance(outcome, RejectedRow):
            rejects.append(outcome)
        else:
            points.append(outcome)

    if rejects and not points:
        raise ParseFailedError(rejects)

    warnings: list[str] = []
    if rejects:
        logger.warning("Skipped %d of %d rows", len(rejects), len(rejects) + len(points))
        warnings.append(f"Some rows were skipped: rejected={len(rejects)}")
        warnings.extend(r.message for r in rejects[:MAX_WARNING_REJECTS])
        if len(rejects) > MAX_WARNING_REJECTS:
            warnings.append("...")

    return ParseResult(points=tuple(points), rejects=tuple(rejects), warnings=tuple(warnings))
