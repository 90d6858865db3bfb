"""Core data model: unit kinds, points, groups, rejected rows and result containers."""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class UnitKind(str, Enum):
    """Addressable unit a point consumes: 16-bit register or single-bit coil."""

    REGISTER = "register"
    COIL = "coil"


@dataclass(frozen=True)
class GroupLimits:
    """Per-request limits for one unit kind: max units spanned and max address gap."""

    capacity: int
    max_gap: int


# Protocol limits for a single read request; fixed by the downstream tooling.
DEFAULT_LIMITS: dict[UnitKind, GroupLimits] = {
    UnitKind.REGISTER: GroupLimits(capacity=120, max_gap=9),
    UnitKind.COIL: GroupLimits(capacity=2000, max_gap=30),
}


@dataclass(frozen=True)
class Point:
    """One parsed row: a named Modbus value at an address, read with a function code."""

    name: str
    address: int
    length: int
    function_code: int
    unit_kind: UnitKind
    raw_type: str = field(default="unknown", compare=False)

    def __post_init__(self) -> None:
        if self.address < 0:
            raise ValueError(f"address must be >= 0, got {self.address}")
        if self.function_code < 0:
            raise ValueError(f"function_code must be >= 0, got {self.function_code}")
        if self.length not in (1, 2, 4):
            raise ValueError(f"length must be 1, 2 or 4, got {self.length}")

    @property
    def end_address(self) -> int:
        return self.address + self.length - 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "address": self.address,
            "length": self.length,
            "functionCode": self.function_code,
            "unitKind": self.unit_kind.value,
        }


@dataclass(frozen=True)
class Group:
    """A contiguous, capacity-bounded read batch sharing function code and unit kind."""

    id: int
    function_code: int
    unit_kind: UnitKind
    start_address: int
    end_address: int
    total_units: int
    has_gaps: bool
    entries: tuple[Point, ...]

    @property
    def num_points(self) -> int:
        return len(self.entries)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "functionCode": self.function_code,
            "unitKind": self.unit_kind.value,
            "startAddress": self.start_address,
            "endAddress": self.end_address,
            "totalUnits": self.total_units,
            "numPoints": self.num_points,
            "hasGaps": self.has_gaps,
            "entries": [p.to_dict() for p in self.entries],
        }


@dataclass(frozen=True)
class RejectedRow:
    """Diagnostic for a data row that could not be turned into a Point."""

    row_number: int
    name: str | None
    reason: str
    raw_line: str

    @property
    def message(self) -> str:
        return f"Row {self.row_number}: {self.reason}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "rowNumber": self.row_number,
            "name": self.name,
            "reason": self.reason,
            "rawLine": self.raw_line,
        }


@dataclass(frozen=True)
class ParseResult:
    points: tuple[Point, ...] = ()
    rejects: tuple[RejectedRow, ...] = ()
    warnings: tuple[str, ...] = ()


@dataclass(frozen=True)
class AnalysisResult:
    """Everything one analyze() call produces: preview, rejects, groups, warnings."""

    points: tuple[Point, ...] = ()
    rejects: tuple[RejectedRow, ...] = ()
    groups: tuple[Group, ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def summary(self) -> str:
        return f"Parsed={len(self.points)} Groups={len(self.groups)} Rejected={len(self.rejects)}"

    def to_dict(self) -> dict[str, Any]:
        preview = []
        for p in self.points:
            row = p.to_dict()
            row["rawType"] = p.raw_type
            preview.append(row)
        return {
            "previewRows": preview,
            "rejectedRows": [r.to_dict() for r in self.rejects],
            "groups": [g.to_dict() for g in self.groups],
            "warnings": list(self.warnings),
        }

    def to_json(self, indent: int | None = None) -> str:
        """Serialize to_dict(); compact separators unless indent is given."""
        if indent is None:
            return json.dumps(self.to_dict(), separators=(",", ":"), ensure_ascii=False)
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)
