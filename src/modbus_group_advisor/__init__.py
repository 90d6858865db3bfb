"""modbus-group-advisor: plan Modbus read groups from pasted register lists and export them as XML."""

__version__ = "0.1.0"

from .advisor import AdvisorReport, analyze, run, validate_input
from .errors import (
    AddressParseError,
    AnalysisCancelled,
    FunctionCodeParseError,
    GroupAdvisorError,
    ParseFailedError,
)
from .export import export_bytes, export_document
from .grouping import build_groups
from .parser import parse_address, parse_function_code, parse_points
from .types import (
    DEFAULT_LIMITS,
    AnalysisResult,
    Group,
    GroupLimits,
    ParseResult,
    Point,
    RejectedRow,
    UnitKind,
)

__all__ = [
    "__version__",
    "AdvisorReport",
    "analyze",
    "run",
    "validate_input",
    "AddressParseError",
    "AnalysisCancelled",
    "FunctionCodeParseError",
    "GroupAdvisorError",
    "ParseFailedError",
    "export_bytes",
    "export_document",
    "build_groups",
    "parse_address",
    "parse_function_code",
    "parse_points",
    "DEFAULT_LIMITS",
    "AnalysisResult",
    "Group",
    "GroupLimits",
    "ParseResult",
    "Point",
    "RejectedRow",
    "UnitKind",
]
