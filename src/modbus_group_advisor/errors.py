"""Exceptions for modbus-group-advisor: parse failures and cancellation."""

from threading import Event
from typing import Sequence

from .types import RejectedRow


class GroupAdvisorError(Exception):
    """Base exception for modbus-group-advisor."""

    pass


class AddressParseError(GroupAdvisorError, ValueError):
    """Raised when an address cell is not an integer, grouped integer or integral decimal."""

    def __init__(self, value: str, message: str | None = None) -> None:
        self.value = value
        super().__init__(message or f"Invalid address: {value!r}")


class FunctionCodeParseError(GroupAdvisorError, ValueError):
    """Raised when no function code digits can be found in a cell."""

    def __init__(self, value: str, message: str | None = None) -> None:
        self.value = value
        super().__init__(message or f"No function code in {value!r}")


class ParseFailedError(GroupAdvisorError):
    """Raised when every data row was rejected and no point could be parsed."""

    # Cap on reject messages joined into the exception text.
    MAX_REASONS = 20

    def __init__(self, rejects: Sequence[RejectedRow]) -> None:
        self.rejects = tuple(rejects)
        lines = [r.message for r in self.rejects[: self.MAX_REASONS]]
        super().__init__("\n".join(lines) or "No rows could be parsed")


class AnalysisCancelled(Exception):
    """Raised when the caller's cancel event is set; not a GroupAdvisorError."""

    pass


def check_cancelled(cancel_event: Event | None) -> None:
    """Raise AnalysisCancelled if the caller has set cancel_event."""
    if cancel_event is not None and cancel_event.is_set():
        raise AnalysisCancelled("Analysis cancelled")
