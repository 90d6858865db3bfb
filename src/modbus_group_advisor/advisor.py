"""Analyze pasted register lists: parse, group and optionally export in one call."""

import logging
import time
from dataclasses import dataclass
from threading import Event
from typing import Callable

from .errors import check_cancelled
from .export import export_document
from .grouping import build_groups
from .parser import parse_points
from .types import AnalysisResult

logger = logging.getLogger(__name__)

# progress(percent, stage, message)
ProgressCallback = Callable[[int, str, str], None]

EMPTY_INPUT_MESSAGE = "Paste a list of registers first."
NO_POINTS_WARNING = "No valid points found."


@dataclass(frozen=True)
class AdvisorReport:
    """Outcome of a full tool run: analysis plus its JSON payload and XML export."""

    result: AnalysisResult
    analysis_json: str
    xml: str
    warnings: tuple[str, ...]

    @property
    def summary(self) -> str:
        return self.result.summary


def _report(progress: ProgressCallback | None, percent: int, stage: str, message: str) -> None:
    if progress is not None:
        progress(percent, stage, message)


def analyze(
    raw: str,
    *,
    cancel_event: Event | None = None,
    progress: ProgressCallback | None = None,
) -> AnalysisResult:
    """
    Parse raw text and group the resulting points.

    ParseFailedError (every row rejected) and AnalysisCancelled propagate
    unchanged. Grouping only runs when at least one point was parsed.
    """
    _report(progress, 5, "Parse", "Parsing input...")
    parsed = parse_points(raw, cancel_event=cancel_event)
    check_cancelled(cancel_event)
    _report(progress, 30, "Parse", f"Parsed entries={len(parsed.points)} rejected={len(parsed.rejects)}")

    groups = build_groups(parsed.points, cancel_event=cancel_event) if parsed.points else []
    _report(progress, 70, "Group", f"Groups={len(groups)}")

    result = AnalysisResult(
        points=parsed.points,
        rejects=parsed.rejects,
        groups=tuple(groups),
        warnings=parsed.warnings,
    )
    _report(progress, 100, "Done", "Done")
    return result


def validate_input(raw: str) -> list[str]:
    """Return validation messages for the raw text; empty list when it can be run."""
    if not (raw or "").strip():
        return [EMPTY_INPUT_MESSAGE]
    return []


def run(
    raw: str,
    *,
    cancel_event: Event | None = None,
    progress: ProgressCallback | None = None,
) -> AdvisorReport:
    """
    Analyze raw text and render both outputs: compact JSON and the XML export.

    The XML is an empty string when no groups were built.
    """
    started = time.monotonic()
    logger.info("Analysis start rawLen=%d", len(raw or ""))

    result = analyze(raw, cancel_event=cancel_event, progress=progress)
    xml = export_document(result.groups) if result.groups else ""

    warnings = list(result.warnings)
    if not result.points and not warnings:
        warnings.append(NO_POINTS_WARNING)

    logger.info(
        "Analysis done entries=%d groups=%d rejected=%d warnings=%d in %.3fs",
        len(result.points),
        len(result.groups),
        len(result.rejects),
        len(warnings),
        time.monotonic() - started,
    )
    return AdvisorReport(
        result=result,
        analysis_json=result.to_json(),
        xml=xml,
        warnings=tuple(warnings),
    )
