"""Coalesce points into capacity- and gap-bounded read groups per (function code, unit kind)."""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from threading import Event
from typing import Iterable, Mapping

from .errors import check_cancelled
from .types import DEFAULT_LIMITS, Group, GroupLimits, Point, UnitKind

logger = logging.getLogger(__name__)


@dataclass
class _OpenGroup:
    """Group being grown by the sweep; frozen into a Group once closed."""

    start: int
    end: int
    units: int
    entries: list[Point] = field(default_factory=list)
    has_gaps: bool = False

    @classmethod
    def starting_at(cls, p: Point) -> "_OpenGroup":
        return cls(start=p.address, end=p.end_address, units=p.length, entries=[p])


def _sweep(points: list[Point], limits: GroupLimits) -> list[_OpenGroup]:
    """
    Greedy pass over address-sorted points of one partition.

    A new group starts when the gap to the current end exceeds limits.max_gap
    or the summed lengths would exceed limits.capacity.
    """
    closed: list[_OpenGroup] = []
    cur: _OpenGroup | None = None
    for p in points:
        if cur is None:
            cur = _OpenGroup.starting_at(p)
            continue
        gap = p.address - cur.end - 1
        if gap > limits.max_gap or cur.units + p.length > limits.capacity:
            closed.append(cur)
            cur = _OpenGroup.starting_at(p)
            continue
        cur.entries.append(p)
        cur.end = max(cur.end, p.end_address)
        cur.units += p.length
        if gap > 0:
            cur.has_gaps = True
    if cur is not None:
        closed.append(cur)
    return closed


def partition_points(points: Iterable[Point]) -> dict[tuple[int, UnitKind], list[Point]]:
    """Split points by (function_code, unit_kind); each list sorted by address (stable)."""
    by_key: dict[tuple[int, UnitKind], list[Point]] = defaultdict(list)
    for p in points:
        by_key[(p.function_code, p.unit_kind)].append(p)
    return {key: sorted(pts, key=lambda p: p.address) for key, pts in by_key.items()}


def build_groups(
    points: Iterable[Point],
    *,
    limits: Mapping[UnitKind, GroupLimits] = DEFAULT_LIMITS,
    cancel_event: Event | None = None,
) -> list[Group]:
    """
    Build read groups for the given points.

    Groups are ordered by (function_code, unit_kind, start_address) and numbered
    from 1 in that order, independent of input order.
    """
    drafts: list[tuple[int, UnitKind, _OpenGroup]] = []
    for (fc, kind), pts in partition_points(points).items():
        check_cancelled(cancel_event)
        swept = _sweep(pts, limits[kind])
        logger.debug("FC%d %s: %d points -> %d groups", fc, kind.value, len(pts), len(swept))
        drafts.extend((fc, kind, g) for g in swept)

    drafts.sort(key=lambda d: (d[0], d[1].value, d[2].start))
    return [
        Group(
            id=i,
            function_code=fc,
            unit_kind=kind,
            start_address=g.start,
            end_address=g.end,
            total_units=g.units,
            has_gaps=g.has_gaps,
            entries=tuple(g.entries),
        )
        for i, (fc, kind, g) in enumerate(drafts, start=1)
    ]
