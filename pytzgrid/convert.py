"""One conversion request: resolve once, then build table and timeline."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Sequence

from .errors import Failure, FailureKind
from .formatting import DEFAULT_FORMAT
from .resolve import InstantParser, ResolvedInstant, resolve
from .table import OffsetRow, OffsetWindow, generate
from .timeline import TimelineEntry, map_timeline


@dataclass(frozen=True)
class Conversion:
    instant: ResolvedInstant
    reference_zone: str
    zones: tuple[str, ...]
    rows: tuple[OffsetRow, ...]
    timeline: tuple[TimelineEntry, ...]


def convert(
    text: str,
    zones: Sequence[str],
    window: OffsetWindow,
    kind: str = DEFAULT_FORMAT,
    parser: InstantParser | None = None,
    now: datetime | None = None,
) -> Conversion | Failure:
    zones = tuple(zones)
    if not (text or "").strip():
        return Failure(FailureKind.EMPTY_INPUT, "Please enter a date/time string.", text=text)
    if not zones:
        return Failure(FailureKind.EMPTY_ZONE_SET, "Please add at least one timezone.")

    reference = zones[0]
    instant = resolve(text, reference, parser=parser, now=now)
    if isinstance(instant, Failure):
        return instant

    rows = generate(instant, zones, window, kind)
    if isinstance(rows, Failure):
        return rows
    timeline = map_timeline(instant, zones, reference)
    return Conversion(instant, reference, zones, tuple(rows), tuple(timeline))
