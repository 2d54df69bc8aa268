"""
Offset table: rows of wall-clock times around a resolved instant.

Each row shifts the absolute instant first and formats per zone second,
so every zone picks up the UTC offset in force at the shifted instant.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Sequence

from .errors import Failure, FailureKind
from .formatting import DEFAULT_FORMAT, format_instant
from .resolve import ResolvedInstant

MAX_ROWS = 2000

Formatter = Callable[[ResolvedInstant, str, str], str]


@dataclass(frozen=True)
class OffsetWindow:
    start: float = -1.0  # hours
    end: float = 2.0  # hours
    step: int = 15  # minutes

    @property
    def start_minutes(self) -> int:
        return int(round(self.start * 60))

    @property
    def end_minutes(self) -> int:
        return int(round(self.end * 60))

    def offsets(self) -> list[int]:
        """Minutes from start, start + k*step, up to and including end."""
        out = []
        m = self.start_minutes
        while m <= self.end_minutes:
            out.append(m)
            m += self.step
        return out

    def row_count(self) -> int:
        if self.step <= 0 or self.start_minutes > self.end_minutes:
            return 0
        return (self.end_minutes - self.start_minutes) // self.step + 1

    def validate(self) -> Failure | None:
        if not all(math.isfinite(v) for v in (self.start, self.end, self.step)):
            return Failure(FailureKind.INVALID_WINDOW, "Window values must be finite numbers.")
        if self.step <= 0:
            return Failure(FailureKind.INVALID_WINDOW, "Step must be a positive number of minutes.")
        if self.start > self.end:
            return Failure(FailureKind.INVALID_WINDOW, "Start offset is after end offset.")
        if self.row_count() > MAX_ROWS:
            return Failure(
                FailureKind.INVALID_WINDOW,
                f"Window would produce more than {MAX_ROWS} rows; use a larger step.",
            )
        return None


@dataclass(frozen=True)
class OffsetRow:
    offset_minutes: int
    label: str
    cells: tuple[str, ...]


def offset_label(minutes: int) -> str:
    sign = "+" if minutes >= 0 else "-"
    hours, mins = divmod(abs(minutes), 60)
    return f"{sign}{hours}:{mins:02d}"


def generate(
    instant: ResolvedInstant,
    zones: Sequence[str],
    window: OffsetWindow,
    kind: str = DEFAULT_FORMAT,
    formatter: Formatter = format_instant,
) -> list[OffsetRow] | Failure:
    zones = tuple(zones)
    if not zones:
        return Failure(FailureKind.EMPTY_ZONE_SET, "Please add at least one timezone.")
    problem = window.validate()
    if problem is not None:
        return problem

    offsets = window.offsets()
    if not (instant.shifted(offsets[0]).in_range() and instant.shifted(offsets[-1]).in_range()):
        return Failure(FailureKind.INVALID_WINDOW, "Window reaches outside the supported date range.")

    rows = []
    for m in offsets:
        shifted = instant.shifted(m)
        cells = tuple(formatter(shifted, tz, kind) for tz in zones)
        rows.append(OffsetRow(m, offset_label(m), cells))
    return rows
