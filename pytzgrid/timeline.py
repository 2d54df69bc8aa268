"""24-hour timeline: which hour each zone occupies, and on which day."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from .resolve import ResolvedInstant

HOURS_PER_DAY = 24


class DayDelta(str, Enum):
    PREVIOUS = "previous"
    SAME = "same"
    NEXT = "next"

    @property
    def annotation(self) -> str:
        if self is DayDelta.PREVIOUS:
            return "(prev day)"
        if self is DayDelta.NEXT:
            return "(next day)"
        return ""


@dataclass(frozen=True)
class TimelineEntry:
    zone: str
    hour: int
    minute: int
    day_delta: DayDelta

    def hour_cells(self) -> list[bool]:
        return [h == self.hour for h in range(HOURS_PER_DAY)]


def map_timeline(
    instant: ResolvedInstant,
    zones: Sequence[str],
    reference_zone: str,
) -> list[TimelineEntry]:
    ref_date = instant.to_datetime(reference_zone).date()
    entries = []
    for tz in zones:
        local = instant.to_datetime(tz)
        diff = (local.date() - ref_date).days
        if diff == -1:
            delta = DayDelta.PREVIOUS
        elif diff == 1:
            delta = DayDelta.NEXT
        else:
            delta = DayDelta.SAME
        entries.append(TimelineEntry(tz, local.hour, local.minute, delta))
    return entries
