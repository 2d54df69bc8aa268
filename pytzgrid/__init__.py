"""pytzgrid: one date/time across several time zones.

Public API:
  - ZoneRegistry, ZoneSelection: which zones exist and which are shown
  - resolve: free text + reference zone -> ResolvedInstant
  - generate, map_timeline: offset table and 24h timeline for an instant
  - convert: all of the above for one request
"""

from __future__ import annotations

from .convert import Conversion, convert
from .errors import Failure, FailureKind
from .formatting import FORMAT_KINDS, format_instant
from .resolve import DateutilParser, InstantParser, ResolvedInstant, resolve
from .selection import MAX_ZONES, ZoneSelection
from .table import OffsetRow, OffsetWindow, generate, offset_label
from .timeline import DayDelta, TimelineEntry, map_timeline
from .zones import ZONE_ALIASES, ZoneRegistry, local_zone_name

__version__ = "0.1.0"

__all__ = [
    "Conversion",
    "DateutilParser",
    "DayDelta",
    "FORMAT_KINDS",
    "Failure",
    "FailureKind",
    "InstantParser",
    "MAX_ZONES",
    "OffsetRow",
    "OffsetWindow",
    "ResolvedInstant",
    "TimelineEntry",
    "ZONE_ALIASES",
    "ZoneRegistry",
    "ZoneSelection",
    "convert",
    "format_instant",
    "generate",
    "local_zone_name",
    "map_timeline",
    "offset_label",
    "resolve",
]
