"""Zone-aware wall-clock rendering of resolved instants."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Callable
from zoneinfo import ZoneInfo

from .resolve import ResolvedInstant

WEEKDAY_NAMES = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
MONTH_NAMES = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


def format_offset(offset: timedelta | None, with_colon: bool = True) -> str:
    if offset is None:
        return "+00:00" if with_colon else "+0000"
    total = int(offset.total_seconds())
    sign = "+" if total >= 0 else "-"
    total = abs(total)
    hours, rem = divmod(total, 3600)
    minutes = rem // 60
    if with_colon:
        return f"{sign}{hours:02d}:{minutes:02d}"
    return f"{sign}{hours:02d}{minutes:02d}"


def format_dt_short(dt: datetime) -> str:
    return f"{dt:%Y-%m-%d %H:%M}"


def format_dt_long(dt: datetime) -> str:
    wd = WEEKDAY_NAMES[dt.weekday()]
    mon = MONTH_NAMES[dt.month - 1]
    tzname = dt.tzname() or "UTC"
    return f"{wd}, {mon} {dt.day:02d}, {dt.year} {dt:%H:%M} {tzname}"


def format_dt_full(dt: datetime) -> str:
    base = f"{dt:%Y-%m-%d %H:%M:%S}"
    tzname = dt.tzname() or "UTC"
    off = format_offset(dt.utcoffset(), with_colon=True)
    return f"{base} {tzname} ({off})"


def format_dt_compact(dt: datetime) -> str:
    base = f"{dt:%Y-%m-%d %H:%M}"
    tzname = dt.tzname() or "UTC"
    off = format_offset(dt.utcoffset(), with_colon=False)
    return f"{base} {tzname}{off}"


FORMAT_KINDS: dict[str, Callable[[datetime], str]] = {
    "short": format_dt_short,
    "long": format_dt_long,
    "full": format_dt_full,
    "compact": format_dt_compact,
}

DEFAULT_FORMAT = "short"


def next_format(kind: str) -> str:
    kinds = list(FORMAT_KINDS)
    if kind not in FORMAT_KINDS:
        return DEFAULT_FORMAT
    return kinds[(kinds.index(kind) + 1) % len(kinds)]


def format_instant(instant: ResolvedInstant, zone: str, kind: str = DEFAULT_FORMAT) -> str:
    """Render `instant` on the wall clock of `zone`.

    The zone's UTC offset is looked up at `instant` itself, so two calls a
    few minutes apart may straddle a DST transition.
    """
    try:
        fmt = FORMAT_KINDS[kind]
    except KeyError:
        raise ValueError(f"Unknown format kind: {kind!r}") from None
    return fmt(instant.to_datetime().astimezone(ZoneInfo(zone)))
