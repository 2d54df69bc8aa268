"""
Instant resolution: free text + reference zone -> one absolute instant.

The resolver itself never interprets text. It trims, rejects empty input,
and hands everything else to an InstantParser configured with the
reference zone. DateutilParser is the default parser.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Protocol
from zoneinfo import ZoneInfo

from dateutil import parser as dateutil_parser
from dateutil.relativedelta import relativedelta
from dateutil.relativedelta import FR, MO, SA, SU, TH, TU, WE

from .errors import Failure, FailureKind
from .zones import ZONE_ALIASES

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
ONE_MS = timedelta(milliseconds=1)

# Magnitudes at or above this are read as epoch milliseconds.
MS_THRESHOLD = 100_000_000_000

# Supported instants keep a day clear of datetime's limits, so any zone
# offset applies without overflow.
MIN_INSTANT = datetime(1, 1, 2, tzinfo=timezone.utc)
MAX_INSTANT = datetime(9999, 12, 31, tzinfo=timezone.utc)
MIN_EPOCH_MS = (MIN_INSTANT - EPOCH) // ONE_MS
MAX_EPOCH_MS = (MAX_INSTANT - EPOCH) // ONE_MS


@dataclass(frozen=True)
class ResolvedInstant:
    epoch_ms: int

    @classmethod
    def from_datetime(cls, dt: datetime) -> "ResolvedInstant":
        if dt.tzinfo is None:
            raise ValueError("ResolvedInstant needs an aware datetime")
        return cls((dt - EPOCH) // ONE_MS)

    def to_datetime(self, zone: str | None = None) -> datetime:
        dt = EPOCH + timedelta(milliseconds=self.epoch_ms)
        if zone is None:
            return dt
        return dt.astimezone(ZoneInfo(zone))

    def shifted(self, minutes: float) -> "ResolvedInstant":
        return ResolvedInstant(self.epoch_ms + int(round(minutes * 60_000)))

    def in_range(self) -> bool:
        return MIN_EPOCH_MS <= self.epoch_ms <= MAX_EPOCH_MS


class InstantParser(Protocol):
    def parse(self, text: str, reference_zone: str, now: datetime) -> datetime | None:
        """Return an aware datetime, or None if the text is not understood."""


def resolve(
    text: str,
    reference_zone: str,
    parser: InstantParser | None = None,
    now: datetime | None = None,
) -> ResolvedInstant | Failure:
    s = (text or "").strip()
    if not s:
        return Failure(FailureKind.EMPTY_INPUT, "Please enter a date/time string.", text=text)

    if parser is None:
        parser = DateutilParser()
    if now is None:
        now = datetime.now(timezone.utc)

    logger.debug("resolving %r in %s", s, reference_zone)
    dt = parser.parse(s, reference_zone, now)
    if dt is None:
        return Failure(FailureKind.UNPARSEABLE, f"Could not understand {s!r}.", text=text)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=ZoneInfo(reference_zone))
    instant = ResolvedInstant.from_datetime(dt)
    if not instant.in_range():
        logger.debug("instant %s out of supported range", instant.epoch_ms)
        return Failure(FailureKind.UNPARSEABLE, f"{s!r} is outside the supported date range.", text=text)
    return instant


# -----------------------------
# dateutil-backed parser
# -----------------------------

_TIMESTAMP_RE = re.compile(r"^-?\d{9,}(?:\.\d+)?$")

_UNITS = "minute|min|hour|hr|day|week|month|year"
_IN_RE = re.compile(rf"\bin\s+(\d+)\s*({_UNITS})s?\b", re.IGNORECASE)
_AGO_RE = re.compile(rf"\b(\d+)\s*({_UNITS})s?\s+ago\b", re.IGNORECASE)
_DAY_RE = re.compile(r"\b(now|today|tomorrow|yesterday)\b", re.IGNORECASE)

_WEEKDAYS = {
    "mon": MO, "monday": MO,
    "tue": TU, "tues": TU, "tuesday": TU,
    "wed": WE, "wednesday": WE,
    "thu": TH, "thur": TH, "thurs": TH, "thursday": TH,
    "fri": FR, "friday": FR,
    "sat": SA, "saturday": SA,
    "sun": SU, "sunday": SU,
}
_WEEKDAY_RE = re.compile(
    r"\b(?:(next|last|this)\s+)?(" + "|".join(sorted(_WEEKDAYS, key=len, reverse=True)) + r")\b",
    re.IGNORECASE,
)
_FILLER_RE = re.compile(r"\b(?:at|on)\b|@|,", re.IGNORECASE)

_DAY_OFFSETS = {"today": 0, "tomorrow": 1, "yesterday": -1}


def _unit_delta(amount: int, unit: str) -> timedelta | relativedelta:
    unit = unit.lower()
    if unit in ("minute", "min"):
        return timedelta(minutes=amount)
    if unit in ("hour", "hr"):
        return timedelta(hours=amount)
    if unit == "day":
        return relativedelta(days=amount)
    if unit == "week":
        return relativedelta(weeks=amount)
    if unit == "month":
        return relativedelta(months=amount)
    return relativedelta(years=amount)


def _cut(text: str, m: re.Match) -> str:
    return text[: m.start()] + " " + text[m.end():]


class DateutilParser:
    """Loose human date/time parser on top of dateutil.

    Understands epoch timestamps (seconds or milliseconds), now / today /
    tomorrow / yesterday, weekday names with next/last/this, "in N units"
    and "N units ago", and hands whatever clock or calendar text remains to
    dateutil.parser with the relative day as its default. Naive results are
    read in the reference zone; an explicit offset or a known abbreviation
    in the text wins.
    """

    def __init__(self, aliases: dict[str, str] | None = None, dayfirst: bool = False) -> None:
        table = ZONE_ALIASES if aliases is None else aliases
        self.tzinfos = {abbr.upper(): ZoneInfo(name) for abbr, name in table.items()}
        self.dayfirst = dayfirst
        # dateutil only treats upper-case tokens as zone names.
        self._alias_re = re.compile(
            r"\b(" + "|".join(sorted(self.tzinfos, key=len, reverse=True)) + r")\b",
            re.IGNORECASE,
        )

    def parse(self, text: str, reference_zone: str, now: datetime) -> datetime | None:
        rest = " ".join(text.split())
        if _TIMESTAMP_RE.match(rest):
            return self._from_timestamp(rest)

        tz = ZoneInfo(reference_zone)
        local_now = now.astimezone(tz)
        anchored_now = False
        anchor_date = local_now.date()
        shifts: list[timedelta | relativedelta] = []

        m = _IN_RE.search(rest) or _AGO_RE.search(rest)
        if m:
            amount = int(m.group(1))
            if m.re is _AGO_RE:
                amount = -amount
            try:
                shifts.append(_unit_delta(amount, m.group(2)))
            except (ValueError, OverflowError) as exc:
                logger.debug("relative amount out of range in %r: %s", text, exc)
                return None
            anchored_now = True
            rest = _cut(rest, m)

        m = _DAY_RE.search(rest)
        if m:
            word = m.group(1).lower()
            if word == "now":
                anchored_now = True
            else:
                anchor_date = anchor_date + timedelta(days=_DAY_OFFSETS[word])
            rest = _cut(rest, m)

        m = _WEEKDAY_RE.search(rest)
        if m:
            qualifier = (m.group(1) or "").lower()
            anchor_date = self._weekday_date(anchor_date, qualifier, _WEEKDAYS[m.group(2).lower()])
            anchored_now = False
            rest = _cut(rest, m)

        rest = " ".join(_FILLER_RE.sub(" ", rest).split())
        rest = self._alias_re.sub(lambda am: am.group(1).upper(), rest)

        if rest:
            default = datetime(anchor_date.year, anchor_date.month, anchor_date.day)
            try:
                dt = dateutil_parser.parse(
                    rest,
                    default=default,
                    tzinfos=self.tzinfos,
                    dayfirst=self.dayfirst,
                )
            except (ValueError, OverflowError) as exc:
                logger.debug("dateutil rejected %r: %s", rest, exc)
                return None
            if dt.tzinfo is None:
                dt = dt.replace(tzinfo=tz)
        elif anchored_now:
            dt = local_now
        else:
            dt = datetime(anchor_date.year, anchor_date.month, anchor_date.day, tzinfo=tz)

        try:
            for shift in shifts:
                dt = self._apply(dt, shift)
        except (ValueError, OverflowError) as exc:
            logger.debug("shift out of range for %r: %s", text, exc)
            return None
        return dt

    @staticmethod
    def _from_timestamp(s: str) -> datetime | None:
        value = float(s)
        if abs(value) >= MS_THRESHOLD:
            value /= 1000.0
        try:
            return EPOCH + timedelta(seconds=value)
        except OverflowError:
            logger.debug("timestamp out of range: %s", s)
            return None

    @staticmethod
    def _weekday_date(today: date, qualifier: str, wd) -> date:
        # "next" skips today, "last" looks back, bare or "this" may be today.
        if qualifier == "next":
            return today + relativedelta(days=1, weekday=wd(+1))
        if qualifier == "last":
            return today + relativedelta(days=-1, weekday=wd(-1))
        return today + relativedelta(weekday=wd(+1))

    @staticmethod
    def _apply(dt: datetime, shift: timedelta | relativedelta) -> datetime:
        # Minutes and hours move the absolute instant, calendar units move
        # the wall clock.
        if isinstance(shift, timedelta):
            return (dt.astimezone(timezone.utc) + shift).astimezone(dt.tzinfo)
        return dt + shift
