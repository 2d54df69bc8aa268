"""
The ordered set of zones shown side by side.

ZoneSelection is a value: every operation returns a new selection (or a
Failure) and the caller decides whether to keep and persist it. The first
zone is the reference zone for interpreting input.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator

from .errors import Failure, FailureKind
from .zones import DEFAULT_ZONE, ZoneRegistry

MAX_ZONES = 4
SUGGESTION_LIMIT = 3


@dataclass(frozen=True)
class ZoneSelection:
    zones: tuple[str, ...] = ()

    def __iter__(self) -> Iterator[str]:
        return iter(self.zones)

    def __len__(self) -> int:
        return len(self.zones)

    def __contains__(self, zone: object) -> bool:
        return zone in self.zones

    @property
    def reference(self) -> str | None:
        return self.zones[0] if self.zones else None

    @property
    def is_full(self) -> bool:
        return len(self.zones) >= MAX_ZONES

    @classmethod
    def default(cls, local_zone: str | None = None) -> "ZoneSelection":
        return cls((local_zone or DEFAULT_ZONE,))

    @classmethod
    def from_list(cls, items: Iterable[object], registry: ZoneRegistry) -> "ZoneSelection":
        """Rebuild a selection from persisted data, dropping anything invalid."""
        zones: list[str] = []
        for item in items:
            if not isinstance(item, str):
                continue
            tz = registry.lookup(item)
            if tz is None or tz in zones:
                continue
            zones.append(tz)
            if len(zones) >= MAX_ZONES:
                break
        return cls(tuple(zones))

    def add(self, text: str, registry: ZoneRegistry) -> "ZoneSelection | Failure":
        s = (text or "").strip()
        if not s:
            return self
        if self.is_full:
            return Failure(
                FailureKind.CAPACITY_EXCEEDED,
                f"Maximum of {MAX_ZONES} timezones allowed.",
                text=s,
            )
        tz = registry.lookup(s)
        if tz is None:
            return Failure(
                FailureKind.UNKNOWN_ZONE,
                f"Invalid timezone: {s}.",
                text=s,
                suggestions=tuple(registry.suggest(s, limit=SUGGESTION_LIMIT)),
            )
        if tz in self.zones:
            return self
        return ZoneSelection(self.zones + (tz,))

    def remove(self, zone: str) -> "ZoneSelection":
        return ZoneSelection(tuple(z for z in self.zones if z != zone))

    def move(self, zone: str, delta: int) -> "ZoneSelection":
        if zone not in self.zones:
            return self
        items = list(self.zones)
        idx = items.index(zone)
        new_idx = max(0, min(len(items) - 1, idx + delta))
        items.insert(new_idx, items.pop(idx))
        return ZoneSelection(tuple(items))
