"""
Zone registry: canonical IANA identifiers, abbreviation aliases and
typo suggestions.
"""

from __future__ import annotations

import os
from typing import Iterable
from zoneinfo import available_timezones

DEFAULT_ZONE = "UTC"

# Common abbreviations. Several may point at one zone, never the reverse.
ZONE_ALIASES = {
    "UTC": "UTC",
    "GMT": "UTC",
    "EST": "America/New_York",
    "EDT": "America/New_York",
    "CST": "America/Chicago",
    "CDT": "America/Chicago",
    "MST": "America/Denver",
    "MDT": "America/Denver",
    "PST": "America/Los_Angeles",
    "PDT": "America/Los_Angeles",
    "CET": "Europe/Paris",
    "CEST": "Europe/Paris",
    "IST": "Asia/Kolkata",
    "JST": "Asia/Tokyo",
    "AEST": "Australia/Sydney",
    "ACST": "Australia/Adelaide",
    "AWST": "Australia/Perth",
    "SGT": "Asia/Singapore",
    "HKT": "Asia/Hong_Kong",
}

LOCALTIME_PATH = "/etc/localtime"
TIMEZONE_FILE = "/etc/timezone"


class ZoneRegistry:
    """Read-only view over the platform zone database plus aliases."""

    def __init__(
        self,
        zones: Iterable[str] | None = None,
        aliases: dict[str, str] | None = None,
    ) -> None:
        if zones is None:
            zones = available_timezones()
        self._zones = sorted(set(zones))
        self._zone_set = set(self._zones)
        self._folded = {z.lower(): z for z in self._zones}
        table = ZONE_ALIASES if aliases is None else aliases
        self._aliases = {k.upper(): v for k, v in table.items()}

    def all_zones(self) -> list[str]:
        return list(self._zones)

    def resolve_alias(self, text: str) -> str | None:
        if not isinstance(text, str):
            return None
        return self._aliases.get(text.strip().upper())

    def is_valid(self, text: str) -> bool:
        if not isinstance(text, str):
            return False
        if text in self._zone_set:
            return True
        return text in self._aliases.values()

    def lookup(self, text: str) -> str | None:
        """Map user input to a zone identifier, or None.

        Aliases win over identifiers, then an exact identifier, then a
        case-insensitive identifier match.
        """
        if not isinstance(text, str):
            return None
        s = text.strip()
        if not s:
            return None
        alias = self.resolve_alias(s)
        if alias is not None:
            return alias
        if s in self._zone_set:
            return s
        return self._folded.get(s.lower())

    def suggest(
        self,
        text: str,
        candidates: Iterable[str] | None = None,
        limit: int = 5,
    ) -> list[str]:
        """Identifiers containing `text`, prefix matches first, then shorter.

        The sort is stable so equal keys keep registry order.
        """
        query = (text or "").strip().lower()
        if not query or limit <= 0:
            return []
        pool = self._zones if candidates is None else list(candidates)
        matches = [z for z in pool if query in z.lower()]
        matches.sort(key=lambda z: (not z.lower().startswith(query), len(z)))
        return matches[:limit]

    def completions(self, text: str, limit: int = 8) -> list[str]:
        """Autocomplete options: aliases first, then identifiers."""
        query = (text or "").strip().lower()
        if not query:
            return []
        options: list[str] = []
        seen: set[str] = set()
        for name in list(self._aliases) + self._zones:
            if name in seen or query not in name.lower():
                continue
            seen.add(name)
            options.append(name)
            if len(options) >= limit:
                break
        return options


def local_zone_name(registry: ZoneRegistry | None = None) -> str:
    """Best-effort IANA name of the machine's zone, UTC when unknown."""
    known = registry.all_zones() if registry is not None else available_timezones()
    known = set(known)

    env = (os.environ.get("TZ") or "").strip().lstrip(":")
    if env in known:
        return env

    try:
        with open(TIMEZONE_FILE, "r", encoding="utf-8") as f:
            name = f.read().strip()
        if name in known:
            return name
    except OSError:
        pass

    try:
        target = os.path.realpath(LOCALTIME_PATH)
    except OSError:
        target = ""
    marker = "zoneinfo" + os.sep
    if marker in target:
        name = target.split(marker, 1)[1]
        if name.startswith("posix" + os.sep) or name.startswith("right" + os.sep):
            name = name.split(os.sep, 1)[1]
        if name in known:
            return name

    return DEFAULT_ZONE
