"""
Plain-text rendering of offset tables and timelines.

Both front ends draw from these lines: the CLI prints them, the curses UI
writes them into its window and adds colour on top.
"""

from __future__ import annotations

import locale
import sys
from typing import Sequence

from .table import OffsetRow
from .timeline import HOURS_PER_DAY, TimelineEntry

# Box drawing styles (ASCII default, Unicode optional).
BOX_STYLES = {
    "ascii": {
        "tl": "+",
        "tr": "+",
        "bl": "+",
        "br": "+",
        "h": "-",
        "v": "|",
        "tee_l": "+",
        "tee_r": "+",
        "tee_u": "+",
        "tee_d": "+",
        "cross": "+",
        "mark": "#",
        "empty": ".",
    },
    "unicode": {
        "tl": "┌",
        "tr": "┐",
        "bl": "└",
        "br": "┘",
        "h": "─",
        "v": "│",
        "tee_l": "├",
        "tee_r": "┤",
        "tee_u": "┬",
        "tee_d": "┴",
        "cross": "┼",
        "mark": "█",
        "empty": "·",
    },
}

OFFSET_HEADER = "Time Offset"


def env_allows_unicode() -> bool:
    enc = (sys.stdout.encoding or "").lower()
    loc = (locale.getpreferredencoding(False) or "").lower()
    return "utf-8" in enc and "utf-8" in loc


def zone_label(zone: str, home_zone: str | None = None) -> str:
    if home_zone and zone == home_zone:
        return f"{zone} (home)"
    return zone


def render_table(
    rows: Sequence[OffsetRow],
    zones: Sequence[str],
    style: dict,
    home_zone: str | None = None,
) -> list[str]:
    headers = [OFFSET_HEADER] + [zone_label(z, home_zone) for z in zones]
    widths = [len(h) for h in headers]
    for row in rows:
        for i, text in enumerate((row.label,) + tuple(row.cells)):
            widths[i] = max(widths[i], len(text))

    def hline(left: str, right: str, inter: str) -> str:
        parts = [style["h"] * (w + 2) for w in widths]
        return left + inter.join(parts) + right

    def line(values: Sequence[str]) -> str:
        v = style["v"]
        cells = [f" {text:<{w}} " for text, w in zip(values, widths)]
        return v + v.join(cells) + v

    out = [
        hline(style["tl"], style["tr"], style["tee_u"]),
        line(headers),
        hline(style["tee_l"], style["tee_r"], style["cross"]),
    ]
    for row in rows:
        out.append(line((row.label,) + tuple(row.cells)))
    out.append(hline(style["bl"], style["br"], style["tee_d"]))
    return out


def timeline_label(entry: TimelineEntry, home_zone: str | None = None) -> str:
    label = f"{zone_label(entry.zone, home_zone)} {entry.hour:02d}:{entry.minute:02d}"
    if entry.day_delta.annotation:
        label += f" {entry.day_delta.annotation}"
    return label


def timeline_ruler() -> str:
    return "".join(f"{h:<6}" for h in range(0, HOURS_PER_DAY, 6))


def render_timeline(
    entries: Sequence[TimelineEntry],
    style: dict,
    home_zone: str | None = None,
) -> list[str]:
    labels = [timeline_label(e, home_zone) for e in entries]
    width = max((len(s) for s in labels), default=0)
    v = style["v"]
    out = [(" " * (width + 2) + timeline_ruler()).rstrip()]
    for entry, label in zip(entries, labels):
        cells = "".join(style["mark"] if on else style["empty"] for on in entry.hour_cells())
        out.append(f"{label:<{width}} {v}{cells}{v}")
    return out
