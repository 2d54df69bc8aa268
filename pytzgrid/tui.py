"""
Interactive time zone grid (curses).

- Free-text "When" field resolved in the first selected zone
- Offset window fields (start/end hours, step minutes)
- Up to four zones, added by name or abbreviation with live completions
- 24h timeline and scrollable offset table
"""

from __future__ import annotations

import curses
import locale
import os
import sys
import time
from datetime import datetime, timezone

from .config import Preferences, load_config, reset_config, save_config
from .convert import convert
from .errors import Failure, FailureKind
from .formatting import format_instant, next_format
from .render import (
    BOX_STYLES,
    env_allows_unicode,
    render_table,
    render_timeline,
    timeline_label,
    zone_label,
)
from .resolve import ResolvedInstant
from .selection import MAX_ZONES, ZoneSelection
from .table import OffsetWindow
from .zones import ZoneRegistry, local_zone_name

FIELDS = ["when", "start", "end", "step", "zone", "tags"]
TEXT_FIELDS = {"when", "start", "end", "step", "zone"}
WHEN_WIDTH = 40
NUM_WIDTH = 6
ZONE_WIDTH = 28
COMPLETION_LIMIT = 6

CP_HEADER = 1
CP_BORDER = 2
CP_ERROR = 3
CP_TEXT = 4
CP_ZONE_BASE = 10

# Tag / timeline colours, cycled per zone position.
ZONE_COLORS = [
    curses.COLOR_RED,
    curses.COLOR_BLUE,
    curses.COLOR_CYAN,
    curses.COLOR_GREEN,
    curses.COLOR_YELLOW,
    curses.COLOR_MAGENTA,
]

KEY_ESC = 27
ENTER_KEYS = (curses.KEY_ENTER, 10, 13)
BACKSPACE_KEYS = (curses.KEY_BACKSPACE, 127, 8)


# -----------------------------
# Drawing helpers
# -----------------------------

def safe_addstr(stdscr: curses.window, y: int, x: int, text: str, attr: int = 0) -> None:
    h, w = stdscr.getmaxyx()
    if y < 0 or y >= h or x < 0 or x >= w:
        return
    # Avoid writing into the bottom-right cell; it can raise ERR on some terminals.
    if y == h - 1 and x == w - 1:
        return
    max_len = w - x
    if y == h - 1:
        max_len -= 1
    if max_len <= 0:
        return
    try:
        stdscr.addstr(y, x, text[:max_len], attr)
    except curses.error:
        pass


def draw_field(
    stdscr: curses.window,
    y: int,
    x: int,
    label: str,
    value: str,
    width: int,
    focused: bool,
    cursor_pos: int,
) -> tuple[int, tuple[int, int] | None]:
    label_text = f"{label}: "
    safe_addstr(stdscr, y, x, label_text)
    x += len(label_text)

    safe_addstr(stdscr, y, x, "[")
    x += 1

    # Scroll long values so the cursor stays visible.
    offset = max(0, cursor_pos - width + 1)
    display = (value[offset:] + " " * width)[:width]
    safe_addstr(stdscr, y, x, display, curses.A_UNDERLINE if focused else 0)

    cursor = None
    if focused:
        cursor = (y, x + cursor_pos - offset)

    x += width
    safe_addstr(stdscr, y, x, "]")
    x += 1

    return x, cursor


def draw_hline(stdscr: curses.window, y: int, x: int, length: int, ch: str, attr: int = 0) -> None:
    if length <= 0:
        return
    safe_addstr(stdscr, y, x, ch * length, attr)


def clamp_scroll(scroll: int, height: int, total: int) -> int:
    if total <= height:
        return 0
    return max(0, min(scroll, total - height))


def zone_attr(state: dict, idx: int) -> int:
    if not state.get("colors"):
        return curses.A_REVERSE
    return curses.color_pair(CP_ZONE_BASE + (idx % len(ZONE_COLORS)))


# -----------------------------
# Colours and theme
# -----------------------------

def init_colors(state: dict) -> None:
    state["colors"] = False
    if not curses.has_colors():
        return
    try:
        curses.start_color()
        curses.use_default_colors()
        state["colors"] = True
    except curses.error:
        return
    apply_theme(state)


def apply_theme(state: dict) -> None:
    if not state.get("colors"):
        return
    dark = state["prefs"].theme == "dark"
    fg = curses.COLOR_WHITE if dark else curses.COLOR_BLACK
    bg = curses.COLOR_BLACK if dark else curses.COLOR_WHITE
    try:
        curses.init_pair(CP_TEXT, fg, bg)
        curses.init_pair(CP_HEADER, curses.COLOR_CYAN if dark else curses.COLOR_BLUE, bg)
        curses.init_pair(CP_BORDER, curses.COLOR_YELLOW if dark else curses.COLOR_MAGENTA, bg)
        curses.init_pair(CP_ERROR, curses.COLOR_RED, bg)
        for i, color in enumerate(ZONE_COLORS):
            curses.init_pair(CP_ZONE_BASE + i, curses.COLOR_BLACK, color)
    except curses.error:
        state["colors"] = False
        return
    state["stdscr"].bkgd(" ", curses.color_pair(CP_TEXT))


def apply_box_mode(state: dict, desired: str) -> None:
    if desired == "unicode" and not state.get("unicode_supported"):
        state["prefs"].box_mode = "ascii"
        state["message"] = "Unicode box drawing not supported; using ASCII."
    else:
        state["prefs"].box_mode = desired
    state["box_style"] = BOX_STYLES[state["prefs"].box_mode]


# -----------------------------
# Actions
# -----------------------------

def persist(state: dict) -> None:
    if not save_config(state["prefs"]):
        state["message"] = "Could not save preferences."


def read_window(state: dict) -> OffsetWindow | None:
    try:
        start = float(state["text"]["start"])
        end = float(state["text"]["end"])
        step = int(state["text"]["step"])
    except ValueError:
        state["error"] = "Window fields must be numbers (hours, hours, minutes)."
        return None
    return OffsetWindow(start, end, step)


def compute_results(state: dict) -> None:
    state["error"] = ""
    state["conversion"] = None
    window = read_window(state)
    if window is None:
        return
    prefs = state["prefs"]
    result = convert(state["text"]["when"], prefs.selection, window, prefs.format_kind)
    if isinstance(result, Failure):
        state["error"] = result.describe()
        return
    state["conversion"] = result
    if window != prefs.window:
        prefs.window = window
        persist(state)


def set_selection(state: dict, selection: ZoneSelection) -> None:
    state["prefs"].selection = selection
    state["tag_idx"] = max(0, min(state["tag_idx"], len(selection) - 1))
    persist(state)
    if state["text"]["when"].strip():
        compute_results(state)


def add_zone(state: dict) -> None:
    text = state["text"]["zone"]
    comps = state["completions"]
    if comps and 0 <= state["comp_idx"] < len(comps):
        text = comps[state["comp_idx"]]
    if not text.strip():
        return
    result = state["prefs"].selection.add(text, state["registry"])
    if isinstance(result, Failure):
        state["error"] = result.describe()
        if result.kind is FailureKind.CAPACITY_EXCEEDED:
            set_text(state, "zone", "")
        return
    state["error"] = ""
    set_text(state, "zone", "")
    set_selection(state, result)


def remove_zone(state: dict) -> None:
    zones = state["prefs"].selection.zones
    if not zones:
        return
    name = zones[state["tag_idx"]]
    set_selection(state, state["prefs"].selection.remove(name))
    state["message"] = f"Removed {name}."


def move_zone(state: dict, delta: int) -> None:
    zones = state["prefs"].selection.zones
    if not zones:
        return
    name = zones[state["tag_idx"]]
    selection = state["prefs"].selection.move(name, delta)
    state["tag_idx"] = selection.zones.index(name)
    set_selection(state, selection)


def reset_all(state: dict) -> None:
    reset_config()
    state["prefs"] = Preferences(selection=ZoneSelection.default(state["home"]))
    window = state["prefs"].window
    state["text"]["start"] = f"{window.start:g}"
    state["text"]["end"] = f"{window.end:g}"
    state["text"]["step"] = str(window.step)
    state["cursor"].update({k: len(state["text"][k]) for k in ("start", "end", "step")})
    state["tag_idx"] = 0
    apply_theme(state)
    apply_box_mode(state, state["prefs"].box_mode)
    state["message"] = "Zones and theme reset."
    compute_results(state)


def set_text(state: dict, field: str, value: str) -> None:
    state["text"][field] = value
    state["cursor"][field] = len(value)
    if field == "zone":
        state["completions"] = state["registry"].completions(value, COMPLETION_LIMIT)
        state["comp_idx"] = -1


# -----------------------------
# Input handling
# -----------------------------

def edit_text(state: dict, field: str, key: int) -> bool:
    text = state["text"][field]
    cur = state["cursor"][field]

    if key in (curses.KEY_LEFT,):
        state["cursor"][field] = max(0, cur - 1)
        return True
    if key in (curses.KEY_RIGHT,):
        state["cursor"][field] = min(len(text), cur + 1)
        return True
    if key in (curses.KEY_HOME,):
        state["cursor"][field] = 0
        return True
    if key in (curses.KEY_END,):
        state["cursor"][field] = len(text)
        return True
    if key in BACKSPACE_KEYS:
        if cur > 0:
            text = text[: cur - 1] + text[cur:]
            cur -= 1
    elif key in (curses.KEY_DC,):
        text = text[:cur] + text[cur + 1:]
    elif 32 <= key <= 126:
        text = text[:cur] + chr(key) + text[cur:]
        cur += 1
    else:
        return False

    state["text"][field] = text
    state["cursor"][field] = cur
    if field == "zone":
        state["completions"] = state["registry"].completions(text, COMPLETION_LIMIT)
        state["comp_idx"] = -1
    return True


def handle_input(key: int, state: dict) -> bool:
    if key == -1:
        return False

    if key in (KEY_ESC, curses.KEY_F10):
        state["quit"] = True
        return False

    if key == 9:  # Tab
        state["focus"] = (state["focus"] + 1) % len(FIELDS)
        return True
    if key in (curses.KEY_BTAB, 353):
        state["focus"] = (state["focus"] - 1) % len(FIELDS)
        return True

    if key == curses.KEY_F2:
        state["prefs"].format_kind = next_format(state["prefs"].format_kind)
        persist(state)
        compute_results(state)
        return True
    if key == curses.KEY_F3:
        state["prefs"].theme = "light" if state["prefs"].theme == "dark" else "dark"
        apply_theme(state)
        persist(state)
        return True
    if key == curses.KEY_F4:
        apply_box_mode(state, "ascii" if state["prefs"].box_mode == "unicode" else "unicode")
        persist(state)
        return True
    if key == curses.KEY_F5:
        reset_all(state)
        return True

    if key == curses.KEY_NPAGE:
        state["results_scroll"] += 3
        return True
    if key == curses.KEY_PPAGE:
        state["results_scroll"] -= 3
        return True

    field = FIELDS[state["focus"]]
    state["message"] = ""

    if field == "tags":
        count = len(state["prefs"].selection)
        if key == curses.KEY_LEFT and count:
            state["tag_idx"] = (state["tag_idx"] - 1) % count
            return True
        if key == curses.KEY_RIGHT and count:
            state["tag_idx"] = (state["tag_idx"] + 1) % count
            return True
        if key in BACKSPACE_KEYS + (curses.KEY_DC, ord("x"), ord("X")):
            remove_zone(state)
            return True
        if key == ord("<"):
            move_zone(state, -1)
            return True
        if key == ord(">"):
            move_zone(state, 1)
            return True
        return False

    if field == "zone":
        comps = state["completions"]
        if key == curses.KEY_DOWN and comps:
            state["comp_idx"] = min(len(comps) - 1, state["comp_idx"] + 1)
            return True
        if key == curses.KEY_UP and comps:
            state["comp_idx"] = max(-1, state["comp_idx"] - 1)
            return True
        if key in ENTER_KEYS:
            add_zone(state)
            return True

    if key in ENTER_KEYS:
        compute_results(state)
        return True

    if field in TEXT_FIELDS:
        return edit_text(state, field, key)
    return False


# -----------------------------
# Main screen render
# -----------------------------

def render_main(stdscr: curses.window, state: dict) -> None:
    stdscr.erase()
    h, w = stdscr.getmaxyx()
    style = state.get("box_style", BOX_STYLES["ascii"])
    prefs = state["prefs"]
    focus = FIELDS[state["focus"]]
    hdr = curses.color_pair(CP_HEADER) if state.get("colors") else curses.A_BOLD
    err = curses.color_pair(CP_ERROR) if state.get("colors") else curses.A_BOLD

    if w < 80 or h < 20:
        safe_addstr(stdscr, 0, 0, "Window too small. Need at least 80x20.")
        safe_addstr(stdscr, 1, 0, f"Current size: {w}x{h}.")
        stdscr.refresh()
        return

    def add(y: int, x: int, text: str, attr: int = 0) -> None:
        safe_addstr(stdscr, y, x, text, attr)

    add(0, 0, "pytzgrid - time zone offset grid", hdr)
    add(1, 0, "Tab=next field  Enter=convert/add  F2=format  F3=theme  F4=box  F5=reset  Esc=quit")

    ref = prefs.selection.reference
    if ref:
        now = ResolvedInstant.from_datetime(datetime.now(timezone.utc))
        add(2, 0, f"Now ({ref}): {format_instant(now, ref, 'full')}")
    else:
        add(2, 0, "Now: (no selected zones)")

    cursor_pos = None

    def field(y: int, x: int, name: str, label: str, width: int) -> int:
        nonlocal cursor_pos
        x, cur = draw_field(
            stdscr, y, x, label, state["text"][name], width,
            focus == name, state["cursor"][name],
        )
        if cur:
            cursor_pos = cur
        return x

    field(4, 0, "when", "When", WHEN_WIDTH)
    x = field(5, 0, "start", "Start h", NUM_WIDTH)
    x = field(5, x + 2, "end", "End h", NUM_WIDTH)
    x = field(5, x + 2, "step", "Step min", NUM_WIDTH)
    add(5, x + 2, f"Format: {prefs.format_kind}  Theme: {prefs.theme}")

    # Zone tags
    add(6, 0, "Zones: ")
    x = 7
    for i, tz in enumerate(prefs.selection):
        label = f" {zone_label(tz, state['home'])} "
        attr = zone_attr(state, i)
        if focus == "tags" and i == state["tag_idx"]:
            attr |= curses.A_REVERSE | curses.A_BOLD
        add(6, x, label, attr)
        x += len(label) + 1
    add(6, x, f"({len(prefs.selection)}/{MAX_ZONES})")
    if focus == "tags":
        add(6, x + 6, "<-/-> pick  x=remove  </>=move")

    x = field(7, 0, "zone", "Add zone", ZONE_WIDTH)
    comps = state["completions"]
    cx = x + 1
    for i, name in enumerate(comps):
        attr = curses.A_REVERSE if i == state["comp_idx"] else curses.A_DIM
        add(7, cx, name, attr)
        cx += len(name) + 2

    border = curses.color_pair(CP_BORDER) if state.get("colors") else 0
    draw_hline(stdscr, 8, 0, w, style["h"], border)

    line = 9
    if state["error"]:
        add(line, 0, f"Error: {state['error']}", err)
    elif state["message"]:
        add(line, 0, state["message"])
    line += 1

    conv = state["conversion"]
    if conv is None:
        add(line, 0, "Type a date/time (e.g. 'tomorrow 3pm', '2024-03-10 01:45', 1710000000) and press Enter.")
        finish(stdscr, cursor_pos)
        return

    add(line, 0, f"Resolved ({conv.reference_zone}): {format_instant(conv.instant, conv.reference_zone, 'full')}")
    line += 1

    # Timeline with the occupied hour in the zone colour
    tl_lines = render_timeline(conv.timeline, style, state["home"])
    label_w = max((len(timeline_label(e, state["home"])) for e in conv.timeline), default=0)
    add(line, 0, tl_lines[0], hdr)
    for i, (text, entry) in enumerate(zip(tl_lines[1:], conv.timeline)):
        y = line + 1 + i
        add(y, 0, text)
        add(y, label_w + 2 + entry.hour, style["mark"], zone_attr(state, i))
    line += len(tl_lines) + 1

    # Offset table: header fixed, body scrolls
    tbl = render_table(conv.rows, conv.zones, style, state["home"])
    head, body, foot = tbl[:3], tbl[3:-1], tbl[-1:]
    visible = max(1, h - line - len(head) - len(foot))
    state["results_scroll"] = clamp_scroll(state["results_scroll"], visible, len(body))
    start = state["results_scroll"]
    shown = head + body[start:start + visible] + foot
    for i, text in enumerate(shown):
        add(line + i, 0, text, hdr if i == 1 else 0)

    finish(stdscr, cursor_pos)


def finish(stdscr: curses.window, cursor_pos: tuple[int, int] | None) -> None:
    if cursor_pos:
        try:
            curses.curs_set(1)
        except curses.error:
            pass
        stdscr.move(cursor_pos[0], cursor_pos[1])
    else:
        try:
            curses.curs_set(0)
        except curses.error:
            pass
    stdscr.refresh()


# -----------------------------
# Main loop
# -----------------------------

def unicode_supported(stdscr: curses.window) -> bool:
    if not env_allows_unicode():
        return False
    try:
        # Use a 2x2 window so (0,0) is not the bottom-right cell.
        win = curses.newwin(2, 2, 0, 0)
        win.addstr(0, 0, BOX_STYLES["unicode"]["tl"])
        return True
    except curses.error:
        return False


def new_state(
    stdscr: curses.window,
    prefs: Preferences,
    registry: ZoneRegistry,
    home: str,
) -> dict:
    window = prefs.window
    text = {
        "when": "now",
        "start": f"{window.start:g}",
        "end": f"{window.end:g}",
        "step": str(window.step),
        "zone": "",
    }
    return {
        "stdscr": stdscr,
        "registry": registry,
        "home": home,
        "prefs": prefs,
        "text": text,
        "cursor": {k: len(v) for k, v in text.items()},
        "focus": 0,
        "tag_idx": 0,
        "completions": [],
        "comp_idx": -1,
        "results_scroll": 0,
        "conversion": None,
        "error": "",
        "message": "",
        "quit": False,
        "colors": False,
        "box_style": BOX_STYLES["ascii"],
        "unicode_supported": unicode_supported(stdscr),
    }


def main(
    stdscr: curses.window,
    prefs: Preferences | None = None,
    registry: ZoneRegistry | None = None,
    home: str | None = None,
) -> None:
    stdscr.timeout(200)
    stdscr.keypad(True)

    registry = registry or ZoneRegistry()
    home = home or local_zone_name(registry)
    if prefs is None:
        prefs = load_config(registry, home)

    state = new_state(stdscr, prefs, registry, home)
    init_colors(state)
    apply_box_mode(state, prefs.box_mode)
    compute_results(state)

    last_tick = 0.0
    while not state["quit"]:
        now = time.monotonic()
        key = stdscr.getch()
        changed = handle_input(key, state)
        if int(now) != int(last_tick) or changed:
            last_tick = now
            render_main(stdscr, state)


def run(
    prefs: Preferences | None = None,
    registry: ZoneRegistry | None = None,
    home: str | None = None,
) -> int:
    os.environ.setdefault("ESCDELAY", "25")
    try:
        # Enable wide-char support in curses based on the current locale.
        try:
            locale.setlocale(locale.LC_ALL, "")
        except locale.Error:
            pass
        curses.wrapper(main, prefs, registry, home)
        return 0
    except KeyboardInterrupt:
        return 0
    except Exception as exc:
        print(f"Fatal error: {exc}", file=sys.stderr)
        return 1
