"""Command line entry point: print one conversion, or start the TUI."""

from __future__ import annotations

import argparse
import logging
import sys

from .config import load_config, reset_config, save_config
from .convert import convert
from .errors import Failure
from .formatting import FORMAT_KINDS, format_instant
from .render import BOX_STYLES, env_allows_unicode, render_table, render_timeline
from .selection import ZoneSelection
from .table import OffsetWindow
from .zones import ZoneRegistry, local_zone_name

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="pytzgrid",
        description="Show a date/time across up to four time zones, with an offset table and a 24h timeline.",
    )
    ap.add_argument("when", nargs="*", help='Date/time text, e.g. "tomorrow 3pm" or 1710000000')
    ap.add_argument(
        "-z", "--zone", action="append", default=None,
        help="Zone identifier or abbreviation; repeat up to 4 times (default: saved zones)",
    )
    ap.add_argument("--start", type=float, default=None, help="Window start in hours, may be negative (default: -1)")
    ap.add_argument("--end", type=float, default=None, help="Window end in hours (default: 2)")
    ap.add_argument("--step", type=int, default=None, help="Row step in minutes (default: 15)")
    ap.add_argument("--format", choices=sorted(FORMAT_KINDS), default=None, help="Cell format (default: short)")
    ap.add_argument("--unicode", action="store_true", help="Use Unicode box drawing")
    ap.add_argument("--save", action="store_true", help="Remember zones, window and format for next time")
    ap.add_argument("--reset", action="store_true", help="Forget saved preferences before running")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging on stderr")
    return ap


def _report(failure: Failure) -> int:
    print(f"Error: {failure.describe()}", file=sys.stderr)
    return EXIT_USAGE


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    registry = ZoneRegistry()
    home = local_zone_name(registry)
    if args.reset:
        reset_config()
    prefs = load_config(registry, home)

    if args.zone:
        selection = ZoneSelection()
        for text in args.zone:
            result = selection.add(text, registry)
            if isinstance(result, Failure):
                return _report(result)
            selection = result
        prefs.selection = selection

    base = prefs.window
    prefs.window = OffsetWindow(
        base.start if args.start is None else args.start,
        base.end if args.end is None else args.end,
        base.step if args.step is None else args.step,
    )
    if args.format:
        prefs.format_kind = args.format
    if args.unicode:
        prefs.box_mode = "unicode"

    text = " ".join(args.when)
    if not text and sys.stdin.isatty() and sys.stdout.isatty():
        from .tui import run

        return run(prefs, registry, home)

    result = convert(text, prefs.selection, prefs.window, prefs.format_kind)
    if isinstance(result, Failure):
        return _report(result)

    if args.save:
        save_config(prefs)

    mode = prefs.box_mode if env_allows_unicode() else "ascii"
    style = BOX_STYLES[mode]
    ref = result.reference_zone
    print(f"Input: {text}")
    print(f"Resolved ({ref}): {format_instant(result.instant, ref, 'full')}")
    print()
    for line in render_timeline(result.timeline, style, home):
        print(line)
    print()
    for line in render_table(result.rows, result.zones, style, home):
        print(line)
    return EXIT_OK


def run() -> int:
    try:
        return main()
    except KeyboardInterrupt:
        return EXIT_OK
    except Exception as exc:
        logger.debug("fatal", exc_info=True)
        print(f"Fatal error: {exc}", file=sys.stderr)
        return EXIT_FATAL


if __name__ == "__main__":
    raise SystemExit(run())
