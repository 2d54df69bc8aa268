from __future__ import annotations

import io
import json
import os
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from datetime import datetime, timezone
from pathlib import Path
from unittest import mock

from pytzgrid.cli import EXIT_OK, EXIT_USAGE, main
from pytzgrid.config import CONFIG_ENV
from pytzgrid.convert import Conversion, convert
from pytzgrid.errors import Failure, FailureKind
from pytzgrid.table import OffsetWindow
from pytzgrid.timeline import DayDelta

NOW = datetime(2024, 3, 6, 17, 0, tzinfo=timezone.utc)


class TestConvert(unittest.TestCase):
    def test_resolves_in_first_zone_and_fans_out(self) -> None:
        out = convert("9am", ["Asia/Tokyo", "America/New_York"], OffsetWindow(-1, 2, 15), now=NOW)
        self.assertIsInstance(out, Conversion)
        self.assertEqual(out.reference_zone, "Asia/Tokyo")
        self.assertEqual(len(out.rows), 13)
        self.assertEqual(out.rows[4].cells, ("2024-03-07 09:00", "2024-03-06 19:00"))
        self.assertEqual([e.day_delta for e in out.timeline], [DayDelta.SAME, DayDelta.PREVIOUS])

    def test_failures_pass_through(self) -> None:
        window = OffsetWindow()
        self.assertIs(convert("", ["UTC"], window).kind, FailureKind.EMPTY_INPUT)
        self.assertIs(convert("3pm", [], window).kind, FailureKind.EMPTY_ZONE_SET)
        self.assertIs(convert("banana", ["UTC"], window).kind, FailureKind.UNPARSEABLE)
        bad = convert("3pm", ["UTC"], OffsetWindow(0, 1, 0), now=NOW)
        self.assertIsInstance(bad, Failure)
        self.assertIs(bad.kind, FailureKind.INVALID_WINDOW)

    def test_far_future_timestamp_is_a_failure(self) -> None:
        out = convert("253402300799000", ["UTC", "Pacific/Kiritimati"], OffsetWindow(-1, 2, 15), now=NOW)
        self.assertIsInstance(out, Failure)
        self.assertIs(out.kind, FailureKind.UNPARSEABLE)


class TestCommandLine(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.path = str(Path(self._tmp.name) / "prefs.json")
        self._env = mock.patch.dict(os.environ, {CONFIG_ENV: self.path, "TZ": "UTC"})
        self._env.start()

    def tearDown(self) -> None:
        self._env.stop()
        self._tmp.cleanup()

    def run_cli(self, *argv: str) -> tuple[int, str, str]:
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            code = main(list(argv))
        return code, out.getvalue(), err.getvalue()

    def test_prints_table_and_timeline(self) -> None:
        code, out, err = self.run_cli(
            "2024-03-10", "01:45", "-z", "EST", "-z", "UTC", "--start", "0", "--end", "1",
        )
        self.assertEqual(code, EXIT_OK, err)
        self.assertIn("Resolved (America/New_York): 2024-03-10 01:45:00 EST (-05:00)", out)
        self.assertIn("2024-03-10 03:00", out)
        self.assertNotIn("2024-03-10 02:00", out)
        self.assertIn("UTC (home)", out)
        self.assertFalse(os.path.exists(self.path))

    def test_save_writes_preferences(self) -> None:
        code, _, err = self.run_cli("1710000000", "-z", "Asia/Tokyo", "--step", "30", "--format", "long", "--save")
        self.assertEqual(code, EXIT_OK, err)
        data = json.loads(Path(self.path).read_text(encoding="utf-8"))
        self.assertEqual(data["zones"], ["Asia/Tokyo"])
        self.assertEqual(data["format"], "long")
        self.assertEqual(data["window"]["step"], 30)

    def test_unknown_zone_is_a_usage_error(self) -> None:
        code, out, err = self.run_cli("now", "-z", "Pari")
        self.assertEqual(code, EXIT_USAGE)
        self.assertEqual(out, "")
        self.assertIn("Invalid timezone: Pari.", err)
        self.assertIn("Did you mean", err)

    def test_too_many_zones(self) -> None:
        zones = ["UTC", "JST", "EST", "CET", "IST"]
        argv = ["now"]
        for z in zones:
            argv += ["-z", z]
        code, _, err = self.run_cli(*argv)
        self.assertEqual(code, EXIT_USAGE)
        self.assertIn("Maximum of 4 timezones", err)

    def test_bad_window_and_bad_text(self) -> None:
        code, _, err = self.run_cli("now", "--start", "3", "--end", "1")
        self.assertEqual(code, EXIT_USAGE)
        self.assertIn("Start offset is after end offset", err)
        code, _, err = self.run_cli("banana")
        self.assertEqual(code, EXIT_USAGE)
        self.assertIn("Could not understand", err)


if __name__ == "__main__":
    unittest.main(verbosity=2)
