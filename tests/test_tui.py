from __future__ import annotations

import curses
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from pytzgrid import tui
from pytzgrid.config import CONFIG_ENV, Preferences
from pytzgrid.selection import ZoneSelection
from pytzgrid.zones import ZoneRegistry


def type_text(state: dict, text: str) -> None:
    for ch in text:
        tui.handle_input(ord(ch), state)


class TestTuiState(unittest.TestCase):
    """Key handling and actions, without a terminal."""

    @classmethod
    def setUpClass(cls) -> None:
        cls.registry = ZoneRegistry()

    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.path = str(Path(self._tmp.name) / "prefs.json")
        self._env = mock.patch.dict(os.environ, {CONFIG_ENV: self.path})
        self._env.start()
        prefs = Preferences(selection=ZoneSelection(("UTC",)))
        self.state = tui.new_state(None, prefs, self.registry, "UTC")
        tui.compute_results(self.state)

    def tearDown(self) -> None:
        self._env.stop()
        self._tmp.cleanup()

    def focus(self, name: str) -> None:
        self.state["focus"] = tui.FIELDS.index(name)

    def test_starts_with_now(self) -> None:
        self.assertEqual(self.state["error"], "")
        self.assertIsNotNone(self.state["conversion"])
        self.assertEqual(len(self.state["conversion"].rows), 13)

    def test_add_zone_through_completion(self) -> None:
        self.focus("zone")
        type_text(self.state, "tokyo")
        self.assertEqual(self.state["completions"], ["Asia/Tokyo"])
        tui.handle_input(curses.KEY_DOWN, self.state)
        tui.handle_input(10, self.state)
        self.assertEqual(self.state["prefs"].selection.zones, ("UTC", "Asia/Tokyo"))
        self.assertEqual(self.state["text"]["zone"], "")
        self.assertEqual(self.state["conversion"].zones, ("UTC", "Asia/Tokyo"))
        self.assertTrue(os.path.exists(self.path))

    def test_unknown_zone_sets_error(self) -> None:
        self.focus("zone")
        type_text(self.state, "Pari")
        tui.handle_input(10, self.state)
        self.assertIn("Did you mean: Europe/Paris", self.state["error"])

    def test_edit_when_and_convert(self) -> None:
        self.focus("when")
        for _ in range(3):
            tui.handle_input(curses.KEY_BACKSPACE, self.state)
        type_text(self.state, "1710000000")
        tui.handle_input(10, self.state)
        self.assertEqual(self.state["conversion"].instant.epoch_ms, 1710000000000)

    def test_bad_window_field(self) -> None:
        self.focus("step")
        type_text(self.state, "x")
        tui.handle_input(10, self.state)
        self.assertIn("must be numbers", self.state["error"])
        self.assertIsNone(self.state["conversion"])

    def test_tags_remove_and_reorder(self) -> None:
        self.state["prefs"].selection = ZoneSelection(("UTC", "Asia/Tokyo", "Europe/Paris"))
        self.focus("tags")
        tui.handle_input(curses.KEY_RIGHT, self.state)
        tui.handle_input(ord("<"), self.state)
        self.assertEqual(self.state["prefs"].selection.zones, ("Asia/Tokyo", "UTC", "Europe/Paris"))
        self.assertEqual(self.state["tag_idx"], 0)
        tui.handle_input(ord("x"), self.state)
        self.assertEqual(self.state["prefs"].selection.zones, ("UTC", "Europe/Paris"))

    def test_format_cycles_and_quit(self) -> None:
        tui.handle_input(curses.KEY_F2, self.state)
        self.assertEqual(self.state["prefs"].format_kind, "long")
        tui.handle_input(tui.KEY_ESC, self.state)
        self.assertTrue(self.state["quit"])


if __name__ == "__main__":
    unittest.main(verbosity=2)
