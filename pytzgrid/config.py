"""Preferences persisted between sessions in a small JSON file."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field

from .formatting import DEFAULT_FORMAT, FORMAT_KINDS
from .selection import ZoneSelection
from .table import OffsetWindow
from .zones import ZoneRegistry

logger = logging.getLogger(__name__)

CONFIG_PATH = os.path.join(os.path.expanduser("~"), ".pytzgrid.json")
CONFIG_ENV = "PYTZGRID_CONFIG"

THEMES = ("light", "dark")
BOX_MODES = ("ascii", "unicode")


@dataclass
class Preferences:
    selection: ZoneSelection
    theme: str = "light"
    box_mode: str = "ascii"
    format_kind: str = DEFAULT_FORMAT
    window: OffsetWindow = field(default_factory=OffsetWindow)

    def to_json(self) -> dict:
        return {
            "zones": list(self.selection.zones),
            "theme": self.theme,
            "box_drawing": self.box_mode,
            "format": self.format_kind,
            "window": {
                "start": self.window.start,
                "end": self.window.end,
                "step": self.window.step,
            },
        }


def config_path(path: str | None = None) -> str:
    if path:
        return path
    return os.environ.get(CONFIG_ENV) or CONFIG_PATH


def _read_window(data: object) -> OffsetWindow:
    default = OffsetWindow()
    if not isinstance(data, dict):
        return default
    try:
        start = float(data.get("start", default.start))
        end = float(data.get("end", default.end))
        step = int(data.get("step", default.step))
    except (TypeError, ValueError):
        return default
    window = OffsetWindow(start, end, step)
    if window.validate() is not None:
        return default
    return window


def load_config(registry: ZoneRegistry, local_zone: str, path: str | None = None) -> Preferences:
    prefs = Preferences(selection=ZoneSelection.default(local_zone))
    path = config_path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        return prefs
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", path, exc)
        return prefs

    if not isinstance(data, dict):
        logger.warning("Ignoring config %s: expected a JSON object", path)
        return prefs

    zones = data.get("zones")
    if isinstance(zones, list):
        selection = ZoneSelection.from_list(zones, registry)
        if len(selection):
            prefs.selection = selection

    theme = data.get("theme")
    if isinstance(theme, str) and theme.lower() in THEMES:
        prefs.theme = theme.lower()

    mode = data.get("box_drawing")
    if isinstance(mode, str) and mode.lower() in BOX_MODES:
        prefs.box_mode = mode.lower()

    kind = data.get("format")
    if isinstance(kind, str) and kind in FORMAT_KINDS:
        prefs.format_kind = kind

    prefs.window = _read_window(data.get("window"))
    return prefs


def save_config(prefs: Preferences, path: str | None = None) -> bool:
    path = config_path(path)
    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(prefs.to_json(), f, indent=2)
    except OSError as exc:
        logger.warning("Could not save config %s: %s", path, exc)
        return False
    return True


def reset_config(path: str | None = None) -> None:
    path = config_path(path)
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as exc:
        logger.warning("Could not remove config %s: %s", path, exc)
