"""Failure values returned by the engine instead of raising."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class FailureKind(str, Enum):
    EMPTY_INPUT = "EmptyInput"
    UNPARSEABLE = "Unparseable"
    EMPTY_ZONE_SET = "EmptyZoneSet"
    INVALID_WINDOW = "InvalidWindow"
    UNKNOWN_ZONE = "UnknownZone"
    CAPACITY_EXCEEDED = "CapacityExceeded"


@dataclass(frozen=True)
class Failure:
    kind: FailureKind
    message: str
    text: str | None = None
    suggestions: tuple[str, ...] = ()

    def describe(self) -> str:
        """One line for the presentation layer, suggestions included."""
        if self.kind is FailureKind.UNKNOWN_ZONE:
            if self.suggestions:
                return f"{self.message} Did you mean: {', '.join(self.suggestions)}?"
            return f"{self.message} Try typing a few letters to see available options."
        return self.message
