from __future__ import annotations

import unittest
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from pytzgrid.errors import Failure, FailureKind
from pytzgrid.resolve import DateutilParser, ResolvedInstant, resolve

# Wednesday 2024-03-06, 12:00 in New York, 02:00 Thursday in Tokyo.
NOW = datetime(2024, 3, 6, 17, 0, tzinfo=timezone.utc)
NY = "America/New_York"


def utc(*args: int) -> ResolvedInstant:
    return ResolvedInstant.from_datetime(datetime(*args, tzinfo=timezone.utc))


class RecordingParser:
    def __init__(self, result: datetime | None) -> None:
        self.result = result
        self.calls: list[tuple[str, str, datetime]] = []

    def parse(self, text: str, reference_zone: str, now: datetime) -> datetime | None:
        self.calls.append((text, reference_zone, now))
        return self.result


class TestResolveContract(unittest.TestCase):
    def test_empty_input_skips_parser(self) -> None:
        parser = RecordingParser(NOW)
        for text in ("", "   ", "\t\n"):
            out = resolve(text, NY, parser=parser, now=NOW)
            self.assertIsInstance(out, Failure)
            self.assertIs(out.kind, FailureKind.EMPTY_INPUT)
        self.assertEqual(parser.calls, [])

    def test_unparseable_carries_original_text(self) -> None:
        parser = RecordingParser(None)
        out = resolve("  gibberish ", NY, parser=parser, now=NOW)
        self.assertIsInstance(out, Failure)
        self.assertIs(out.kind, FailureKind.UNPARSEABLE)
        self.assertEqual(out.text, "  gibberish ")

    def test_parser_gets_trimmed_text_and_reference_zone(self) -> None:
        parser = RecordingParser(NOW)
        out = resolve("  noon  ", "Asia/Tokyo", parser=parser, now=NOW)
        self.assertEqual(parser.calls, [("noon", "Asia/Tokyo", NOW)])
        self.assertEqual(out, ResolvedInstant.from_datetime(NOW))

    def test_naive_parser_result_is_read_in_reference_zone(self) -> None:
        parser = RecordingParser(datetime(2024, 3, 6, 15, 0))
        out = resolve("3pm", NY, parser=parser, now=NOW)
        self.assertEqual(out, utc(2024, 3, 6, 20, 0))


class TestResolvedInstant(unittest.TestCase):
    def test_requires_aware_datetime(self) -> None:
        with self.assertRaises(ValueError):
            ResolvedInstant.from_datetime(datetime(2024, 1, 1))

    def test_zone_views_and_shift(self) -> None:
        instant = utc(2024, 3, 10, 6, 45)
        self.assertEqual(instant.epoch_ms, 1710053100000)
        local = instant.to_datetime(NY)
        self.assertEqual((local.hour, local.minute), (1, 45))
        self.assertEqual(instant.shifted(15).to_datetime(NY).hour, 3)
        self.assertEqual(instant.shifted(-60).epoch_ms, instant.epoch_ms - 3_600_000)


class TestDateutilParser(unittest.TestCase):
    def check(self, text: str, expected: ResolvedInstant, zone: str = NY) -> None:
        out = resolve(text, zone, parser=DateutilParser(), now=NOW)
        self.assertNotIsInstance(out, Failure, text)
        self.assertEqual(out, expected, f"{text!r} -> {out.to_datetime(zone)}")

    def test_clock_times_use_reference_zone_calendar(self) -> None:
        self.check("3pm", utc(2024, 3, 6, 20, 0))
        self.check("15:00", utc(2024, 3, 6, 20, 0))
        # Already Thursday in Tokyo.
        self.check("3pm", utc(2024, 3, 7, 6, 0), zone="Asia/Tokyo")

    def test_relative_days(self) -> None:
        self.check("now", ResolvedInstant.from_datetime(NOW))
        self.check("today", utc(2024, 3, 6, 5, 0))
        self.check("tomorrow at 3pm", utc(2024, 3, 7, 20, 0))
        self.check("Tomorrow 15:30", utc(2024, 3, 7, 20, 30))
        self.check("yesterday", utc(2024, 3, 5, 5, 0))

    def test_weekdays(self) -> None:
        self.check("next friday", utc(2024, 3, 8, 5, 0))
        self.check("friday 9am", utc(2024, 3, 8, 14, 0))
        self.check("wednesday", utc(2024, 3, 6, 5, 0))
        self.check("next wednesday", utc(2024, 3, 13, 4, 0))
        self.check("last monday", utc(2024, 3, 4, 5, 0))

    def test_relative_amounts(self) -> None:
        self.check("in 2 hours", utc(2024, 3, 6, 19, 0))
        self.check("90 minutes ago", utc(2024, 3, 6, 15, 30))
        self.check("in 1 day", utc(2024, 3, 7, 17, 0))

    def test_unix_timestamps(self) -> None:
        self.check("1710000000", utc(2024, 3, 9, 16, 0))
        self.check("1710000000000", utc(2024, 3, 9, 16, 0))
        self.check("1710000000.5", ResolvedInstant(1710000000500))

    def test_absolute_dates_and_explicit_zones(self) -> None:
        self.check("2024-03-10 01:45", utc(2024, 3, 10, 6, 45))
        self.check("March 10, 2024 1:45am", utc(2024, 3, 10, 6, 45))
        self.check("2024-03-10T12:00:00+02:00", utc(2024, 3, 10, 10, 0))
        self.check("3pm PST", utc(2024, 3, 6, 23, 0))
        self.check("3pm pst", utc(2024, 3, 6, 23, 0))

    def test_rejects_nonsense(self) -> None:
        for text in ("banana", "tomorrow banana"):
            out = resolve(text, NY, parser=DateutilParser(), now=NOW)
            self.assertIsInstance(out, Failure, text)
            self.assertIs(out.kind, FailureKind.UNPARSEABLE)

    def test_rejects_out_of_range_relative_amounts(self) -> None:
        for text in ("in 100000 years", "99999999999 minutes ago", "in 9999999999999 hours"):
            out = resolve(text, NY, parser=DateutilParser(), now=NOW)
            self.assertIsInstance(out, Failure, text)
            self.assertIs(out.kind, FailureKind.UNPARSEABLE)

    def test_rejects_instants_at_the_edge_of_the_calendar(self) -> None:
        for text in ("253402300799000", "-62135596800", "9999-12-31 23:00"):
            out = resolve(text, NY, parser=DateutilParser(), now=NOW)
            self.assertIsInstance(out, Failure, text)
            self.assertIs(out.kind, FailureKind.UNPARSEABLE)
            self.assertEqual(out.text, text)
        self.check("9999-12-30 12:00", utc(9999, 12, 30, 17, 0))

    def test_parser_returns_aware_datetimes(self) -> None:
        dt = DateutilParser().parse("tomorrow", NY, NOW)
        self.assertEqual(dt.tzinfo, ZoneInfo(NY))


if __name__ == "__main__":
    unittest.main(verbosity=2)
