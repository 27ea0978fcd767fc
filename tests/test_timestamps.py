"""Tests for org timestamp parsing."""

from datetime import datetime
from pathlib import Path
import sys

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "scripts"))

from lib.org_agenda.timestamps import (
    MalformedTimestamp,
    TimeInterval,
    find_loose_timeranges,
    next_prefix_timerange,
    next_timerange,
    parse_date_str,
    parse_timerange,
)


class TestParseTimerange:
    """Single stamps and double ranges."""

    def test_date_only_covers_whole_day(self):
        interval = parse_timerange("<2024-01-01 Mon>")
        assert interval == TimeInterval(datetime(2024, 1, 1), datetime(2024, 1, 2))

    def test_date_only_is_during_excludes_boundaries(self):
        interval = parse_timerange("2024-01-01")
        assert interval.is_during(datetime(2024, 1, 1, 0, 1))
        assert interval.is_during(datetime(2024, 1, 1, 23, 59))
        assert not interval.is_during(datetime(2024, 1, 1))
        assert not interval.is_during(datetime(2024, 1, 2))

    def test_point_in_time(self):
        interval = parse_timerange("2024-01-01 09:15")
        assert interval.start == interval.end == datetime(2024, 1, 1, 9, 15)
        assert not interval.is_during(datetime(2024, 1, 1, 9, 15))
        assert not interval.is_before(datetime(2024, 1, 1, 9, 15))
        assert interval.is_before(datetime(2024, 1, 1, 9, 16))

    def test_time_range(self):
        interval = parse_timerange("2024-01-01 Mon 09:00-10:30")
        assert interval.start == datetime(2024, 1, 1, 9, 0)
        assert interval.end == datetime(2024, 1, 1, 10, 30)

    def test_time_range_past_midnight_ends_next_day(self):
        interval = parse_timerange("<2024-01-01 Mon 23:00-01:00>")
        assert interval.start == datetime(2024, 1, 1, 23, 0)
        assert interval.end == datetime(2024, 1, 2, 1, 0)

    def test_double_range(self):
        interval = parse_timerange("<2024-01-01 09:00>--<2024-01-03 18:00>")
        assert interval.start == datetime(2024, 1, 1, 9, 0)
        assert interval.end == datetime(2024, 1, 3, 18, 0)

    def test_double_range_takes_start_of_each_side(self):
        interval = parse_timerange("<2024-01-01 Mon 09:00-10:00>--<2024-01-03 Wed>")
        assert interval.start == datetime(2024, 1, 1, 9, 0)
        assert interval.end == datetime(2024, 1, 3, 0, 0)

    def test_inactive_brackets_parse_like_active(self):
        assert parse_timerange("[2024-01-01 Mon 09:00]") == parse_timerange("<2024-01-01 Mon 09:00>")

    def test_repeater_suppresses_time(self):
        interval = parse_timerange("2024-01-01 +1w 09:00")
        assert interval == TimeInterval(datetime(2024, 1, 1), datetime(2024, 1, 2))

    def test_warning_period_after_day_name_is_date_only(self):
        start, end = parse_date_str("<2024-01-01 Mon -3d>")
        assert (start, end) == (datetime(2024, 1, 1), datetime(2024, 1, 2))

    def test_dot_repeater_is_date_only(self):
        start, end = parse_date_str("<2024-01-01 Mon .+1d>")
        assert (start, end) == (datetime(2024, 1, 1), datetime(2024, 1, 2))

    def test_repeater_after_time_keeps_time(self):
        interval = parse_timerange("<2024-01-01 Mon 09:00 +1w>")
        assert interval.start == interval.end == datetime(2024, 1, 1, 9, 0)

    def test_double_dash_warning_is_not_a_range(self):
        interval = parse_timerange("<2024-01-01 Mon --2d>")
        assert interval == TimeInterval(datetime(2024, 1, 1), datetime(2024, 1, 2))


class TestMalformed:
    """Bad stamps raise MalformedTimestamp."""

    @pytest.mark.parametrize(
        "stamp",
        [
            "<2024-13-01 Mon>",
            "<not a date>",
            "<2024-01-01 Mon 25:00>",
            "<2024-01-01 Mon 9am>",
            "<2024-01-01 Mon 09:00-10:00-11:00>",
            "<>",
        ],
    )
    def test_malformed_stamp_raises(self, stamp):
        with pytest.raises(MalformedTimestamp) as excinfo:
            parse_timerange(stamp)
        assert stamp in str(excinfo.value)

    def test_malformed_is_a_value_error(self):
        with pytest.raises(ValueError):
            parse_timerange("<2024-02-30>")

    @pytest.mark.parametrize("stamp", ["<9999-12-31 Fri>", "<9999-12-31 Fri 23:00-01:00>"])
    def test_last_representable_day_cannot_roll_over(self, stamp):
        with pytest.raises(MalformedTimestamp, match="out of range"):
            parse_timerange(stamp)

    def test_backwards_double_range_raises(self):
        with pytest.raises(MalformedTimestamp):
            parse_timerange("<2024-01-03 Wed>--<2024-01-01 Mon>")


class TestFindingStamps:
    """Locating stamps inside lines of text."""

    def test_next_timerange_takes_first_stamp(self):
        interval = next_timerange("Meeting <2024-01-01 Mon 10:00> then [2024-01-02 Tue]")
        assert interval.start == datetime(2024, 1, 1, 10, 0)

    def test_next_timerange_respects_position(self):
        line = "<2024-01-01 Mon> and <2024-01-05 Fri>"
        interval = next_timerange(line, line.index(" and"))
        assert interval.start == datetime(2024, 1, 5)

    def test_next_timerange_without_stamp(self):
        assert next_timerange("no brackets here") is None
        assert next_timerange("<2024-01-01 Mon") is None

    def test_next_prefix_timerange_finds_deadline_after_scheduled(self):
        line = "SCHEDULED: <2024-01-01 Mon> DEADLINE: <2024-01-05 Fri>"
        assert next_prefix_timerange(line, "SCHEDULED: ").start == datetime(2024, 1, 1)
        assert next_prefix_timerange(line, "DEADLINE: ").start == datetime(2024, 1, 5)

    def test_next_prefix_timerange_missing_prefix(self):
        assert next_prefix_timerange("SCHEDULED: <2024-01-01 Mon>", "DEADLINE: ") is None

    def test_closed_clock_line_reads_both_stamps(self):
        line = "CLOCK: [2024-01-01 Mon 09:00]--[2024-01-01 Mon 10:00] =>  1:00"
        interval = next_prefix_timerange(line, "CLOCK: ")
        assert interval == TimeInterval(datetime(2024, 1, 1, 9, 0), datetime(2024, 1, 1, 10, 0))

    def test_find_loose_timeranges_matches_active_stamps_in_order(self):
        line = "Call <2024-01-01 Mon 10:00> and <2024-01-02 Tue>--<2024-01-04 Thu>, noted [2024-01-01 Mon]"
        assert find_loose_timeranges(line) == [
            TimeInterval(datetime(2024, 1, 1, 10, 0), datetime(2024, 1, 1, 10, 0)),
            TimeInterval(datetime(2024, 1, 2), datetime(2024, 1, 4)),
        ]

    def test_find_loose_timeranges_ignores_non_dates(self):
        assert find_loose_timeranges("a <b> c <1234> d [2024-01-01]") == []
