"""
Tests for Activity Aggregation
==============================
Covers:
- Day keys: upload date in UTC, taken date with fallback to upload
- Linear leveling: busiest day is 4, empty day is 0, quartile boundaries
- Logarithmic leveling: 1..7 range, single active day, monotonic
- aggregate(): sparse, sorted, idempotent
- fill_window(): leap years, out-of-window entries, reversed window
- year_window(): past, current (stops at today), future years
- summarize(): totals, peak date, longest streak

Run: pytest tests/test_activity.py -v
"""

from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from flickr_heatmap.models.activity import ActivityDay, ActivityMode, Leveling
from flickr_heatmap.models.flickr import PhotoRecord
from flickr_heatmap.services.activity import (
    aggregate,
    fill_window,
    level_for,
    linear_level,
    log_level,
    summarize,
    taken_day,
    upload_day,
    window_timestamps,
    year_window,
)


def _photo(photo_id: str, uploaded: datetime, taken: str | None = None) -> PhotoRecord:
    return PhotoRecord(
        id=photo_id,
        date_upload=int(uploaded.replace(tzinfo=timezone.utc).timestamp()),
        date_taken=taken,
    )


def _photos_on(day: datetime, n: int, prefix: str) -> list[PhotoRecord]:
    return [_photo(f"{prefix}{i}", day.replace(hour=9 + i)) for i in range(n)]


# ---------------------------------------------------------------------------
# Day keys
# ---------------------------------------------------------------------------

class TestDayKeys:

    def test_upload_day_is_utc(self):
        photo = _photo("1", datetime(2025, 3, 1, 23, 30))
        assert upload_day(photo) == date(2025, 3, 1)

    def test_taken_day_uses_local_date(self):
        photo = _photo("1", datetime(2025, 3, 5, 8, 0), taken="2025-02-14 22:10:00")
        assert taken_day(photo) == date(2025, 2, 14)

    def test_taken_day_falls_back_when_missing(self):
        photo = _photo("1", datetime(2025, 3, 5, 8, 0))
        assert taken_day(photo) == date(2025, 3, 5)

    def test_taken_day_falls_back_on_placeholder(self):
        photo = _photo("1", datetime(2025, 3, 5, 8, 0), taken="0000-00-00 00:00:00")
        assert taken_day(photo) == date(2025, 3, 5)

    def test_string_upload_timestamp_is_coerced(self):
        photo = PhotoRecord.model_validate(
            {"id": "9", "dateupload": "1740787200", "datetaken": "2025-03-01 10:00:00"}
        )
        assert photo.date_upload == 1740787200
        assert upload_day(photo) == date(2025, 3, 1)


# ---------------------------------------------------------------------------
# Leveling
# ---------------------------------------------------------------------------

class TestLinearLevel:

    def test_zero_count_is_zero(self):
        assert linear_level(0, 10) == 0

    def test_max_count_is_four(self):
        assert linear_level(10, 10) == 4
        assert linear_level(3, 3) == 4

    def test_quartile_boundaries(self):
        assert [linear_level(c, 5) for c in range(0, 6)] == [0, 1, 1, 2, 3, 4]

    def test_position_between_one_and_max(self):
        # (3 - 1) / (10 - 1) = 0.22 → level 1
        assert linear_level(3, 10) == 1
        assert linear_level(4, 10) == 2
        assert [linear_level(c, 4) for c in range(1, 5)] == [1, 2, 3, 4]

    def test_single_photo_on_active_account_is_one(self):
        assert linear_level(1, 100) == 1

    def test_all_days_equal_single_photo(self):
        assert linear_level(1, 1) == 2

    def test_level_for_dispatches(self):
        assert level_for(4, 4, Leveling.LINEAR) == 4
        assert level_for(4, 4, Leveling.LOGARITHMIC) == 7


class TestLogLevel:

    def test_wide_range(self):
        assert log_level(1, 300) == 1
        assert log_level(300, 300) == 7

    def test_single_nonzero_day_is_top(self):
        assert log_level(1, 1) == 7

    def test_zero_count_is_zero(self):
        assert log_level(0, 300) == 0

    def test_monotonic_and_in_range(self):
        levels = [log_level(c, 300) for c in range(1, 301)]
        assert levels == sorted(levels)
        assert min(levels) >= 1
        assert max(levels) == 7


# ---------------------------------------------------------------------------
# aggregate()
# ---------------------------------------------------------------------------

class TestAggregate:

    def test_sparse_and_sorted(self):
        photos = (
            _photos_on(datetime(2025, 3, 2), 1, "b")
            + _photos_on(datetime(2025, 3, 1), 3, "a")
        )
        days = aggregate(photos)
        assert [d.date for d in days] == ["2025-03-01", "2025-03-02"]
        assert [d.count for d in days] == [3, 1]

    def test_busiest_day_gets_max_level(self):
        photos = _photos_on(datetime(2025, 3, 1), 3, "a") + _photos_on(datetime(2025, 3, 2), 1, "b")
        days = aggregate(photos, leveling=Leveling.LOGARITHMIC)
        assert days[0].level == 7
        assert 1 <= days[1].level < 7

    def test_taken_mode_buckets_by_capture_date(self):
        photos = [
            _photo("1", datetime(2025, 3, 10), taken="2025-01-05 12:00:00"),
            _photo("2", datetime(2025, 3, 10), taken="2025-01-05 18:00:00"),
            _photo("3", datetime(2025, 3, 10)),
        ]
        days = aggregate(photos, mode=ActivityMode.TAKEN)
        assert [(d.date, d.count) for d in days] == [("2025-01-05", 2), ("2025-03-10", 1)]

    def test_empty_input(self):
        assert aggregate([]) == []

    def test_idempotent(self):
        photos = _photos_on(datetime(2024, 7, 4), 5, "x") + _photos_on(datetime(2024, 7, 6), 2, "y")
        assert aggregate(photos) == aggregate(photos)
        start, end = date(2024, 7, 1), date(2024, 7, 31)
        assert fill_window(aggregate(photos), start, end) == fill_window(aggregate(photos), start, end)

    def test_three_day_example(self):
        photos = _photos_on(datetime(2025, 3, 1), 3, "a") + _photos_on(datetime(2025, 3, 2), 1, "b")
        filled = fill_window(aggregate(photos), date(2025, 3, 1), date(2025, 3, 3))
        assert [d.model_dump() for d in filled] == [
            {"date": "2025-03-01", "count": 3, "level": 4},
            {"date": "2025-03-02", "count": 1, "level": 1},
            {"date": "2025-03-03", "count": 0, "level": 0},
        ]


# ---------------------------------------------------------------------------
# fill_window()
# ---------------------------------------------------------------------------

class TestFillWindow:

    def test_leap_year_has_366_days(self):
        filled = fill_window([], date(2024, 1, 1), date(2024, 12, 31))
        dates = [d.date for d in filled]
        assert len(filled) == 366
        assert dates[0] == "2024-01-01"
        assert dates[-2:] == ["2024-12-30", "2024-12-31"]
        assert "2024-02-29" in dates

    def test_common_year_has_365_days(self):
        assert len(fill_window([], date(2023, 1, 1), date(2023, 12, 31))) == 365

    def test_one_entry_per_day_no_duplicates(self):
        filled = fill_window([], date(2024, 1, 1), date(2024, 12, 31))
        dates = [d.date for d in filled]
        assert len(set(dates)) == len(dates)
        assert dates == sorted(dates)

    def test_out_of_window_entries_dropped(self):
        days = [
            ActivityDay(date="2024-12-31", count=2, level=4),
            ActivityDay(date="2025-01-02", count=1, level=1),
        ]
        filled = fill_window(days, date(2025, 1, 1), date(2025, 1, 3))
        assert [(d.date, d.count) for d in filled] == [
            ("2025-01-01", 0),
            ("2025-01-02", 1),
            ("2025-01-03", 0),
        ]

    def test_reversed_window_is_empty(self):
        assert fill_window([], date(2025, 1, 3), date(2025, 1, 1)) == []


# ---------------------------------------------------------------------------
# year_window()
# ---------------------------------------------------------------------------

class TestYearWindow:

    NOW = datetime(2025, 6, 15, 10, 0, tzinfo=timezone.utc)

    def test_past_year_is_full(self):
        assert year_window(2023, now=self.NOW) == (date(2023, 1, 1), date(2023, 12, 31))

    def test_current_year_stops_today(self):
        start, end = year_window(2025, now=self.NOW)
        assert (start, end) == (date(2025, 1, 1), date(2025, 6, 15))
        filled = fill_window([], start, end)
        assert filled[-1].date == "2025-06-15"
        assert all(d.date <= "2025-06-15" for d in filled)

    def test_last_day_of_leap_year(self):
        now = datetime(2024, 12, 31, 23, 59, 59, tzinfo=timezone.utc)
        start, end = year_window(2024, now=now)
        assert end == date(2024, 12, 31)
        assert len(fill_window([], start, end)) == 366

    def test_future_year_rejected(self):
        with pytest.raises(ValueError, match="future"):
            year_window(2026, now=self.NOW)

    def test_window_timestamps(self):
        assert window_timestamps(date(2024, 1, 1), date(2024, 12, 31)) == (1704067200, 1735689599)


# ---------------------------------------------------------------------------
# summarize()
# ---------------------------------------------------------------------------

class TestSummarize:

    def test_stats(self):
        counts = [0, 2, 5, 1, 0, 5, 3, 0]
        days = [
            ActivityDay(date=f"2025-01-{i + 1:02d}", count=c, level=0)
            for i, c in enumerate(counts)
        ]
        stats = summarize(days)
        assert stats.total == 16
        assert stats.active_days == 5
        assert stats.peak_count == 5
        assert stats.peak_date == "2025-01-03"
        assert stats.longest_streak == 3

    def test_no_activity(self):
        stats = summarize(fill_window([], date(2025, 1, 1), date(2025, 1, 31)))
        assert stats.total == 0
        assert stats.peak_date is None
        assert stats.longest_streak == 0

    def test_empty_series(self):
        assert summarize([]).total == 0
