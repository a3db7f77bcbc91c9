"""
Activity Aggregation
====================
Pure functions that turn a flat photo list into a calendar-shaped series.

- aggregate(): bucket photos by day (upload or taken date) and level each day
- fill_window(): one entry per calendar day in [start, end], zeros for gaps
- year_window(): the window for a year, stopping at today for the current year
- summarize(): totals, peak day, longest streak

Nothing here mutates its input. Every call builds a new list, so a caller
either gets a complete series or an exception, never a half-filled one.
"""

from __future__ import annotations

import math
from collections import Counter
from datetime import date, datetime, timedelta, timezone
from typing import Iterable, Optional

from flickr_heatmap.models.activity import (
    LEVEL_MAX,
    ActivityDay,
    ActivityMode,
    ActivityStats,
    Leveling,
)
from flickr_heatmap.models.flickr import PhotoRecord


# ---------------------------------------------------------------------------
# Day keys
# ---------------------------------------------------------------------------

def upload_day(photo: PhotoRecord) -> date:
    """UTC calendar date of the upload timestamp."""
    return datetime.fromtimestamp(photo.date_upload, tz=timezone.utc).date()


def taken_day(photo: PhotoRecord) -> date:
    """Date portion of the local ``date_taken`` string.

    Falls back to the upload date when Flickr has no usable taken date
    (missing, or the ``0000-00-00`` placeholder).
    """
    if photo.date_taken:
        try:
            return date.fromisoformat(photo.date_taken[:10])
        except ValueError:
            pass
    return upload_day(photo)


def day_of(photo: PhotoRecord, mode: ActivityMode) -> date:
    return taken_day(photo) if mode == ActivityMode.TAKEN else upload_day(photo)


# ---------------------------------------------------------------------------
# Leveling
# ---------------------------------------------------------------------------

def linear_level(count: int, max_count: int) -> int:
    """Quartile level 0–4.

    The count's position between 1 and the series maximum decides the
    quartile, so the busiest day is always 4 and a single photo on an
    active account is always 1.
    """
    if count <= 0:
        return 0
    if max_count <= 1:
        return 2
    ratio = (count - 1) / (max_count - 1)
    if ratio <= 0.25:
        return 1
    if ratio <= 0.5:
        return 2
    if ratio <= 0.75:
        return 3
    return 4


def log_level(count: int, max_count: int) -> int:
    """Logarithmic level 0–7 for counts spanning orders of magnitude."""
    top = LEVEL_MAX[Leveling.LOGARITHMIC]
    if count <= 0:
        return 0
    if max_count <= 1:
        return top
    level = math.ceil(top * math.log(count) / math.log(max_count))
    return min(top, max(1, level))


_LEVELERS = {
    Leveling.LINEAR: linear_level,
    Leveling.LOGARITHMIC: log_level,
}


def level_for(count: int, max_count: int, leveling: Leveling = Leveling.LINEAR) -> int:
    return _LEVELERS[leveling](count, max_count)


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------

def aggregate(
    photos: Iterable[PhotoRecord],
    mode: ActivityMode = ActivityMode.UPLOAD,
    leveling: Leveling = Leveling.LINEAR,
) -> list[ActivityDay]:
    """Sparse per-day counts and levels, sorted by date.

    Only days with at least one photo appear; use fill_window() to expand
    the result to a full calendar.
    """
    counts = Counter(day_of(photo, mode) for photo in photos)
    max_count = max(counts.values(), default=0)

    return [
        ActivityDay(
            date=day.isoformat(),
            count=count,
            level=level_for(count, max_count, leveling),
        )
        for day, count in sorted(counts.items())
    ]


def fill_window(days: Iterable[ActivityDay], start: date, end: date) -> list[ActivityDay]:
    """Expand sparse *days* to one entry per date in [start, end] inclusive.

    Entries outside the window are dropped. An empty window (end before
    start) yields an empty list.
    """
    by_date = {day.date: day for day in days}
    filled: list[ActivityDay] = []

    cursor = start
    while cursor <= end:
        key = cursor.isoformat()
        filled.append(by_date.get(key) or ActivityDay(date=key, count=0, level=0))
        cursor += timedelta(days=1)

    return filled


def year_window(year: int, now: Optional[datetime] = None) -> tuple[date, date]:
    """Calendar window for *year*.

    Past years run Jan 1 to Dec 31. The current year stops at today's UTC
    date so the series never contains future days. Future years raise
    ValueError.
    """
    now = now or datetime.now(timezone.utc)
    today = now.astimezone(timezone.utc).date() if now.tzinfo else now.date()

    if year > today.year:
        raise ValueError(f"Year {year} is in the future")

    start = date(year, 1, 1)
    end = today if year == today.year else date(year, 12, 31)
    return start, end


def window_timestamps(start: date, end: date) -> tuple[int, int]:
    """Unix seconds bounding [start 00:00:00, end 23:59:59] UTC."""
    lo = datetime(start.year, start.month, start.day, tzinfo=timezone.utc)
    hi = datetime(end.year, end.month, end.day, tzinfo=timezone.utc) + timedelta(days=1)
    return int(lo.timestamp()), int(hi.timestamp()) - 1


# ---------------------------------------------------------------------------
# Summary
# ---------------------------------------------------------------------------

def summarize(days: list[ActivityDay]) -> ActivityStats:
    """Headline numbers for a filled, chronologically ordered series."""
    if not days:
        return ActivityStats()

    peak = max(days, key=lambda d: d.count)  # first day wins ties

    longest = current = 0
    for day in days:
        current = current + 1 if day.count > 0 else 0
        longest = max(longest, current)

    return ActivityStats(
        total=sum(d.count for d in days),
        active_days=sum(1 for d in days if d.count > 0),
        peak_count=peak.count,
        peak_date=peak.date if peak.count > 0 else None,
        longest_streak=longest,
    )
