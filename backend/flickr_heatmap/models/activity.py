"""
Activity Series Schemas
=======================
Per-day heatmap entries and the API payloads built around them.

Key design decisions:
- A filled series has exactly one ActivityDay per calendar day in its
  window; days without photos are present with count=0, level=0.
- Two leveling schemes exist. LINEAR (0–4) is the primary contract,
  LOGARITHMIC (0–7) is the named alternative for accounts whose daily
  counts span orders of magnitude.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class ActivityMode(str, Enum):
    """Which timestamp buckets a photo into a day."""

    UPLOAD = "upload"
    TAKEN = "taken"


class Leveling(str, Enum):
    LINEAR = "linear"
    LOGARITHMIC = "logarithmic"


LEVEL_MAX = {
    Leveling.LINEAR: 4,
    Leveling.LOGARITHMIC: 7,
}


class ActivityDay(BaseModel):
    """One calendar day of photo activity."""

    date: str = Field(..., description="YYYY-MM-DD")
    count: int = Field(0, ge=0)
    level: int = Field(0, ge=0, le=7)


class ActivityStats(BaseModel):
    """Headline numbers for a filled series."""

    total: int = 0
    active_days: int = 0
    peak_count: int = 0
    peak_date: Optional[str] = None
    longest_streak: int = 0


class HeatmapResponse(BaseModel):
    """Returned by GET /api/v1/photos."""

    username: str
    user_id: str
    year: int
    mode: ActivityMode
    leveling: Leveling
    authenticated: bool
    total_photos: int
    partial: bool = Field(
        False,
        description="True when the page cap cut the fetch short.",
    )
    stats: ActivityStats
    data: list[ActivityDay]


class MonthlyCountsResponse(BaseModel):
    """Returned by GET /api/v1/user/activity. One total per month, Jan first."""

    user_id: str
    year: int
    mode: ActivityMode
    counts: list[int]
