"""
Snapshot Schemas
================
Shape of a shared heatmap as stored in the external snapshot service,
keyed one-to-one by username. Writes are last-write-wins.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from flickr_heatmap.models.activity import ActivityDay, ActivityMode


class SnapshotCreate(BaseModel):
    """Payload the front-end posts when the user shares a heatmap."""

    username: str = Field(..., min_length=1, max_length=100)
    data: list[ActivityDay]
    year: int
    activity_type: ActivityMode = Field(ActivityMode.UPLOAD, alias="activityType")

    model_config = {"populate_by_name": True}


class Snapshot(SnapshotCreate):
    """Stored snapshot; ``timestamp`` is epoch milliseconds of the write."""

    timestamp: int

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
