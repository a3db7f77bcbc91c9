"""
Snapshot Router
===============
POST /api/v1/snapshot            — Share a computed heatmap under a username.
GET  /api/v1/snapshot/{username} — Replay the last shared heatmap.

Storage is delegated to the external snapshot service; a second share for
the same username simply replaces the first.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, status

from flickr_heatmap.models.snapshot import Snapshot, SnapshotCreate
from flickr_heatmap.services.snapshot import SnapshotClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/snapshot", tags=["snapshot"])


@router.post(
    "",
    status_code=status.HTTP_200_OK,
    summary="Share a heatmap",
    responses={
        200: {"description": "Snapshot stored"},
        502: {"description": "Snapshot service rejected the write"},
    },
)
async def create_snapshot(body: SnapshotCreate) -> dict:
    snapshot = await SnapshotClient().put(body)
    return {"success": True, "username": snapshot.username, "timestamp": snapshot.timestamp}


@router.get(
    "/{username}",
    response_model=Snapshot,
    summary="Get a shared heatmap",
    responses={
        200: {"description": "Snapshot returned"},
        404: {"description": "No snapshot for this username"},
    },
)
async def get_snapshot(username: str) -> Snapshot:
    return await SnapshotClient().get(username)
