"""
Snapshot Client
===============
Thin HTTP wrapper around the external snapshot service that stores one
shared heatmap per username.

    PUT /<username>  — JSON body {username, data, year, activityType, timestamp}
    GET /<username>  — same JSON, or 404

The service is last-write-wins per username; this client does no locking
and no interpretation beyond decoding the JSON.
"""

from __future__ import annotations

import logging
import time
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from flickr_heatmap.config import Settings, get_settings
from flickr_heatmap.errors import SnapshotError, SnapshotNotFound, UpstreamUnavailable
from flickr_heatmap.models.snapshot import Snapshot, SnapshotCreate

logger = logging.getLogger(__name__)


class SnapshotClient:
    """Stores and replays computed activity series by username."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()

    def _url(self, username: str) -> str:
        base = self._settings.snapshot_service_url.rstrip("/")
        return f"{base}/{quote(username, safe='')}"

    async def put(self, body: SnapshotCreate) -> Snapshot:
        """Store *body* stamped with the current time; returns what was written."""
        snapshot = Snapshot(
            **body.model_dump(),
            timestamp=int(time.time() * 1000),
        )
        response = await self._request("PUT", snapshot.username, json=snapshot.to_wire())

        if not response.is_success:
            logger.error(
                "Snapshot write for %s failed with %d", snapshot.username, response.status_code
            )
            raise SnapshotError(f"Failed to save snapshot: {response.status_code}")

        logger.info("Stored snapshot for %s (%d days)", snapshot.username, len(snapshot.data))
        return snapshot

    async def get(self, username: str) -> Snapshot:
        """Fetch the latest snapshot for *username*. Raises SnapshotNotFound."""
        response = await self._request("GET", username)

        if response.status_code == 404:
            raise SnapshotNotFound(f"No snapshot stored for {username}")
        if not response.is_success:
            raise SnapshotError(f"Failed to fetch snapshot: {response.status_code}")

        try:
            return Snapshot.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise SnapshotError(f"Stored snapshot for {username} is malformed") from exc

    async def _request(self, method: str, username: str, **kwargs) -> httpx.Response:
        try:
            async with httpx.AsyncClient(timeout=self._settings.http_timeout_seconds) as client:
                return await client.request(method, self._url(username), **kwargs)
        except httpx.HTTPError as exc:
            raise UpstreamUnavailable(f"Snapshot service unreachable: {exc}") from exc
