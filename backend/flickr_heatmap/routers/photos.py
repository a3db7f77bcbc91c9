"""
Photos Router
=============
GET /api/v1/photos      — Full-year heatmap series for a username or URL.
GET /api/v1/photos/page — One page of raw search results.

The heatmap endpoint runs the whole pipeline server-side and returns one
ActivityDay per calendar day. The page endpoint exists for clients that
drive the paging loop themselves to show progress; they aggregate the
concatenated photos on their side.

Both use the visitor's Flickr access token when the login cookies are
present and fall back to public data otherwise.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from flickr_heatmap.models.activity import ActivityMode, HeatmapResponse, Leveling
from flickr_heatmap.models.flickr import PhotoPageResponse
from flickr_heatmap.routers.auth import access_credentials
from flickr_heatmap.services.activity import year_window
from flickr_heatmap.services.flickr import ActivityService, window_filters

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/photos", tags=["photos"])


def _current_year() -> int:
    return datetime.now(timezone.utc).year


def _bad_year(exc: ValueError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"kind": "invalid_year", "message": str(exc)},
    )


@router.get(
    "",
    response_model=HeatmapResponse,
    summary="Get a year of photo activity",
    description=(
        "Resolves the username or profile URL, fetches the year's photos "
        "(capped at the configured page limit) and returns one entry per day. "
        "For the current year the series ends today."
    ),
    responses={
        200: {"description": "Heatmap series returned"},
        400: {"description": "Year is in the future"},
        404: {"description": "User not found"},
    },
)
async def get_heatmap(
    username: str = Query(..., min_length=1, description="Flickr username or profile URL"),
    year: Optional[int] = Query(None, ge=2004),
    mode: ActivityMode = Query(ActivityMode.UPLOAD),
    leveling: Leveling = Query(Leveling.LINEAR),
    credentials: tuple = Depends(access_credentials),
) -> HeatmapResponse:
    year = year or _current_year()
    try:
        year_window(year)
    except ValueError as exc:
        raise _bad_year(exc) from exc

    access_token, access_secret = credentials
    service = ActivityService(access_token=access_token, access_secret=access_secret)

    heatmap = await service.build_heatmap(username, year, mode=mode, leveling=leveling)

    logger.info(
        "Heatmap for %s/%d: %d photos over %d days%s",
        heatmap.user_id, heatmap.year, heatmap.total_photos, len(heatmap.data),
        " (partial)" if heatmap.partial else "",
    )
    return heatmap


@router.get(
    "/page",
    response_model=PhotoPageResponse,
    summary="Get one page of photos",
    responses={
        200: {"description": "Page returned"},
        400: {"description": "Neither user_id nor username given, or future year"},
        404: {"description": "User not found"},
    },
)
async def get_photo_page(
    user_id: Optional[str] = Query(None),
    username: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    per_page: int = Query(500, ge=1, le=500),
    year: Optional[int] = Query(None, ge=2004),
    mode: ActivityMode = Query(ActivityMode.UPLOAD),
    credentials: tuple = Depends(access_credentials),
) -> PhotoPageResponse:
    if not user_id and not username:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"kind": "missing_parameters", "message": "user_id or username is required"},
        )

    access_token, access_secret = credentials
    service = ActivityService(access_token=access_token, access_secret=access_secret)

    filters = None
    if year is not None:
        try:
            filters = window_filters(*year_window(year), mode)
        except ValueError as exc:
            raise _bad_year(exc) from exc

    resolved = user_id or await service.resolve_user(username)
    result = await service.fetch_page(resolved, page=page, per_page=per_page, filters=filters)

    return PhotoPageResponse(
        user_id=resolved,
        photos=result.photos,
        page=result.page,
        total_pages=result.total_pages,
        total=result.total,
    )
