"""
User Router
===========
GET /api/v1/user          — Resolve a username/URL and return the profile.
GET /api/v1/user/activity — Photo totals per month for one year.

The monthly endpoint feeds the month picker: twelve lightweight searches
that only read Flickr's reported totals.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from flickr_heatmap.models.activity import ActivityMode, MonthlyCountsResponse
from flickr_heatmap.models.flickr import UserProfile
from flickr_heatmap.routers.auth import access_credentials
from flickr_heatmap.services.flickr import ActivityService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/user", tags=["user"])


@router.get(
    "",
    response_model=UserProfile,
    summary="Look up a Flickr user",
    responses={
        200: {"description": "Profile returned"},
        404: {"description": "User not found"},
    },
)
async def get_user(
    username: str = Query(..., min_length=1, description="Flickr username or profile URL"),
    credentials: tuple = Depends(access_credentials),
) -> UserProfile:
    access_token, access_secret = credentials
    service = ActivityService(access_token=access_token, access_secret=access_secret)

    user_id = await service.resolve_user(username)
    return await service.get_user_info(user_id)


@router.get(
    "/activity",
    response_model=MonthlyCountsResponse,
    summary="Get monthly photo totals",
    responses={
        200: {"description": "Twelve monthly totals returned"},
        400: {"description": "Missing user_id"},
    },
)
async def get_monthly_activity(
    user_id: Optional[str] = Query(None),
    year: int = Query(..., ge=2004),
    mode: ActivityMode = Query(ActivityMode.TAKEN),
    credentials: tuple = Depends(access_credentials),
) -> MonthlyCountsResponse:
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"kind": "missing_parameters", "message": "user_id and year are required"},
        )

    access_token, access_secret = credentials
    service = ActivityService(access_token=access_token, access_secret=access_secret)

    counts = await service.monthly_counts(user_id, year, mode)
    return MonthlyCountsResponse(user_id=user_id, year=year, mode=mode, counts=counts)
