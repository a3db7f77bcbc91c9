"""
Flickr API Response Models
==========================
Pydantic shapes for decoding raw Flickr REST JSON once, at the boundary.
The aggregation pipeline only ever sees PhotoRecord lists, never the
loosely-typed provider dicts.

Flickr wraps text values as ``{"_content": "..."}`` and reports numbers
as strings in some places (``total``, ``dateupload``); lax validation
coerces those.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Content(BaseModel):
    """Flickr's ``{"_content": value}`` wrapper."""

    model_config = ConfigDict(populate_by_name=True)

    content: str = Field("", alias="_content")


# ---------------------------------------------------------------------------
# Search filters
# ---------------------------------------------------------------------------

class PhotoFilters(BaseModel):
    """Independent optional bounds on upload and taken time (unix seconds)."""

    min_upload_date: Optional[int] = None
    max_upload_date: Optional[int] = None
    min_taken_date: Optional[int] = None
    max_taken_date: Optional[int] = None

    def to_params(self) -> dict[str, str]:
        """Search parameters for flickr.photos.search.

        Taken bounds go out as MySQL datetimes since Flickr compares them
        against the photo's local capture time.
        """
        params: dict[str, str] = {}
        for name in ("min_upload_date", "max_upload_date"):
            value = getattr(self, name)
            if value is not None:
                params[name] = str(value)
        for name in ("min_taken_date", "max_taken_date"):
            value = getattr(self, name)
            if value is not None:
                params[name] = datetime.fromtimestamp(value, tz=timezone.utc).strftime(
                    "%Y-%m-%d %H:%M:%S"
                )
        return params


# ---------------------------------------------------------------------------
# Photos
# ---------------------------------------------------------------------------

class PhotoRecord(BaseModel):
    """One photo from flickr.photos.search with date extras."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    owner: str = ""
    date_upload: int = Field(..., alias="dateupload")
    # Local time of capture, "YYYY-MM-DD HH:MM:SS"; absent without the extra
    date_taken: Optional[str] = Field(None, alias="datetaken")


class PhotosPayload(BaseModel):
    page: int = 1
    pages: int = 0
    perpage: int = 0
    total: int = 0
    photo: list[PhotoRecord] = Field(default_factory=list)


class PhotosResponse(BaseModel):
    photos: PhotosPayload


class PhotoPage(BaseModel):
    """A single page of search results."""

    photos: list[PhotoRecord]
    page: int
    total_pages: int
    total: int = 0


class PhotoPageResponse(PhotoPage):
    """Returned by GET /api/v1/photos/page."""

    user_id: str


class PhotoCollection(BaseModel):
    """Photos gathered across pages.

    ``partial`` is True when the page cap stopped the loop before Flickr's
    reported last page, so callers can tell a complete series from a
    capped one.
    """

    photos: list[PhotoRecord]
    pages_fetched: int
    total_pages: int
    partial: bool = False


# ---------------------------------------------------------------------------
# People / URLs
# ---------------------------------------------------------------------------

class FoundUser(BaseModel):
    id: str
    nsid: Optional[str] = None
    username: Optional[Content] = None


class FoundUserResponse(BaseModel):
    user: FoundUser


class PersonPhotos(BaseModel):
    firstdatetaken: Optional[Content] = None
    firstdate: Optional[Content] = None


class Person(BaseModel):
    id: str
    nsid: Optional[str] = None
    iconserver: str = "0"
    iconfarm: int = 0
    username: Content = Field(default_factory=Content)
    realname: Optional[Content] = None
    photos: Optional[PersonPhotos] = None


class PersonResponse(BaseModel):
    person: Person


class UserProfile(BaseModel):
    """Public profile summary returned by GET /api/v1/user."""

    user_id: str
    username: str
    realname: Optional[str] = None
    avatar_url: str
    earliest_date: Optional[str] = None
