"""
Flickr Activity Service
=======================
Fetches a user's photo timeline from the Flickr REST API and turns it into
a heatmap series.

Responsibilities:
- FlickrClient.call(): one REST method call, OAuth-signed when the caller
  has an access token, with an unsigned ``api_key`` fallback because public
  data is usually still readable without credentials
- resolve_user(): username or profile URL → NSID
- fetch_page() / fetch_photos(): paginated, date-filtered photos.search;
  the multi-page loop is sequential and capped
- monthly_counts(): twelve concurrent per_page=1 searches, totals only
- get_user_info(): profile summary with avatar and earliest photo date
- build_heatmap(): the whole pipeline for one year

Provider JSON is decoded into pydantic models here and nowhere else.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime, timedelta, timezone
from typing import Optional, TypeVar
from urllib.parse import quote, urlsplit

import httpx
from pydantic import BaseModel, ValidationError

from flickr_heatmap.config import Settings, get_settings
from flickr_heatmap.errors import (
    ParseError,
    ProviderError,
    SignatureRequestError,
    UpstreamUnavailable,
    UserNotFound,
)
from flickr_heatmap.models.activity import ActivityMode, HeatmapResponse, Leveling
from flickr_heatmap.models.flickr import (
    FoundUserResponse,
    PersonResponse,
    PhotoCollection,
    PhotoFilters,
    PhotoPage,
    PhotosResponse,
    UserProfile,
)
from flickr_heatmap.services.activity import (
    aggregate,
    day_of,
    fill_window,
    summarize,
    window_timestamps,
    year_window,
)
from flickr_heatmap.services.signature import Signer, percent_encode
from flickr_heatmap.services.signed_request import SignedRequestExecutor

logger = logging.getLogger(__name__)

FLICKR_REST_URL = "https://www.flickr.com/services/rest/"
FLICKR_PROFILE_URL = "https://www.flickr.com/photos/{slug}/"
DEFAULT_BUDDYICON_URL = "https://www.flickr.com/images/buddyicon.gif"

_SEARCH_EXTRAS = "date_upload,date_taken"

M = TypeVar("M", bound=BaseModel)


def _parse(model: type[M], data: dict) -> M:
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise ParseError(f"Unexpected Flickr response shape for {model.__name__}") from exc


def _decode(response: httpx.Response) -> dict:
    try:
        data = response.json()
    except ValueError as exc:
        raise ParseError("Failed to parse Flickr response") from exc
    if not isinstance(data, dict):
        raise ParseError("Failed to parse Flickr response")
    return data


# ---------------------------------------------------------------------------
# FlickrClient: REST transport
# ---------------------------------------------------------------------------


class FlickrClient:
    """Calls Flickr REST methods, signed when an access token pair is held."""

    def __init__(
        self,
        settings: Settings,
        access_token: Optional[str] = None,
        access_secret: Optional[str] = None,
        signer: Optional[Signer] = None,
    ) -> None:
        self._settings = settings
        self._access_token = access_token
        self._access_secret = access_secret
        self._signer = signer

    @property
    def authenticated(self) -> bool:
        return bool(self._access_token and self._access_secret)

    async def call(self, method: str, params: dict[str, str]) -> dict:
        """Invoke *method* and return the decoded ``stat=ok`` payload."""
        query = {"method": method, "format": "json", "nojsoncallback": "1", **params}

        if self.authenticated:
            try:
                return await self._call_signed(query)
            except SignatureRequestError as exc:
                logger.warning(
                    "Signed %s failed (%s); retrying unauthenticated", method, exc.message
                )

        return await self._call_unsigned(query)

    async def _call_signed(self, query: dict[str, str]) -> dict:
        executor = SignedRequestExecutor(
            self._settings.oauth_credentials(),
            signer=self._signer,
            timeout=self._settings.http_timeout_seconds,
        )
        query_string = "&".join(f"{percent_encode(k)}={percent_encode(v)}" for k, v in query.items())
        response = await executor.signed_fetch(
            f"{FLICKR_REST_URL}?{query_string}", self._access_token, self._access_secret
        )

        data = _decode(response)
        if data.get("stat") == "fail":
            raise SignatureRequestError(
                data.get("message", "Flickr reported a failure"),
                status_code=response.status_code,
                body=response.text,
            )
        return data

    async def _call_unsigned(self, query: dict[str, str]) -> dict:
        params = {**query, "api_key": self._settings.api_key()}

        try:
            async with httpx.AsyncClient(timeout=self._settings.http_timeout_seconds) as client:
                response = await client.get(FLICKR_REST_URL, params=params)
        except httpx.HTTPError as exc:
            raise UpstreamUnavailable(f"Could not reach Flickr: {exc}") from exc

        if not response.is_success:
            raise ProviderError(f"Flickr returned HTTP {response.status_code}")

        data = _decode(response)
        if data.get("stat") == "fail":
            raise ProviderError(
                data.get("message", "Flickr reported a failure"), code=data.get("code")
            )
        return data


# ---------------------------------------------------------------------------
# ActivityService
# ---------------------------------------------------------------------------


class ActivityService:
    """User resolution, photo fetching and heatmap assembly."""

    def __init__(
        self,
        settings: Settings | None = None,
        access_token: Optional[str] = None,
        access_secret: Optional[str] = None,
        client: FlickrClient | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._client = client or FlickrClient(self._settings, access_token, access_secret)

    @property
    def authenticated(self) -> bool:
        return self._client.authenticated

    # ---- Users -----------------------------------------------------------

    async def resolve_user(self, identifier: str) -> str:
        """Return the NSID for a username or a flickr.com profile URL.

        Plain names go through findByUsername first; when that fails the
        name is tried as a profile URL slug (custom URLs often differ from
        the screen name). Raises UserNotFound if nothing matches.
        """
        identifier = identifier.strip()
        if not identifier:
            raise UserNotFound("Username is required")

        if urlsplit(identifier).scheme in ("http", "https"):
            return await self._lookup_url(identifier)

        try:
            data = await self._client.call("flickr.people.findByUsername", {"username": identifier})
            found = _parse(FoundUserResponse, data).user
            logger.info("Resolved username %s to %s", identifier, found.nsid or found.id)
            return found.nsid or found.id
        except (ProviderError, ParseError) as exc:
            logger.warning(
                "findByUsername failed for %s (%s); trying profile URL", identifier, exc.message
            )

        return await self._lookup_url(FLICKR_PROFILE_URL.format(slug=quote(identifier, safe="")))

    async def _lookup_url(self, url: str) -> str:
        try:
            data = await self._client.call("flickr.urls.lookupUser", {"url": url})
        except ProviderError as exc:
            raise UserNotFound(f"No Flickr user found for {url}") from exc
        user = _parse(FoundUserResponse, data).user
        logger.info("Resolved URL %s to %s", url, user.id)
        return user.id

    async def get_user_info(self, user_id: str) -> UserProfile:
        """Profile summary from flickr.people.getInfo."""
        data = await self._client.call("flickr.people.getInfo", {"user_id": user_id})
        person = _parse(PersonResponse, data).person
        nsid = person.nsid or person.id

        if person.iconserver and person.iconserver != "0":
            avatar = (
                f"https://farm{person.iconfarm}.staticflickr.com/"
                f"{person.iconserver}/buddyicons/{nsid}.jpg"
            )
        else:
            avatar = DEFAULT_BUDDYICON_URL

        return UserProfile(
            user_id=nsid,
            username=person.username.content,
            realname=person.realname.content if person.realname and person.realname.content else None,
            avatar_url=avatar,
            earliest_date=_earliest_date(person),
        )

    # ---- Photos ----------------------------------------------------------

    async def fetch_page(
        self,
        user_id: str,
        page: int = 1,
        per_page: Optional[int] = None,
        filters: Optional[PhotoFilters] = None,
    ) -> PhotoPage:
        """One page of flickr.photos.search for *user_id*."""
        params = {
            "user_id": user_id,
            "extras": _SEARCH_EXTRAS,
            "sort": "date-posted-asc",
            "per_page": str(per_page or self._settings.flickr_per_page),
            "page": str(page),
            **(filters or PhotoFilters()).to_params(),
        }
        data = await self._client.call("flickr.photos.search", params)
        payload = _parse(PhotosResponse, data).photos

        return PhotoPage(
            photos=payload.photo,
            page=payload.page,
            total_pages=payload.pages,
            total=payload.total,
        )

    async def fetch_photos(
        self,
        user_id: str,
        filters: Optional[PhotoFilters] = None,
        max_pages: Optional[int] = None,
    ) -> PhotoCollection:
        """All pages for *user_id*, up to the safety cap.

        Pages are fetched one after another because each page reports the
        total page count. Photos repeated across a page boundary are kept
        once. Hitting the cap is not an error: the result comes back with
        ``partial=True``.
        """
        cap = max_pages if max_pages is not None else self._settings.flickr_max_pages
        seen: set[str] = set()
        photos = []
        page = 1
        total_pages = 1
        fetched = 0

        while page <= total_pages and page <= cap:
            result = await self.fetch_page(user_id, page=page, filters=filters)
            fetched += 1
            total_pages = result.total_pages

            for photo in result.photos:
                if photo.id not in seen:
                    seen.add(photo.id)
                    photos.append(photo)

            logger.info(
                "Page %d/%d for %s: %d photos, %d so far",
                page, total_pages, user_id, len(result.photos), len(photos),
            )
            page += 1

        partial = total_pages > cap
        if partial:
            logger.warning(
                "Page cap %d reached for %s (%d pages reported); returning partial result",
                cap, user_id, total_pages,
            )

        return PhotoCollection(
            photos=photos,
            pages_fetched=fetched,
            total_pages=total_pages,
            partial=partial,
        )

    async def monthly_counts(
        self, user_id: str, year: int, mode: ActivityMode = ActivityMode.TAKEN
    ) -> list[int]:
        """Photo totals for each month of *year*, January first.

        The twelve searches share nothing, so they run concurrently.
        """
        pages = await asyncio.gather(*(
            self.fetch_page(user_id, page=1, per_page=1, filters=_month_filters(year, month, mode))
            for month in range(1, 13)
        ))
        return [page.total for page in pages]

    # ---- Heatmap ---------------------------------------------------------

    async def build_heatmap(
        self,
        identifier: str,
        year: int,
        mode: ActivityMode = ActivityMode.UPLOAD,
        leveling: Leveling = Leveling.LINEAR,
        now: Optional[datetime] = None,
    ) -> HeatmapResponse:
        """Resolve *identifier*, fetch the year's photos and build the series.

        Raises ValueError for a future year before touching the network.
        """
        start, end = year_window(year, now)
        user_id = await self.resolve_user(identifier)

        collection = await self.fetch_photos(user_id, window_filters(start, end, mode))
        in_window = [p for p in collection.photos if start <= day_of(p, mode) <= end]
        days = fill_window(aggregate(in_window, mode, leveling), start, end)

        return HeatmapResponse(
            username=identifier,
            user_id=user_id,
            year=year,
            mode=mode,
            leveling=leveling,
            authenticated=self.authenticated,
            total_photos=len(in_window),
            partial=collection.partial,
            stats=summarize(days),
            data=days,
        )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def window_filters(start: date, end: date, mode: ActivityMode) -> PhotoFilters:
    lo, hi = window_timestamps(start, end)
    if mode == ActivityMode.TAKEN:
        return PhotoFilters(min_taken_date=lo, max_taken_date=hi)
    return PhotoFilters(min_upload_date=lo, max_upload_date=hi)


def _month_filters(year: int, month: int, mode: ActivityMode) -> PhotoFilters:
    start = date(year, month, 1)
    next_month = date(year + 1, 1, 1) if month == 12 else date(year, month + 1, 1)
    return window_filters(start, next_month - timedelta(days=1), mode)


def _earliest_date(person) -> Optional[str]:
    """First taken date, else first upload date, as YYYY-MM-DD."""
    photos = person.photos
    if photos is None:
        return None
    if photos.firstdatetaken and photos.firstdatetaken.content:
        return photos.firstdatetaken.content[:10]
    if photos.firstdate and photos.firstdate.content.isdigit():
        uploaded = datetime.fromtimestamp(int(photos.firstdate.content), tz=timezone.utc)
        return uploaded.date().isoformat()
    return None
