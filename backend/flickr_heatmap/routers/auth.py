"""
Flickr Login Router
===================
GET  /api/auth/login    — Start the OAuth 1.0a handshake.
GET  /api/auth/callback — Exchange the verifier for an access token.
POST /api/auth/logout   — Forget the stored access token.

The request-token secret lives in a short-lived http-only cookie between
login and callback; it is deleted as soon as the exchange runs, whether it
succeeds or not. The access token pair is kept in http-only cookies and
read back by the other routers through access_credentials().
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Cookie, HTTPException, Query, status
from fastapi.responses import JSONResponse, RedirectResponse

from flickr_heatmap.config import get_settings
from flickr_heatmap.errors import HandshakeError
from flickr_heatmap.services.oauth import OAuthHandshakeClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

REQUEST_SECRET_COOKIE = "oauth_token_secret"
ACCESS_TOKEN_COOKIE = "flickr_access_token"
ACCESS_SECRET_COOKIE = "flickr_access_token_secret"
USER_NSID_COOKIE = "flickr_user_nsid"
USERNAME_COOKIE = "flickr_username"

_REQUEST_SECRET_MAX_AGE = 60 * 60
_ACCESS_TOKEN_MAX_AGE = 30 * 24 * 60 * 60

LOGIN_PATH = "/api/auth/login"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def get_oauth_client() -> OAuthHandshakeClient:
    """Build a handshake client; raises ConfigurationError without credentials."""
    settings = get_settings()
    return OAuthHandshakeClient(
        settings.oauth_credentials(), timeout=settings.http_timeout_seconds
    )


def access_credentials(
    flickr_access_token: Optional[str] = Cookie(None),
    flickr_access_token_secret: Optional[str] = Cookie(None),
) -> tuple[Optional[str], Optional[str]]:
    """Access token pair from cookies, (None, None) for anonymous visitors."""
    return flickr_access_token, flickr_access_token_secret


def _secure_cookies() -> bool:
    return get_settings().environment == "production"


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get(
    "/login",
    status_code=status.HTTP_307_TEMPORARY_REDIRECT,
    summary="Start Flickr login",
    responses={
        307: {"description": "Redirect to the Flickr authorize page"},
        502: {"description": "Flickr rejected the request-token call"},
    },
)
async def login() -> RedirectResponse:
    """Obtain a request token and send the browser to Flickr."""
    settings = get_settings()
    client = get_oauth_client()

    request_token = await client.get_request_token(settings.callback_url)

    response = RedirectResponse(
        client.get_authorize_url(request_token.token),
        status_code=status.HTTP_307_TEMPORARY_REDIRECT,
    )
    response.set_cookie(
        REQUEST_SECRET_COOKIE,
        request_token.secret,
        max_age=_REQUEST_SECRET_MAX_AGE,
        httponly=True,
        secure=_secure_cookies(),
        samesite="lax",
        path="/",
    )
    return response


@router.get(
    "/callback",
    status_code=status.HTTP_307_TEMPORARY_REDIRECT,
    summary="Complete Flickr login",
    responses={
        307: {"description": "Logged in; redirect to the home page"},
        400: {"description": "Missing OAuth parameters"},
        502: {"description": "Access-token exchange failed; restart at login_url"},
    },
)
async def callback(
    oauth_token: Optional[str] = Query(None),
    oauth_verifier: Optional[str] = Query(None),
    oauth_token_secret: Optional[str] = Cookie(None),
):
    """Exchange the verifier and store the access token in cookies."""
    if not oauth_token or not oauth_verifier or not oauth_token_secret:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"kind": "missing_parameters", "message": "Missing OAuth parameters"},
        )

    try:
        access_token = await get_oauth_client().get_access_token(
            oauth_token, oauth_token_secret, oauth_verifier
        )
    except HandshakeError as exc:
        logger.warning("Access-token exchange failed: %s", exc.message)
        failure = JSONResponse(
            status_code=exc.http_status,
            content={"detail": {**exc.to_dict(), "login_url": LOGIN_PATH}},
        )
        failure.delete_cookie(REQUEST_SECRET_COOKIE, path="/")
        return failure

    response = RedirectResponse("/", status_code=status.HTTP_307_TEMPORARY_REDIRECT)
    secure = _secure_cookies()
    for name, value in (
        (ACCESS_TOKEN_COOKIE, access_token.token),
        (ACCESS_SECRET_COOKIE, access_token.secret),
    ):
        response.set_cookie(
            name, value, max_age=_ACCESS_TOKEN_MAX_AGE, httponly=True, secure=secure, path="/"
        )
    # Readable by the front-end to show who is logged in
    response.set_cookie(USER_NSID_COOKIE, access_token.user_id, max_age=_ACCESS_TOKEN_MAX_AGE, path="/")
    response.set_cookie(USERNAME_COOKIE, access_token.username, max_age=_ACCESS_TOKEN_MAX_AGE, path="/")
    response.delete_cookie(REQUEST_SECRET_COOKIE, path="/")
    return response


@router.post("/logout", summary="Log out of Flickr")
async def logout() -> JSONResponse:
    response = JSONResponse({"success": True})
    for name in (ACCESS_TOKEN_COOKIE, ACCESS_SECRET_COOKIE, USER_NSID_COOKIE, USERNAME_COOKIE):
        response.delete_cookie(name, path="/")
    return response
