"""
Flickr OAuth Handshake
======================
Three-legged OAuth 1.0a against Flickr's /services/oauth endpoints.

States: Unauthenticated → RequestTokenIssued → Authorized.

- get_request_token(): sign with the consumer secret alone, POST, parse the
  form-encoded body into a RequestToken
- get_authorize_url(): where to send the user's browser (perms=read)
- get_access_token(): sign with consumer secret + request secret, exchange
  the verifier for a long-lived AccessToken

The client keeps no state. The request secret travels through the caller
(a short-lived cookie) and is useless after the exchange, so any failure
means restarting at step 1. There are no retries here.
"""

from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import urlencode

import httpx

from flickr_heatmap.config import OAuthCredentials
from flickr_heatmap.errors import HandshakeError
from flickr_heatmap.models.auth import AccessToken, RequestToken
from flickr_heatmap.services.signature import (
    Signer,
    build_auth_header,
    build_base_string,
    parse_form_response,
)

logger = logging.getLogger(__name__)

FLICKR_REQUEST_TOKEN_URL = "https://www.flickr.com/services/oauth/request_token"
FLICKR_AUTHORIZE_URL = "https://www.flickr.com/services/oauth/authorize"
FLICKR_ACCESS_TOKEN_URL = "https://www.flickr.com/services/oauth/access_token"

# Read-only access is all the heatmap needs
AUTHORIZE_PERMS = "read"


class OAuthHandshakeClient:
    """Performs the request-token and access-token exchanges."""

    def __init__(
        self,
        credentials: OAuthCredentials,
        signer: Optional[Signer] = None,
        timeout: float = 10.0,
    ) -> None:
        self._credentials = credentials
        self._signer = signer or Signer()
        self._timeout = timeout

    async def get_request_token(self, callback_url: str) -> RequestToken:
        """Step 1: obtain temporary credentials for *callback_url*."""
        oauth_params = self._signer.oauth_params(
            self._credentials.consumer_key, callback=callback_url
        )
        data = await self._post_signed(FLICKR_REQUEST_TOKEN_URL, oauth_params, token_secret=None)

        if not data.get("oauth_token") or not data.get("oauth_token_secret"):
            raise HandshakeError("Invalid request token response")

        return RequestToken(token=data["oauth_token"], secret=data["oauth_token_secret"])

    def get_authorize_url(self, token: str) -> str:
        """Step 2: the Flickr page where the user approves access."""
        query = urlencode({"oauth_token": token, "perms": AUTHORIZE_PERMS})
        return f"{FLICKR_AUTHORIZE_URL}?{query}"

    async def get_access_token(
        self, request_token: str, request_secret: str, verifier: str
    ) -> AccessToken:
        """Step 3: trade the verifier for a long-lived access token."""
        oauth_params = self._signer.oauth_params(
            self._credentials.consumer_key,
            token=request_token,
            verifier=verifier,
        )
        data = await self._post_signed(
            FLICKR_ACCESS_TOKEN_URL, oauth_params, token_secret=request_secret
        )

        if not data.get("oauth_token") or not data.get("oauth_token_secret"):
            raise HandshakeError("Invalid access token response")

        logger.info("OAuth handshake completed for Flickr user %s", data.get("user_nsid", "?"))
        return AccessToken(
            token=data["oauth_token"],
            secret=data["oauth_token_secret"],
            user_id=data.get("user_nsid", ""),
            username=data.get("username", ""),
            fullname=data.get("fullname", ""),
        )

    async def _post_signed(
        self, url: str, oauth_params: dict[str, str], token_secret: Optional[str]
    ) -> dict[str, str]:
        """Sign *oauth_params*, POST them in the Authorization header, parse the body."""
        base_string = build_base_string("POST", url, oauth_params)
        signed = {
            **oauth_params,
            "oauth_signature": self._signer.sign(
                base_string, self._credentials.consumer_secret, token_secret
            ),
        }

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(
                    url,
                    headers={
                        "Authorization": build_auth_header(signed),
                        "Content-Type": "application/x-www-form-urlencoded",
                    },
                )
        except httpx.HTTPError as exc:
            logger.warning("OAuth request to %s failed: %s", url, exc)
            raise HandshakeError(f"Could not reach Flickr: {exc}") from exc

        if not response.is_success:
            logger.warning("OAuth endpoint %s returned %d", url, response.status_code)
            raise HandshakeError(
                f"Flickr rejected the token request ({response.status_code}): {response.text}"
            )

        return parse_form_response(response.text)
