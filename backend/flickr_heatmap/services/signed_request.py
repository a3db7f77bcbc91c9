"""
Signed Request Executor
=======================
Issues an OAuth-signed GET for any Flickr URL on behalf of a user.

The URL's own query parameters take part in the signature alongside the
fresh oauth_* parameters; the request itself goes out with the original
URL and an Authorization header.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from flickr_heatmap.config import OAuthCredentials
from flickr_heatmap.errors import SignatureRequestError
from flickr_heatmap.services.signature import (
    Signer,
    build_auth_header,
    build_base_string,
    query_params,
)

logger = logging.getLogger(__name__)


class SignedRequestExecutor:
    """Signs GET requests with the consumer secret and a user's access secret."""

    def __init__(
        self,
        credentials: OAuthCredentials,
        signer: Optional[Signer] = None,
        timeout: float = 10.0,
    ) -> None:
        self._credentials = credentials
        self._signer = signer or Signer()
        self._timeout = timeout

    def authorization_header(self, url: str, access_token: str, access_secret: str) -> str:
        """Compute the Authorization header value for a GET of *url*."""
        oauth_params = self._signer.oauth_params(
            self._credentials.consumer_key, token=access_token
        )
        base_string = build_base_string("GET", url, {**query_params(url), **oauth_params})
        oauth_params["oauth_signature"] = self._signer.sign(
            base_string, self._credentials.consumer_secret, access_secret
        )
        return build_auth_header(oauth_params)

    async def signed_fetch(self, url: str, access_token: str, access_secret: str) -> httpx.Response:
        """GET *url* signed for the access token pair.

        Raises SignatureRequestError with ``retryable=True`` on transport
        failures and ``retryable=False`` when Flickr answers non-2xx.
        """
        header = self.authorization_header(url, access_token, access_secret)

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.get(url, headers={"Authorization": header})
        except httpx.HTTPError as exc:
            raise SignatureRequestError(
                f"Signed request failed: {exc}", retryable=True
            ) from exc

        if not response.is_success:
            raise SignatureRequestError(
                f"Signed request rejected ({response.status_code})",
                status_code=response.status_code,
                body=response.text,
            )
        return response
