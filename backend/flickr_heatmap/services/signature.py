"""
OAuth 1.0a Signature Engine
===========================
Pure helpers for signing Flickr requests with HMAC-SHA1 (RFC 5849).

Nothing here performs I/O. The crypto and randomness primitives live on
Signer so the handshake client and the request executor can be handed a
deterministic signer in tests.

The base string is the most failure-prone step: any deviation in sort
order or encoding produces a signature Flickr rejects with
``oauth_problem=signature_invalid``.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import secrets
import string
import time
from typing import Mapping, Optional
from urllib.parse import parse_qsl, quote, urlsplit, urlunsplit

_NONCE_ALPHABET = string.ascii_letters + string.digits
_NONCE_LENGTH = 32

SIGNATURE_METHOD = "HMAC-SHA1"
OAUTH_VERSION = "1.0"


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------

def percent_encode(value: str) -> str:
    """RFC 3986 encoding: only ``A-Z a-z 0-9 - . _ ~`` pass through.

    Unlike ``urlencode`` this also escapes ``! ' ( ) *``.
    """
    return quote(str(value), safe="~")


def base_url(url: str) -> str:
    """Strip the query string and fragment from *url*."""
    parts = urlsplit(url)
    return urlunsplit((parts.scheme.lower(), parts.netloc.lower(), parts.path, "", ""))


def build_base_string(method: str, url: str, params: Mapping[str, str]) -> str:
    """Build ``METHOD&enc(base_url)&enc(sorted_params)``.

    All parameters (oauth_* plus query/body params) are encoded first and
    then sorted, so the ordering matches what Flickr recomputes.
    """
    encoded = sorted((percent_encode(k), percent_encode(v)) for k, v in params.items())
    param_string = "&".join(f"{k}={v}" for k, v in encoded)
    return "&".join([
        method.upper(),
        percent_encode(base_url(url)),
        percent_encode(param_string),
    ])


def build_auth_header(params: Mapping[str, str]) -> str:
    """Format the ``Authorization: OAuth ...`` value from the oauth_* params."""
    pairs = ", ".join(
        f'{percent_encode(k)}="{percent_encode(v)}"'
        for k, v in sorted(params.items())
        if k.startswith("oauth_")
    )
    return f"OAuth {pairs}"


def parse_form_response(body: str) -> dict[str, str]:
    """Decode an ``application/x-www-form-urlencoded`` token response."""
    return dict(parse_qsl(body.strip()))


def query_params(url: str) -> dict[str, str]:
    """Existing query parameters on *url*, decoded."""
    return dict(parse_qsl(urlsplit(url).query, keep_blank_values=True))


# ---------------------------------------------------------------------------
# Signer capability
# ---------------------------------------------------------------------------

def _hmac_sha1(key: str, message: str) -> str:
    digest = hmac.new(key.encode("utf-8"), message.encode("utf-8"), hashlib.sha1).digest()
    return base64.b64encode(digest).decode("ascii")


def generate_nonce() -> str:
    """32 random alphanumeric characters, unique per request."""
    return "".join(secrets.choice(_NONCE_ALPHABET) for _ in range(_NONCE_LENGTH))


def generate_timestamp() -> str:
    return str(int(time.time()))


def sign(base_string: str, consumer_secret: str, token_secret: Optional[str] = None) -> str:
    """HMAC-SHA1 over *base_string*, base64 encoded.

    The key is ``enc(consumer_secret)&enc(token_secret)``; the request-token
    step has no token secret yet and signs with a trailing ``&``.
    """
    key = f"{percent_encode(consumer_secret)}&{percent_encode(token_secret or '')}"
    return _hmac_sha1(key, base_string)


class Signer:
    """Bundles the crypto and randomness the OAuth flow needs."""

    def nonce(self) -> str:
        return generate_nonce()

    def timestamp(self) -> str:
        return generate_timestamp()

    def sign(self, base_string: str, consumer_secret: str, token_secret: Optional[str] = None) -> str:
        return sign(base_string, consumer_secret, token_secret)

    def oauth_params(self, consumer_key: str, **extra: str) -> dict[str, str]:
        """Fresh protocol parameters for one request.

        ``extra`` keys are given without the ``oauth_`` prefix, e.g.
        ``token=...`` or ``callback=...``.
        """
        params = {
            "oauth_consumer_key": consumer_key,
            "oauth_nonce": self.nonce(),
            "oauth_signature_method": SIGNATURE_METHOD,
            "oauth_timestamp": self.timestamp(),
            "oauth_version": OAUTH_VERSION,
        }
        params.update({f"oauth_{k}": v for k, v in extra.items()})
        return params
