"""
Error Taxonomy
==============
Every failure the core can surface is a HeatmapError with a stable
``kind`` string. The FastAPI exception handler in main.py renders these as
``{"detail": {"kind": ..., "message": ...}}`` so callers never see raw
transport exceptions.
"""

from __future__ import annotations

from typing import Optional


class HeatmapError(Exception):
    """Base class for structured, user-visible errors."""

    kind = "error"
    http_status = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"kind": self.kind, "message": self.message}


class ConfigurationError(HeatmapError):
    """Consumer credentials are missing. Fatal, never retried."""

    kind = "configuration_error"
    http_status = 500


class HandshakeError(HeatmapError):
    """Request-token or access-token exchange failed; restart the login."""

    kind = "handshake_error"
    http_status = 502


class SignatureRequestError(HeatmapError):
    """A signed call failed.

    ``retryable`` is True for transport failures (the caller may try again)
    and False when Flickr rejected the request, since resending the same
    signature cannot succeed.
    """

    kind = "signature_request_error"
    http_status = 502

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: str = "",
        retryable: bool = False,
    ) -> None:
        self.status_code = status_code
        self.body = body
        self.retryable = retryable
        super().__init__(message)


class UserNotFound(HeatmapError):
    """Neither username nor profile URL resolved to a Flickr account."""

    kind = "user_not_found"
    http_status = 404


class ParseError(HeatmapError):
    """Flickr returned a body we could not decode."""

    kind = "parse_error"
    http_status = 502


class ProviderError(HeatmapError):
    """Flickr answered ``stat=fail`` or a non-2xx status on an unsigned call."""

    kind = "provider_error"
    http_status = 502

    def __init__(self, message: str, code: Optional[int] = None) -> None:
        self.code = code
        super().__init__(message)


class UpstreamUnavailable(HeatmapError):
    """Network failure talking to Flickr or the snapshot service."""

    kind = "upstream_unavailable"
    http_status = 503


class SnapshotNotFound(HeatmapError):
    kind = "snapshot_not_found"
    http_status = 404


class SnapshotError(HeatmapError):
    kind = "snapshot_error"
    http_status = 502
