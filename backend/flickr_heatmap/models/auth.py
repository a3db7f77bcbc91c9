"""
OAuth Token Models
==================
Token pairs exchanged during the three-legged handshake. The core never
stores these; the web layer keeps the access token in cookies and hands
it back on every authenticated call.
"""

from __future__ import annotations

from pydantic import BaseModel


class RequestToken(BaseModel):
    """Temporary credentials, valid only between authorize and callback."""

    token: str
    secret: str


class AccessToken(BaseModel):
    """Long-lived per-user credentials returned by the access-token step."""

    token: str
    secret: str
    user_id: str = ""
    username: str = ""
    fullname: str = ""
