"""
Flickr Heatmap Configuration
============================
All environment variables in one place. Pydantic Settings validates
types at startup; OAuth credentials are turned into an immutable
OAuthCredentials struct once and passed explicitly to the signing code.
"""

from dataclasses import dataclass
from functools import lru_cache

from pydantic_settings import BaseSettings

from flickr_heatmap.errors import ConfigurationError


@dataclass(frozen=True)
class OAuthCredentials:
    """Consumer key/secret identifying this application to Flickr."""

    consumer_key: str
    consumer_secret: str


class Settings(BaseSettings):
    """Loaded from environment variables or a .env file."""

    # --- Flickr API ---
    flickr_api_key: str = ""
    flickr_api_secret: str = ""
    # Results per flickr.photos.search page (Flickr maximum is 500)
    flickr_per_page: int = 500
    # Safety cap on pages fetched per heatmap request
    flickr_max_pages: int = 10

    # --- OAuth callback ---
    base_url: str = "http://localhost:3000"

    # --- Snapshot service ---
    snapshot_service_url: str = "http://localhost:8787"

    # --- HTTP ---
    http_timeout_seconds: float = 10.0

    # --- App settings ---
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:3000"]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def callback_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/api/auth/callback"

    def oauth_credentials(self) -> OAuthCredentials:
        """Return the consumer credentials, or fail fast if either is unset."""
        if not self.flickr_api_key or not self.flickr_api_secret:
            raise ConfigurationError("Missing Flickr API key or secret")
        return OAuthCredentials(
            consumer_key=self.flickr_api_key,
            consumer_secret=self.flickr_api_secret,
        )

    def api_key(self) -> str:
        """Consumer key alone, enough for unauthenticated lookups."""
        if not self.flickr_api_key:
            raise ConfigurationError("Missing Flickr API key")
        return self.flickr_api_key


@lru_cache
def get_settings() -> Settings:
    return Settings()
