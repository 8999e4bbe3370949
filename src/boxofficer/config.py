"""Configuration from environment variables."""

import os
from functools import lru_cache

from attrs import define


@define
class Settings:
    """Application settings."""

    tmdb_api_key: str
    trakt_client_id: str
    trakt_client_secret: str | None = None
    omdb_api_key: str | None = None
    cache_dir: str | None = None
    language: str = "en-US"
    watch_region: str = "US"
    hydration_concurrency: int = 20
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 8000


def _optional(name: str) -> str | None:
    return os.environ.get(name) or None


@lru_cache
def get_settings() -> Settings:
    """Load settings from the environment."""
    return Settings(
        tmdb_api_key=os.environ["TMDB_API_KEY"],
        trakt_client_id=os.environ["TRAKT_CLIENT_ID"],
        trakt_client_secret=_optional("TRAKT_CLIENT_SECRET"),
        omdb_api_key=_optional("OMDB_API_KEY"),
        cache_dir=_optional("BOXOFFICER_CACHE_DIR"),
        language=os.environ.get("BOXOFFICER_LANGUAGE", "en-US"),
        watch_region=os.environ.get("BOXOFFICER_WATCH_REGION", "US"),
        hydration_concurrency=int(
            os.environ.get("BOXOFFICER_HYDRATION_CONCURRENCY", "20")
        ),
        log_level=os.environ.get("BOXOFFICER_LOG_LEVEL", "INFO"),
        host=os.environ.get("BOXOFFICER_HOST", "127.0.0.1"),
        port=int(os.environ.get("BOXOFFICER_PORT", "8000")),
    )
