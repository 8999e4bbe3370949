"""Client for the BoxOfficer edge API with cache fallback.

If a call to the edge API fails for any reason, the client reads the same
cache key the handler would have written. A missing entry reads as an empty
result, so callers see a fresh, stale or empty result and never an error.
"""

import logging
from typing import Any

import httpx
from attrs import define

from . import cache as keys
from .cache import CacheStore
from .services.tmdb import clamp_pages

logger = logging.getLogger(__name__)


@define
class BoxOfficerClient:
    """Client for the BoxOfficer edge API."""

    base_url: str
    cache: CacheStore | None = None
    transport: httpx.AsyncBaseTransport | None = None
    _client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers={"Accept": "application/json"},
                timeout=30.0,
                transport=self.transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _fetch(self, endpoint: str, params: dict | None = None) -> Any:
        client = await self._get_client()
        resp = await client.get(f"/{endpoint}", params=params)
        resp.raise_for_status()
        return resp.json()

    async def _cached(self, key: str) -> Any:
        if self.cache is None:
            return None
        try:
            entry = await self.cache.read(key)
        except Exception:
            logger.exception("Cache read for %s failed", key)
            return None
        return entry.payload if entry is not None else None

    async def _fetch_or_cached(
        self, endpoint: str, key: str, params: dict | None = None, empty: Any = None
    ) -> Any:
        try:
            return await self._fetch(endpoint, params)
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("%s unavailable (%s), reading cache key %s", endpoint, exc, key)
        cached = await self._cached(key)
        return empty if cached is None else cached

    async def now_playing(self) -> list[dict]:
        return await self._fetch_or_cached("nowPlaying", keys.NOW_PLAYING, empty=[])

    async def trending(self) -> list[dict]:
        return await self._fetch_or_cached("trending", keys.TRENDING, empty=[])

    async def trakt_trending(self) -> list[dict]:
        return await self._fetch_or_cached("traktTrending", keys.TRAKT_TRENDING, empty=[])

    async def in_theaters(self) -> list[dict]:
        return await self._fetch_or_cached("inTheaters", keys.IN_THEATERS, empty=[])

    async def digital_releases(self) -> list[dict]:
        return await self._fetch_or_cached(
            "digitalReleases", keys.DIGITAL_RELEASES, empty=[]
        )

    async def upcoming(self, kind: str = "theatrical") -> list[dict]:
        return await self._fetch_or_cached(
            "upcoming", keys.upcoming_key(kind), {"kind": kind}, empty=[]
        )

    async def movie_details(self, movie_id: int) -> dict | None:
        return await self._fetch_or_cached(
            "movieDetails", keys.movie_key(movie_id), {"id": movie_id}
        )

    async def search(self, query: str) -> list[dict]:
        if not query or not query.strip():
            return []
        return await self._fetch_or_cached(
            "search", keys.search_key(query), {"q": query}, empty=[]
        )

    async def top_rated(self, region: str | None = "US", pages: int = 1) -> list[dict]:
        pages = clamp_pages(pages)
        params = {"pages": pages}
        if region:
            params["region"] = region
        return await self._fetch_or_cached(
            "topRated", keys.top_rated_key(region, pages), params, empty=[]
        )

    async def top_grossing(self, pages: int = 1) -> list[dict]:
        pages = clamp_pages(pages)
        return await self._fetch_or_cached(
            "topGrossing", keys.top_grossing_key(pages), {"pages": pages}, empty=[]
        )
