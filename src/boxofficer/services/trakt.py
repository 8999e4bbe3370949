"""Trakt.tv API service for trending data."""

import logging

import httpx
from attrs import define

from ..errors import ParseError, UpstreamError
from ..models.trakt import TraktIds, TraktMovie, TrendingItem

logger = logging.getLogger(__name__)

SERVICE = "trending"


@define
class TraktService:
    """Client for Trakt.tv API."""

    client_id: str
    client_secret: str | None = None
    transport: httpx.AsyncBaseTransport | None = None
    _client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url="https://api.trakt.tv",
                headers={
                    "Content-Type": "application/json",
                    "trakt-api-version": "2",
                    "trakt-api-key": self.client_id,
                },
                timeout=30.0,
                transport=self.transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    def _parse_movie(self, movie_data: dict) -> TraktMovie:
        """Parse movie data from Trakt API response."""
        ids = movie_data.get("ids") or {}
        return TraktMovie(
            title=movie_data.get("title", ""),
            year=movie_data.get("year"),
            ids=TraktIds(
                trakt=ids.get("trakt", 0),
                slug=ids.get("slug", ""),
                imdb=ids.get("imdb"),
                tmdb=ids.get("tmdb"),
            ),
        )

    async def get_trending_movies(self, limit: int | None = None) -> list[TrendingItem]:
        """Get currently trending movies, in Trakt's ranking order."""
        client = await self._get_client()
        params = {"limit": limit} if limit else None
        try:
            resp = await client.get("/movies/trending", params=params)
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise UpstreamError(
                SERVICE, exc.response.status_code, exc.response.text
            ) from exc
        except httpx.RequestError as exc:
            raise UpstreamError(SERVICE, None, str(exc)) from exc

        try:
            data = resp.json()
        except ValueError as exc:
            raise ParseError("Trakt returned a non-JSON trending body") from exc
        if not isinstance(data, list):
            raise ParseError("Trakt trending body is not a list")

        logger.debug("Trakt returned %d trending movies", len(data))
        return [
            TrendingItem(
                movie=self._parse_movie(item.get("movie") or {}),
                watchers=item.get("watchers") or 0,
            )
            for item in data
            if isinstance(item, dict)
        ]
