"""TMDb API service: the catalog of record for movie ids and metadata."""

import logging
from datetime import date, datetime, timedelta, timezone

import httpx
from attrs import define

from ..errors import ParseError, UpstreamError
from ..models.tmdb import (
    Credits,
    ExternalIds,
    MovieDetail,
    MovieSummary,
    WatchProviderRegion,
)

logger = logging.getLogger(__name__)

SERVICE = "catalog"
BASE_URL = "https://api.themoviedb.org/3"

MAX_PAGES = 5

# Netflix, Hulu, Disney+, Max, Prime Video, Apple TV+
MAJOR_US_PROVIDERS = (8, 15, 337, 384, 119, 350)
THEATRICAL_RELEASE_TYPES = "2|3"
DIGITAL_RELEASE_TYPE = 4
IN_THEATERS_WINDOW_DAYS = 56


def clamp_pages(pages: int | str | None) -> int:
    """Clamp a requested page count into ``1..MAX_PAGES``.

    Missing or non-numeric counts become 1.
    """
    try:
        pages = int(pages)
    except (TypeError, ValueError):
        return 1
    if pages < 1:
        return 1
    return min(pages, MAX_PAGES)


def _today() -> date:
    return datetime.now(timezone.utc).date()


@define
class TMDbService:
    """Client for TMDb API.

    The API key is injected as a query parameter on every request and never
    leaves this class.
    """

    api_key: str
    language: str = "en-US"
    transport: httpx.AsyncBaseTransport | None = None
    _client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=BASE_URL,
                headers={"Accept": "application/json"},
                timeout=30.0,
                transport=self.transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _get(self, path: str, params: dict | None = None) -> dict:
        """Issue one GET and return the decoded body. No retries."""
        client = await self._get_client()
        query = {"api_key": self.api_key, "language": self.language}
        if params:
            query.update(params)
        logger.debug("TMDb GET %s %s", path, params or {})
        try:
            resp = await client.get(path, params=query)
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
            raise ParseError(f"TMDb returned a non-JSON body for {path}") from exc
        if not isinstance(data, dict):
            raise ParseError(f"TMDb returned an unexpected body for {path}")
        return data

    async def _results(self, path: str, params: dict | None = None) -> list[MovieSummary]:
        data = await self._get(path, params)
        results = data.get("results")
        if not isinstance(results, list):
            raise ParseError(f"TMDb response for {path} has no results list")
        try:
            return [MovieSummary.from_api(item) for item in results]
        except (KeyError, TypeError, ValueError) as exc:
            raise ParseError(f"Malformed movie in TMDb response for {path}") from exc

    async def _paged(
        self, path: str, params: dict | None = None, pages: int = 1
    ) -> list[MovieSummary]:
        """Fetch pages ``1..pages`` sequentially, concatenated in page order."""
        movies: list[MovieSummary] = []
        for page in range(1, clamp_pages(pages) + 1):
            movies.extend(await self._results(path, {**(params or {}), "page": page}))
        return movies

    async def now_playing(self) -> list[MovieSummary]:
        """Movies currently in theaters (first page)."""
        return await self._results("/movie/now_playing", {"page": 1})

    async def trending(self, window: str = "week") -> list[MovieSummary]:
        """Trending movies for a time window (day or week)."""
        return await self._results(f"/trending/movie/{window}")

    async def search(self, query: str) -> list[MovieSummary]:
        """Search by title, first page only."""
        return await self._results("/search/movie", {"query": query, "page": 1})

    async def top_rated(
        self, region: str | None = None, pages: int = 1
    ) -> list[MovieSummary]:
        params = {"region": region} if region else {}
        return await self._paged("/movie/top_rated", params, pages)

    async def top_grossing(self, pages: int = 1) -> list[MovieSummary]:
        return await self._paged(
            "/discover/movie",
            {"sort_by": "revenue.desc", "vote_count.gte": 500},
            pages,
        )

    async def in_theaters(self) -> list[MovieSummary]:
        """Theatrical releases from the last eight weeks, de-duplicated by id."""
        today = _today()
        window_start = today - timedelta(days=IN_THEATERS_WINDOW_DAYS)
        movies = await self._paged(
            "/discover/movie",
            {
                "region": "US",
                "sort_by": "popularity.desc",
                "with_release_type": THEATRICAL_RELEASE_TYPES,
                "primary_release_date.gte": window_start.isoformat(),
                "primary_release_date.lte": today.isoformat(),
                "vote_count.gte": 25,
            },
            MAX_PAGES,
        )
        seen: set[int] = set()
        unique = []
        for movie in movies:
            if movie.id not in seen:
                seen.add(movie.id)
                unique.append(movie)
        return unique

    async def digital_releases(self) -> list[MovieSummary]:
        """Titles already streaming on the major US subscription services."""
        return await self._results(
            "/discover/movie",
            {
                **self._streaming_params(),
                "release_date.lte": _today().isoformat(),
                "vote_count.gte": 50,
            },
        )

    async def upcoming(self, kind: str) -> list[MovieSummary]:
        """Upcoming theatrical or digital releases, from today onwards."""
        today = _today().isoformat()
        if kind == "theatrical":
            params = {
                "sort_by": "popularity.desc",
                "region": "US",
                "with_release_type": THEATRICAL_RELEASE_TYPES,
                "release_date.gte": today,
            }
        elif kind == "digital":
            params = {**self._streaming_params(), "release_date.gte": today}
        else:
            raise ValueError(f"Unknown release kind: {kind}")
        return await self._results("/discover/movie", params)

    def _streaming_params(self) -> dict:
        return {
            "sort_by": "popularity.desc",
            "watch_region": "US",
            "with_watch_monetization_types": "flatrate",
            "with_watch_providers": "|".join(str(p) for p in MAJOR_US_PROVIDERS),
            "with_release_type": DIGITAL_RELEASE_TYPE,
        }

    async def movie_details(self, movie_id: int) -> MovieDetail:
        data = await self._get(f"/movie/{movie_id}")
        try:
            return MovieDetail.from_api(data)
        except (KeyError, TypeError, ValueError) as exc:
            raise ParseError(f"Malformed TMDb details for movie {movie_id}") from exc

    async def credits(self, movie_id: int) -> Credits:
        data = await self._get(f"/movie/{movie_id}/credits")
        try:
            return Credits.from_api(data)
        except (KeyError, TypeError) as exc:
            raise ParseError(f"Malformed TMDb credits for movie {movie_id}") from exc

    async def watch_providers(
        self, movie_id: int, region: str = "US"
    ) -> WatchProviderRegion | None:
        """Provider availability for one region; ``None`` if not listed there."""
        data = await self._get(f"/movie/{movie_id}/watch/providers")
        region_data = (data.get("results") or {}).get(region)
        if not region_data:
            return None
        try:
            return WatchProviderRegion.from_api(region_data)
        except (KeyError, TypeError) as exc:
            raise ParseError(f"Malformed watch providers for movie {movie_id}") from exc

    async def external_ids(self, movie_id: int) -> ExternalIds:
        data = await self._get(f"/movie/{movie_id}/external_ids")
        return ExternalIds.from_api(data)

