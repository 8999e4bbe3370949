"""Aggregation layer: one operation per supported query.

Each operation calls one or more upstream clients and merges their responses
into catalog-shaped movie records. Catalog calls are required and their
failures propagate. Ratings, single-region watch providers and trending
hydration are optional, and their failures degrade to absent data.
"""

import asyncio
import logging
from collections.abc import Awaitable
from typing import TypeVar

from attrs import define

from .config import Settings
from .errors import ParseError, UpstreamError, ValidationError
from .models.tmdb import MovieDetail, MovieSummary, TrendingSummary
from .models.trakt import TrendingItem
from .services.omdb import OMDbService
from .services.tmdb import TMDbService, clamp_pages
from .services.trakt import TraktService

logger = logging.getLogger(__name__)

T = TypeVar("T")

SOCIAL_TRENDING_LIMIT = 20
UPCOMING_KINDS = ("theatrical", "digital")


def parse_movie_id(value) -> int:
    """Validate a catalog movie id from request input."""
    if isinstance(value, bool):
        raise ValidationError("id", "id must be a positive integer")
    if isinstance(value, int):
        movie_id = value
    elif isinstance(value, str) and value.strip().isdigit():
        movie_id = int(value.strip())
    elif value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError("id")
    else:
        raise ValidationError("id", "id must be a positive integer")
    if movie_id <= 0:
        raise ValidationError("id", "id must be a positive integer")
    return movie_id


@define
class Aggregator:
    """Combines TMDb, Trakt and OMDb into the published movie views."""

    tmdb: TMDbService
    trakt: TraktService
    omdb: OMDbService
    watch_region: str = "US"
    hydration_concurrency: int = SOCIAL_TRENDING_LIMIT

    @classmethod
    def from_settings(cls, settings: Settings) -> "Aggregator":
        return cls(
            tmdb=TMDbService(api_key=settings.tmdb_api_key, language=settings.language),
            trakt=TraktService(
                client_id=settings.trakt_client_id,
                client_secret=settings.trakt_client_secret,
            ),
            omdb=OMDbService(api_key=settings.omdb_api_key),
            watch_region=settings.watch_region,
            hydration_concurrency=settings.hydration_concurrency,
        )

    async def close(self) -> None:
        await self.tmdb.close()
        await self.trakt.close()
        await self.omdb.close()

    async def get_now_playing(self) -> list[MovieSummary]:
        return await self.tmdb.now_playing()

    async def get_trending(self) -> list[MovieSummary]:
        return await self.tmdb.trending()

    async def get_top_rated(
        self, region: str | None = None, page_count: int = 1
    ) -> list[MovieSummary]:
        region = region.strip().upper() if region and region.strip() else None
        return await self.tmdb.top_rated(region=region, pages=clamp_pages(page_count))

    async def get_top_grossing(self, page_count: int = 1) -> list[MovieSummary]:
        return await self.tmdb.top_grossing(pages=clamp_pages(page_count))

    async def search(self, query: str | None) -> list[MovieSummary]:
        if query is None or not query.strip():
            raise ValidationError("q")
        return await self.tmdb.search(query.strip())

    async def get_in_theaters(self) -> list[MovieSummary]:
        return await self.tmdb.in_theaters()

    async def get_digital_releases(self) -> list[MovieSummary]:
        return await self.tmdb.digital_releases()

    async def get_upcoming(self, kind: str | None) -> list[MovieSummary]:
        if kind not in UPCOMING_KINDS:
            raise ValidationError(
                "kind", f"kind must be one of: {', '.join(UPCOMING_KINDS)}"
            )
        return await self.tmdb.upcoming(kind)

    async def get_social_trending(self) -> list[TrendingSummary]:
        """Trakt's trending list hydrated with TMDb details.

        Only the top 20 Trakt entries are considered. Entries without a TMDb
        id, or whose TMDb lookup fails, are dropped, so fewer than 20 items
        may come back. Hydrated items are ordered by TMDb popularity rather
        than by Trakt rank; ties keep their Trakt order.
        """
        items = (await self.trakt.get_trending_movies())[:SOCIAL_TRENDING_LIMIT]
        semaphore = asyncio.Semaphore(max(1, self.hydration_concurrency))

        async with asyncio.TaskGroup() as group:
            tasks = [group.create_task(self._hydrate(item, semaphore)) for item in items]

        hydrated = [task.result() for task in tasks if task.result() is not None]
        if len(hydrated) < len(items):
            logger.info(
                "Hydrated %d of %d trending movies", len(hydrated), len(items)
            )
        hydrated.sort(key=lambda movie: movie.popularity, reverse=True)
        return hydrated

    async def _hydrate(
        self, item: TrendingItem, semaphore: asyncio.Semaphore
    ) -> TrendingSummary | None:
        if item.tmdb_id is None:
            logger.debug("Trending movie %r has no TMDb id", item.movie.title)
            return None
        async with semaphore:
            try:
                detail = await self.tmdb.movie_details(item.tmdb_id)
            except (UpstreamError, ParseError) as exc:
                logger.warning(
                    "Dropping trending movie %r (tmdb %s): %s",
                    item.movie.title,
                    item.tmdb_id,
                    exc,
                )
                return None
        return detail.to_summary(watchers=item.watchers)

    async def get_movie_detail(self, movie_id) -> MovieDetail:
        """Merge details, credits, watch providers, external ids and ratings."""
        movie_id = parse_movie_id(movie_id)

        results = await asyncio.gather(
            self.tmdb.movie_details(movie_id),
            self.tmdb.credits(movie_id),
            self._optional(
                self.tmdb.watch_providers(movie_id, self.watch_region),
                "watch providers",
                movie_id,
            ),
            self._optional(self.tmdb.external_ids(movie_id), "external ids", movie_id),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result
        detail, credits, providers, external_ids = results

        detail.credits = credits
        detail.watch_providers = providers
        detail.external_ids = external_ids
        if external_ids is not None and external_ids.imdb_id:
            detail.ratings = await self.omdb.get_ratings(external_ids.imdb_id)
        return detail

    async def _optional(self, call: Awaitable[T], what: str, movie_id: int) -> T | None:
        try:
            return await call
        except (UpstreamError, ParseError) as exc:
            logger.warning("No %s for movie %s: %s", what, movie_id, exc)
            return None
