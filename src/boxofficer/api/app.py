"""HTTP edge handlers for the BoxOfficer aggregation API.

Every handler validates its parameters, runs one aggregation, writes the
result through to the cache and returns it as JSON. Failures become
``{"error": message}`` with status 400 (bad input) or 500 (anything else).
Handlers never read from the cache; that fallback belongs to callers.
"""

import logging
from collections.abc import Awaitable
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from .. import cache as keys
from ..aggregation import Aggregator, parse_movie_id
from ..cache import CacheStore, build_cache
from ..config import get_settings
from ..errors import ValidationError
from ..log import configure_logging
from ..services.tmdb import clamp_pages

logger = logging.getLogger(__name__)


def get_aggregator(request: Request) -> Aggregator:
    if request.app.state.aggregator is None:
        request.app.state.aggregator = Aggregator.from_settings(get_settings())
    return request.app.state.aggregator


def get_cache(request: Request) -> CacheStore:
    if request.app.state.cache is None:
        request.app.state.cache = build_cache(get_settings().cache_dir)
    return request.app.state.cache


def parse_pages(raw: str | None) -> int:
    """Page count from a query string: defaults to 1, clamped to 1..5."""
    return clamp_pages(raw.strip() if raw is not None else None)


def _serialize(result: Any) -> Any:
    if isinstance(result, list):
        return [item.to_dict() for item in result]
    return result.to_dict()


def _error(status_code: int, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": str(exc)})


async def publish(cache: CacheStore, key: str, call: Awaitable[Any]) -> JSONResponse:
    """Await an aggregation, write it through to the cache and respond."""
    try:
        payload = _serialize(await call)
    except ValidationError as exc:
        return _error(400, exc)
    except Exception as exc:
        logger.exception("Aggregation for %s failed", key)
        return _error(500, exc)

    try:
        await cache.write(key, payload)
    except Exception:
        logger.exception("Cache write for %s failed", key)
    return JSONResponse(content=payload)


def create_app(
    aggregator: Aggregator | None = None, cache: CacheStore | None = None
) -> FastAPI:
    """Build the API. Collaborators are created from settings when omitted."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        if app.state.aggregator is not None:
            await app.state.aggregator.close()

    app = FastAPI(title="BoxOfficer API", version=__version__, lifespan=lifespan)
    app.state.aggregator = aggregator
    app.state.cache = cache

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health():
        return {"ok": True, "service": "boxofficer", "version": __version__}

    @app.get("/nowPlaying")
    async def now_playing(
        agg: Aggregator = Depends(get_aggregator),
        store: CacheStore = Depends(get_cache),
    ):
        return await publish(store, keys.NOW_PLAYING, agg.get_now_playing())

    @app.get("/trending")
    async def trending(
        agg: Aggregator = Depends(get_aggregator),
        store: CacheStore = Depends(get_cache),
    ):
        return await publish(store, keys.TRENDING, agg.get_trending())

    @app.get("/traktTrending")
    async def trakt_trending(
        agg: Aggregator = Depends(get_aggregator),
        store: CacheStore = Depends(get_cache),
    ):
        return await publish(store, keys.TRAKT_TRENDING, agg.get_social_trending())

    @app.get("/movieDetails")
    async def movie_details(
        id: str | None = None,
        agg: Aggregator = Depends(get_aggregator),
        store: CacheStore = Depends(get_cache),
    ):
        try:
            movie_id = parse_movie_id(id)
        except ValidationError as exc:
            return _error(400, exc)
        return await publish(store, keys.movie_key(movie_id), agg.get_movie_detail(movie_id))

    @app.get("/search")
    async def search(
        q: str | None = None,
        agg: Aggregator = Depends(get_aggregator),
        store: CacheStore = Depends(get_cache),
    ):
        return await publish(store, keys.search_key(q or ""), agg.search(q))

    @app.get("/topRated")
    async def top_rated(
        region: str | None = None,
        pages: str | None = None,
        agg: Aggregator = Depends(get_aggregator),
        store: CacheStore = Depends(get_cache),
    ):
        page_count = parse_pages(pages)
        return await publish(
            store,
            keys.top_rated_key(region, page_count),
            agg.get_top_rated(region=region, page_count=page_count),
        )

    @app.get("/topGrossing")
    async def top_grossing(
        pages: str | None = None,
        agg: Aggregator = Depends(get_aggregator),
        store: CacheStore = Depends(get_cache),
    ):
        page_count = parse_pages(pages)
        return await publish(
            store,
            keys.top_grossing_key(page_count),
            agg.get_top_grossing(page_count=page_count),
        )

    @app.get("/inTheaters")
    async def in_theaters(
        agg: Aggregator = Depends(get_aggregator),
        store: CacheStore = Depends(get_cache),
    ):
        return await publish(store, keys.IN_THEATERS, agg.get_in_theaters())

    @app.get("/digitalReleases")
    async def digital_releases(
        agg: Aggregator = Depends(get_aggregator),
        store: CacheStore = Depends(get_cache),
    ):
        return await publish(store, keys.DIGITAL_RELEASES, agg.get_digital_releases())

    @app.get("/upcoming")
    async def upcoming(
        kind: str = "theatrical",
        agg: Aggregator = Depends(get_aggregator),
        store: CacheStore = Depends(get_cache),
    ):
        return await publish(store, keys.upcoming_key(kind), agg.get_upcoming(kind))

    return app


def main() -> None:
    """Run the API with uvicorn."""
    import uvicorn

    settings = get_settings()
    configure_logging(settings.log_level)
    uvicorn.run(create_app(), host=settings.host, port=settings.port)
