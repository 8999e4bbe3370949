"""Shared fixtures: fake TMDb, Trakt and OMDb upstreams."""

import httpx
import pytest

from boxofficer.aggregation import Aggregator
from boxofficer.cache import MemoryCacheStore
from boxofficer.services.omdb import OMDbService
from boxofficer.services.tmdb import TMDbService
from boxofficer.services.trakt import TraktService


class FakeUpstream:
    """Routes requests by URL path to canned responses and records them.

    A route value may be a JSON body (served with 200), a ``(status, body)``
    tuple, or a callable taking the request and returning a response.
    """

    def __init__(self, routes: dict | None = None):
        self.routes = dict(routes or {})
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, json={"status_message": "Not found"})
        if callable(route):
            return route(request)
        if isinstance(route, tuple):
            status, body = route
            return httpx.Response(status, json=body)
        return httpx.Response(200, json=route)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    @property
    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]


def movie(id: int, title: str = "", popularity: float = 10.0, **extra) -> dict:
    """A TMDb list-endpoint movie."""
    return {
        "id": id,
        "title": title or f"Movie {id}",
        "overview": f"Overview of movie {id}",
        "release_date": "2024-05-01",
        "poster_path": f"/poster{id}.jpg",
        "backdrop_path": f"/backdrop{id}.jpg",
        "popularity": popularity,
        "vote_average": 7.1,
        "genre_ids": [28, 12],
        **extra,
    }


def movie_details(id: int, popularity: float = 10.0, **extra) -> dict:
    """A TMDb /movie/{id} body."""
    body = movie(id, popularity=popularity)
    body.pop("genre_ids")
    body.update(
        {
            "runtime": 121,
            "budget": 100_000_000,
            "revenue": 450_000_000,
            "vote_count": 2048,
            "tagline": "A tagline",
            "genres": [{"id": 28, "name": "Action"}, {"id": 12, "name": "Adventure"}],
        }
    )
    body.update(extra)
    return body


def trakt_item(tmdb_id: int | None, title: str = "", watchers: int = 100) -> dict:
    ids = {"trakt": 1000 + (tmdb_id or 0), "slug": f"movie-{tmdb_id}", "imdb": None}
    if tmdb_id is not None:
        ids["tmdb"] = tmdb_id
    return {
        "watchers": watchers,
        "movie": {"title": title or f"Movie {tmdb_id}", "year": 2024, "ids": ids},
    }


@pytest.fixture
def tmdb_upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def trakt_upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def omdb_upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def tmdb(tmdb_upstream) -> TMDbService:
    return TMDbService(api_key="tmdb-secret", transport=tmdb_upstream.transport)


@pytest.fixture
def trakt(trakt_upstream) -> TraktService:
    return TraktService(client_id="trakt-client", transport=trakt_upstream.transport)


@pytest.fixture
def omdb(omdb_upstream) -> OMDbService:
    return OMDbService(api_key="omdb-secret", transport=omdb_upstream.transport)


@pytest.fixture
def aggregator(tmdb, trakt, omdb) -> Aggregator:
    return Aggregator(tmdb=tmdb, trakt=trakt, omdb=omdb)


@pytest.fixture
def cache() -> MemoryCacheStore:
    return MemoryCacheStore()
