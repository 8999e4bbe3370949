"""Tests for the aggregation layer."""

import httpx
import pytest

from boxofficer.aggregation import SOCIAL_TRENDING_LIMIT, Aggregator, parse_movie_id
from boxofficer.errors import UpstreamError, ValidationError

from conftest import movie, movie_details, trakt_item


def detail_route(popularity_by_id: dict[int, float]):
    """Serve /3/movie/{id} for the given ids, 404 for anything else."""

    def route(request: httpx.Request) -> httpx.Response:
        movie_id = int(request.url.path.rsplit("/", 1)[-1])
        if movie_id not in popularity_by_id:
            return httpx.Response(404, json={"status_message": "Not found"})
        return httpx.Response(
            200, json=movie_details(movie_id, popularity=popularity_by_id[movie_id])
        )

    return route


def install_details(tmdb_upstream, popularity_by_id: dict[int, float]) -> None:
    route = detail_route(popularity_by_id)
    for movie_id in popularity_by_id:
        tmdb_upstream.routes[f"/3/movie/{movie_id}"] = route


class TestListQueries:
    """Tests for the pass-through catalog listings."""

    @pytest.mark.asyncio
    async def test_search_rejects_empty_query(self, aggregator, tmdb_upstream):
        """Test an empty query fails before any upstream call."""
        for query in ("", "   ", None):
            with pytest.raises(ValidationError):
                await aggregator.search(query)
        assert tmdb_upstream.requests == []

    @pytest.mark.asyncio
    async def test_search_is_repeatable(self, aggregator, tmdb_upstream):
        """Test the same query returns the same ids."""
        tmdb_upstream.routes["/3/search/movie"] = {
            "results": [movie(19995, "Avatar"), movie(76600, "Avatar: The Way of Water")]
        }
        first = await aggregator.search("avatar")
        second = await aggregator.search("avatar")
        assert [m.id for m in first] == [m.id for m in second] == [19995, 76600]
        assert tmdb_upstream.requests[0].url.params["query"] == "avatar"

    @pytest.mark.asyncio
    async def test_top_rated_page_count_clamped(self, aggregator, tmdb_upstream):
        """Test page counts above five are clamped."""
        tmdb_upstream.routes["/3/movie/top_rated"] = {"results": [movie(1), movie(2)]}
        movies = await aggregator.get_top_rated(region="US", page_count=12)
        assert len(movies) == 10
        assert len(tmdb_upstream.requests) == 5

    @pytest.mark.asyncio
    async def test_top_grossing_unmodified(self, aggregator, tmdb_upstream):
        """Test results come back in upstream order."""
        tmdb_upstream.routes["/3/discover/movie"] = {
            "results": [movie(3, popularity=1.0), movie(1, popularity=99.0)]
        }
        movies = await aggregator.get_top_grossing(page_count=1)
        assert [m.id for m in movies] == [3, 1]

    @pytest.mark.asyncio
    async def test_upcoming_rejects_unknown_kind(self, aggregator, tmdb_upstream):
        """Test the release kind is validated before calling TMDb."""
        with pytest.raises(ValidationError):
            await aggregator.get_upcoming("vhs")
        assert tmdb_upstream.requests == []

    @pytest.mark.asyncio
    async def test_catalog_failure_propagates(self, aggregator, tmdb_upstream):
        """Test a required catalog failure aborts the query."""
        tmdb_upstream.routes["/3/movie/now_playing"] = (500, {"status_message": "oops"})
        with pytest.raises(UpstreamError):
            await aggregator.get_now_playing()


class TestSocialTrending:
    """Tests for Trakt trending hydration."""

    @pytest.mark.asyncio
    async def test_only_top_twenty_considered(self, aggregator, trakt_upstream, tmdb_upstream):
        """Test at most twenty items are hydrated."""
        ids = list(range(1, 31))
        trakt_upstream.routes["/movies/trending"] = [trakt_item(i) for i in ids]
        install_details(tmdb_upstream, {i: float(i) for i in ids})

        results = await aggregator.get_social_trending()

        assert len(results) == SOCIAL_TRENDING_LIMIT
        assert {m.id for m in results} == set(range(1, 21))
        assert len(tmdb_upstream.requests) == SOCIAL_TRENDING_LIMIT

    @pytest.mark.asyncio
    async def test_unresolvable_items_dropped(self, aggregator, trakt_upstream, tmdb_upstream):
        """Test items without a TMDb id or with a failed lookup disappear."""
        trakt_upstream.routes["/movies/trending"] = [
            trakt_item(1),
            trakt_item(None, title="No Cross Reference"),
            trakt_item(2),
            trakt_item(404),
        ]
        install_details(tmdb_upstream, {1: 5.0, 2: 6.0})
        tmdb_upstream.routes["/3/movie/404"] = (404, {"status_message": "Not found"})

        results = await aggregator.get_social_trending()

        assert sorted(m.id for m in results) == [1, 2]
        assert "/3/movie/404" in tmdb_upstream.paths

    @pytest.mark.asyncio
    async def test_null_ids_dropped(self, aggregator, trakt_upstream, tmdb_upstream):
        """Test items with null ids or a null movie are dropped, not fatal."""
        trakt_upstream.routes["/movies/trending"] = [
            trakt_item(1),
            {"watchers": 5, "movie": {"title": "Null Ids", "year": 2024, "ids": None}},
            {"watchers": 3, "movie": None},
        ]
        install_details(tmdb_upstream, {1: 5.0})

        results = await aggregator.get_social_trending()

        assert [m.id for m in results] == [1]
        assert tmdb_upstream.paths == ["/3/movie/1"]

    @pytest.mark.asyncio
    async def test_sorted_by_popularity_with_watchers(
        self, aggregator, trakt_upstream, tmdb_upstream
    ):
        """Test hydrated items are ordered by TMDb popularity, ties by rank."""
        trakt_upstream.routes["/movies/trending"] = [
            trakt_item(1, watchers=900),
            trakt_item(2, watchers=800),
            trakt_item(3, watchers=700),
            trakt_item(4, watchers=600),
        ]
        install_details(tmdb_upstream, {1: 10.0, 2: 50.0, 3: 10.0, 4: 30.0})

        results = await aggregator.get_social_trending()

        assert [m.id for m in results] == [2, 4, 1, 3]
        assert [m.watchers for m in results] == [800, 600, 900, 700]

    @pytest.mark.asyncio
    async def test_concurrency_cap(self, tmdb, trakt, omdb, trakt_upstream, tmdb_upstream):
        """Test a cap of one still hydrates every item."""
        trakt_upstream.routes["/movies/trending"] = [trakt_item(i) for i in (1, 2, 3)]
        install_details(tmdb_upstream, {1: 1.0, 2: 2.0, 3: 3.0})
        aggregator = Aggregator(tmdb=tmdb, trakt=trakt, omdb=omdb, hydration_concurrency=1)
        results = await aggregator.get_social_trending()
        assert [m.id for m in results] == [3, 2, 1]

    @pytest.mark.asyncio
    async def test_trakt_failure_propagates(self, aggregator, trakt_upstream):
        """Test the trending list itself is a required call."""
        trakt_upstream.routes["/movies/trending"] = (500, {"error": "down"})
        with pytest.raises(UpstreamError):
            await aggregator.get_social_trending()


class TestMovieDetail:
    """Tests for the merged movie detail."""

    def install(self, tmdb_upstream, movie_id: int, imdb_id: str | None = "tt0000042"):
        tmdb_upstream.routes[f"/3/movie/{movie_id}"] = movie_details(movie_id, revenue=0)
        tmdb_upstream.routes[f"/3/movie/{movie_id}/credits"] = {
            "id": movie_id,
            "cast": [{"id": 1, "name": "Star", "character": "Lead"}],
            "crew": [{"id": 2, "name": "Auteur", "job": "Director"}],
        }
        tmdb_upstream.routes[f"/3/movie/{movie_id}/watch/providers"] = {
            "results": {"US": {"flatrate": [{"provider_id": 8, "provider_name": "Netflix"}]}}
        }
        tmdb_upstream.routes[f"/3/movie/{movie_id}/external_ids"] = {
            "id": movie_id,
            "imdb_id": imdb_id,
        }

    @pytest.mark.asyncio
    async def test_merges_all_sources(self, aggregator, tmdb_upstream, omdb_upstream):
        """Test the detail carries credits, providers, ids and ratings."""
        self.install(tmdb_upstream, 42)
        omdb_upstream.routes["/"] = {
            "imdbID": "tt0000042",
            "Ratings": [{"Source": "Rotten Tomatoes", "Value": "91%"}],
            "BoxOffice": "$123,456,789",
            "Response": "True",
        }

        detail = await aggregator.get_movie_detail(42)

        assert detail.id == 42
        assert detail.credits.directors() == ["Auteur"]
        assert detail.watch_providers.flatrate[0].provider_name == "Netflix"
        assert detail.external_ids.imdb_id == "tt0000042"
        assert detail.ratings.critic_score == 91
        financials = detail.to_dict()["financials"]
        assert financials["revenue"] == 123456789
        assert financials["domestic_only"] is True

    @pytest.mark.asyncio
    async def test_string_id_accepted(self, aggregator, tmdb_upstream):
        """Test the returned id equals the requested one."""
        self.install(tmdb_upstream, 7, imdb_id=None)
        detail = await aggregator.get_movie_detail("7")
        assert detail.id == 7
        assert detail.ratings is None

    @pytest.mark.asyncio
    async def test_optional_parts_degrade(self, aggregator, tmdb_upstream, omdb_upstream):
        """Test provider and ratings failures leave absent fields."""
        self.install(tmdb_upstream, 9)
        tmdb_upstream.routes["/3/movie/9/watch/providers"] = (500, {})
        omdb_upstream.routes["/"] = (503, {})

        detail = await aggregator.get_movie_detail(9)

        assert detail.watch_providers is None
        assert detail.ratings is None
        assert detail.credits is not None

    @pytest.mark.asyncio
    async def test_region_not_listed(self, aggregator, tmdb_upstream):
        """Test a movie with no entry for the region has no providers."""
        self.install(tmdb_upstream, 10, imdb_id=None)
        tmdb_upstream.routes["/3/movie/10/watch/providers"] = {"results": {"GB": {}}}
        detail = await aggregator.get_movie_detail(10)
        assert detail.watch_providers is None

    @pytest.mark.asyncio
    async def test_missing_details_fail(self, aggregator, tmdb_upstream):
        """Test the core detail lookup is required."""
        self.install(tmdb_upstream, 11)
        tmdb_upstream.routes["/3/movie/11"] = (404, {"status_message": "Not found"})
        with pytest.raises(UpstreamError) as excinfo:
            await aggregator.get_movie_detail(11)
        assert excinfo.value.status == 404

    @pytest.mark.asyncio
    async def test_invalid_id(self, aggregator, tmdb_upstream):
        """Test invalid ids never reach TMDb."""
        for bad in (None, "", "abc", 0, -3, True):
            with pytest.raises(ValidationError):
                await aggregator.get_movie_detail(bad)
        assert tmdb_upstream.requests == []


def test_parse_movie_id():
    """Test id parsing from request strings."""
    assert parse_movie_id(" 550 ") == 550
    assert parse_movie_id(27205) == 27205
