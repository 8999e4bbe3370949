"""Trakt.tv data models."""

from attrs import define, field


@define
class TraktIds:
    """Cross-reference ids attached to a Trakt movie."""

    trakt: int
    slug: str
    imdb: str | None = None
    tmdb: int | None = None


@define
class TraktMovie:
    """Represents a movie from Trakt."""

    title: str
    year: int | None
    ids: TraktIds = field(factory=lambda: TraktIds(trakt=0, slug=""))


@define
class TrendingItem:
    """Represents a trending movie with watcher count."""

    movie: TraktMovie
    watchers: int = 0

    @property
    def tmdb_id(self) -> int | None:
        return self.movie.ids.tmdb
