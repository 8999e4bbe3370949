"""TMDb data models."""

from attrs import define, field

from ..finance import financials
from .omdb import RatingsPayload


def _money(value) -> int:
    """Coerce a budget/revenue value to non-negative whole dollars."""
    try:
        amount = int(value or 0)
    except (TypeError, ValueError):
        return 0
    return max(amount, 0)


@define
class Genre:
    """Represents a TMDb genre."""

    id: int
    name: str


@define
class MovieSummary:
    """Represents a movie as returned by TMDb list endpoints."""

    id: int
    title: str
    overview: str = ""
    release_date: str | None = None
    poster_path: str | None = None
    backdrop_path: str | None = None
    popularity: float = 0.0
    vote_average: float = 0.0
    genre_ids: list[int] = field(factory=list)

    @classmethod
    def from_api(cls, data: dict) -> "MovieSummary":
        return cls(
            id=data["id"],
            title=data.get("title", ""),
            overview=data.get("overview") or "",
            release_date=data.get("release_date") or None,
            poster_path=data.get("poster_path"),
            backdrop_path=data.get("backdrop_path"),
            popularity=float(data.get("popularity") or 0.0),
            vote_average=float(data.get("vote_average") or 0.0),
            genre_ids=list(data.get("genre_ids", [])),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "overview": self.overview,
            "release_date": self.release_date,
            "poster_path": self.poster_path,
            "backdrop_path": self.backdrop_path,
            "vote_average": self.vote_average,
            "popularity": self.popularity,
            "genre_ids": self.genre_ids,
        }


@define
class TrendingSummary(MovieSummary):
    """A Trakt trending movie hydrated with TMDb details."""

    watchers: int = 0

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["watchers"] = self.watchers
        return data


@define
class CastMember:
    """Represents a cast credit."""

    id: int
    name: str
    character: str | None = None
    profile_path: str | None = None


@define
class CrewMember:
    """Represents a crew credit."""

    id: int
    name: str
    job: str | None = None
    department: str | None = None
    profile_path: str | None = None


@define
class Credits:
    """Cast and crew for a movie."""

    cast: list[CastMember] = field(factory=list)
    crew: list[CrewMember] = field(factory=list)

    @classmethod
    def from_api(cls, data: dict) -> "Credits":
        return cls(
            cast=[
                CastMember(
                    id=c["id"],
                    name=c.get("name", ""),
                    character=c.get("character"),
                    profile_path=c.get("profile_path"),
                )
                for c in data.get("cast", [])
            ],
            crew=[
                CrewMember(
                    id=c["id"],
                    name=c.get("name", ""),
                    job=c.get("job"),
                    department=c.get("department"),
                    profile_path=c.get("profile_path"),
                )
                for c in data.get("crew", [])
            ],
        )

    def directors(self) -> list[str]:
        return [c.name for c in self.crew if c.job == "Director"]


@define
class WatchProvider:
    """A streaming, rental or purchase provider."""

    provider_id: int
    provider_name: str
    logo_path: str | None = None


@define
class WatchProviderRegion:
    """Provider availability for a single region."""

    link: str | None = None
    flatrate: list[WatchProvider] = field(factory=list)
    rent: list[WatchProvider] = field(factory=list)
    buy: list[WatchProvider] = field(factory=list)

    @classmethod
    def from_api(cls, data: dict) -> "WatchProviderRegion":
        def providers(key: str) -> list[WatchProvider]:
            return [
                WatchProvider(
                    provider_id=p["provider_id"],
                    provider_name=p.get("provider_name", ""),
                    logo_path=p.get("logo_path"),
                )
                for p in data.get(key) or []
            ]

        return cls(
            link=data.get("link"),
            flatrate=providers("flatrate"),
            rent=providers("rent"),
            buy=providers("buy"),
        )


@define
class ExternalIds:
    """Cross-reference ids for a movie in other catalogs."""

    imdb_id: str | None = None
    wikidata_id: str | None = None
    facebook_id: str | None = None
    instagram_id: str | None = None
    twitter_id: str | None = None

    @classmethod
    def from_api(cls, data: dict) -> "ExternalIds":
        return cls(
            imdb_id=data.get("imdb_id") or None,
            wikidata_id=data.get("wikidata_id") or None,
            facebook_id=data.get("facebook_id") or None,
            instagram_id=data.get("instagram_id") or None,
            twitter_id=data.get("twitter_id") or None,
        )


@define
class MovieDetail(MovieSummary):
    """Represents a fully merged movie: TMDb details plus enrichment."""

    runtime: int | None = None
    budget: int = 0
    revenue: int = 0
    vote_count: int = 0
    tagline: str | None = None
    genres: list[Genre] = field(factory=list)
    credits: Credits | None = None
    watch_providers: WatchProviderRegion | None = None
    external_ids: ExternalIds | None = None
    ratings: RatingsPayload | None = None

    @classmethod
    def from_api(cls, data: dict) -> "MovieDetail":
        genres = [Genre(id=g["id"], name=g["name"]) for g in data.get("genres", [])]
        return cls(
            id=data["id"],
            title=data.get("title", ""),
            overview=data.get("overview") or "",
            release_date=data.get("release_date") or None,
            poster_path=data.get("poster_path"),
            backdrop_path=data.get("backdrop_path"),
            popularity=float(data.get("popularity") or 0.0),
            vote_average=float(data.get("vote_average") or 0.0),
            genre_ids=[g.id for g in genres],
            runtime=data.get("runtime") or None,
            budget=_money(data.get("budget")),
            revenue=_money(data.get("revenue")),
            vote_count=data.get("vote_count") or 0,
            tagline=data.get("tagline") or None,
            genres=genres,
        )

    @property
    def genre_names(self) -> list[str]:
        return [g.name for g in self.genres]

    def to_summary(self, watchers: int | None = None) -> MovieSummary:
        """Project the detail down to list-endpoint shape."""
        fields = dict(
            id=self.id,
            title=self.title,
            overview=self.overview,
            release_date=self.release_date,
            poster_path=self.poster_path,
            backdrop_path=self.backdrop_path,
            popularity=self.popularity,
            vote_average=self.vote_average,
            genre_ids=[g.id for g in self.genres],
        )
        if watchers is None:
            return MovieSummary(**fields)
        return TrendingSummary(watchers=watchers, **fields)

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update(
            {
                "runtime": self.runtime,
                "budget": self.budget,
                "revenue": self.revenue,
                "vote_count": self.vote_count,
                "tagline": self.tagline,
                "genres": [{"id": g.id, "name": g.name} for g in self.genres],
                "credits": _credits_dict(self.credits),
                "watch_providers": _providers_dict(self.watch_providers),
                "external_ids": _external_ids_dict(self.external_ids),
                "ratings": self.ratings.to_dict() if self.ratings else None,
                "financials": financials(self.budget, self.revenue, self.ratings),
            }
        )
        return data


def _credits_dict(credits: Credits | None) -> dict | None:
    if credits is None:
        return None
    return {
        "cast": [
            {
                "id": c.id,
                "name": c.name,
                "character": c.character,
                "profile_path": c.profile_path,
            }
            for c in credits.cast
        ],
        "crew": [
            {
                "id": c.id,
                "name": c.name,
                "job": c.job,
                "department": c.department,
                "profile_path": c.profile_path,
            }
            for c in credits.crew
        ],
    }


def _providers_dict(region: WatchProviderRegion | None) -> dict | None:
    if region is None:
        return None

    def providers(items: list[WatchProvider]) -> list[dict]:
        return [
            {
                "provider_id": p.provider_id,
                "provider_name": p.provider_name,
                "logo_path": p.logo_path,
            }
            for p in items
        ]

    return {
        "link": region.link,
        "flatrate": providers(region.flatrate),
        "rent": providers(region.rent),
        "buy": providers(region.buy),
    }


def _external_ids_dict(ids: ExternalIds | None) -> dict | None:
    if ids is None:
        return None
    return {
        "imdb_id": ids.imdb_id,
        "wikidata_id": ids.wikidata_id,
        "facebook_id": ids.facebook_id,
        "instagram_id": ids.instagram_id,
        "twitter_id": ids.twitter_id,
    }
