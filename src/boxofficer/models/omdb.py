"""OMDb data models."""

from attrs import define, field

from ..finance import parse_currency

ROTTEN_TOMATOES = "Rotten Tomatoes"
INTERNET_MOVIE_DATABASE = "Internet Movie Database"
METACRITIC = "Metacritic"


def _not_available(value: str | None) -> str | None:
    if value is None or value.strip() in ("", "N/A"):
        return None
    return value


@define
class RatingSource:
    """A single source-tagged rating, e.g. ``Rotten Tomatoes: 93%``."""

    source: str
    value: str


@define
class RatingsPayload:
    """Represents the ratings-aggregation enrichment for one title."""

    imdb_id: str | None = None
    ratings: list[RatingSource] = field(factory=list)
    box_office: str | None = None
    imdb_rating: str | None = None
    imdb_votes: str | None = None
    metascore: str | None = None

    @classmethod
    def from_api(cls, data: dict) -> "RatingsPayload":
        return cls(
            imdb_id=data.get("imdbID"),
            ratings=[
                RatingSource(source=r.get("Source", ""), value=r.get("Value", ""))
                for r in data.get("Ratings") or []
            ],
            box_office=_not_available(data.get("BoxOffice")),
            imdb_rating=_not_available(data.get("imdbRating")),
            imdb_votes=_not_available(data.get("imdbVotes")),
            metascore=_not_available(data.get("Metascore")),
        )

    def rating_for(self, source: str) -> str | None:
        return next((r.value for r in self.ratings if r.source == source), None)

    @property
    def critic_score(self) -> int | None:
        """Rotten Tomatoes critic score as a 0-100 integer."""
        value = self.rating_for(ROTTEN_TOMATOES)
        if value is None:
            return None
        digits = value.strip().rstrip("%")
        return int(digits) if digits.isdigit() else None

    @property
    def box_office_amount(self) -> int | None:
        """US domestic box office in whole dollars, if parseable."""
        return parse_currency(self.box_office)

    def to_dict(self) -> dict:
        return {
            "imdb_id": self.imdb_id,
            "ratings": [{"source": r.source, "value": r.value} for r in self.ratings],
            "box_office": self.box_office,
            "imdb_rating": self.imdb_rating,
            "imdb_votes": self.imdb_votes,
            "metascore": self.metascore,
            "critic_score": self.critic_score,
        }
