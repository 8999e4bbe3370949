"""Data models for BoxOfficer."""

from .cache import CacheEntry
from .omdb import RatingSource, RatingsPayload
from .tmdb import (
    CastMember,
    Credits,
    CrewMember,
    ExternalIds,
    Genre,
    MovieDetail,
    MovieSummary,
    TrendingSummary,
    WatchProvider,
    WatchProviderRegion,
)
from .trakt import TraktIds, TraktMovie, TrendingItem

__all__ = [
    "CacheEntry",
    "CastMember",
    "Credits",
    "CrewMember",
    "ExternalIds",
    "Genre",
    "MovieDetail",
    "MovieSummary",
    "RatingSource",
    "RatingsPayload",
    "TraktIds",
    "TraktMovie",
    "TrendingItem",
    "TrendingSummary",
    "WatchProvider",
    "WatchProviderRegion",
]
