"""Service layer for external API integrations."""

from .omdb import OMDbService
from .tmdb import TMDbService
from .trakt import TraktService

__all__ = ["OMDbService", "TMDbService", "TraktService"]
