"""OMDb API service for critic ratings and domestic box office.

Ratings are optional enrichment: every failure mode yields ``None`` so a
missing key, an unknown title or an OMDb outage never fails the caller.
"""

import logging

import httpx
from attrs import define

from ..models.omdb import RatingsPayload

logger = logging.getLogger(__name__)


@define
class OMDbService:
    """Client for OMDb API."""

    api_key: str | None = None
    transport: httpx.AsyncBaseTransport | None = None
    _client: httpx.AsyncClient | None = None

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url="https://www.omdbapi.com",
                timeout=30.0,
                transport=self.transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def get_ratings(self, imdb_id: str) -> RatingsPayload | None:
        """Look up ratings and box office by IMDb id."""
        if not self.enabled:
            return None

        client = await self._get_client()
        try:
            resp = await client.get("/", params={"i": imdb_id, "apikey": self.api_key})
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPError as exc:
            logger.warning("OMDb lookup for %s failed: %s", imdb_id, exc)
            return None
        except ValueError:
            logger.warning("OMDb returned a non-JSON body for %s", imdb_id)
            return None

        if not isinstance(data, dict) or data.get("Response") != "True":
            logger.debug("OMDb has no entry for %s", imdb_id)
            return None

        try:
            return RatingsPayload.from_api(data)
        except (AttributeError, TypeError):
            logger.warning("OMDb payload for %s could not be parsed", imdb_id)
            return None
