"""Document key-value cache for aggregation results.

The cache is a best-effort fallback, not a source of truth: every write
overwrites the whole entry for its key (last writer wins), entries never
expire, and readers must tolerate a missing key.
"""

import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Protocol
from urllib.parse import quote

from .models.cache import CacheEntry

logger = logging.getLogger(__name__)

NOW_PLAYING = "nowPlaying"
TRENDING = "trending"
TRAKT_TRENDING = "traktTrending"
IN_THEATERS = "inTheaters"
DIGITAL_RELEASES = "digitalReleases"


def _segment(value: Any) -> str:
    segment = quote(str(value), safe="")
    if segment in (".", ".."):
        segment = segment.replace(".", "%2E")
    return segment


def cache_key(query: str, *params: Any) -> str:
    """Build the key for a query type and its parameters.

    Parameterless queries map to a fixed key (``"trending"``); parameterised
    ones append each parameter as an escaped path segment
    (``"movies/550"``, ``"search/avatar"``).
    """
    return "/".join([query, *(_segment(p) for p in params)])


def movie_key(movie_id: int) -> str:
    return cache_key("movies", movie_id)


def search_key(query: str) -> str:
    return cache_key("search", query.strip().lower())


def top_rated_key(region: str | None, pages: int) -> str:
    region = region.strip().upper() if region else ""
    return cache_key("topRated", region or "all", pages)


def top_grossing_key(pages: int) -> str:
    return cache_key("topGrossing", pages)


def upcoming_key(kind: str) -> str:
    return cache_key("upcoming", kind)


class CacheStore(Protocol):
    async def write(self, key: str, payload: Any) -> CacheEntry: ...

    async def read(self, key: str) -> CacheEntry | None: ...


class MemoryCacheStore:
    """In-process cache, used when no cache directory is configured."""

    def __init__(self) -> None:
        self._entries: dict[str, CacheEntry] = {}

    async def write(self, key: str, payload: Any) -> CacheEntry:
        # Round-trip through JSON so stored documents match the file store.
        entry = CacheEntry(key=key, payload=json.loads(json.dumps(payload)))
        self._entries[key] = entry
        return entry

    async def read(self, key: str) -> CacheEntry | None:
        return self._entries.get(key)

    def __len__(self) -> int:
        return len(self._entries)


class JsonFileCacheStore:
    """One JSON document per key under ``directory``.

    ``/`` in a key maps to a sub-directory. Writes go to a temporary file
    that is then renamed over the target, so readers never see half a
    document.
    """

    def __init__(self, directory: str | os.PathLike) -> None:
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        *parents, name = key.split("/")
        return self.directory.joinpath(*parents, f"{name}.json")

    async def write(self, key: str, payload: Any) -> CacheEntry:
        entry = CacheEntry(key=key, payload=payload)
        await asyncio.to_thread(self._write_document, self.path_for(key), entry)
        return entry

    async def read(self, key: str) -> CacheEntry | None:
        return await asyncio.to_thread(self._read_document, key)

    def _write_document(self, path: Path, entry: CacheEntry) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(entry.to_document(), fh)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def _read_document(self, key: str) -> CacheEntry | None:
        path = self.path_for(key)
        try:
            document = json.loads(path.read_text(encoding="utf-8"))
            return CacheEntry.from_document(key, document)
        except FileNotFoundError:
            return None
        except (OSError, ValueError, KeyError, TypeError) as exc:
            logger.warning("Ignoring unreadable cache document %s: %s", path, exc)
            return None


def build_cache(cache_dir: str | None) -> CacheStore:
    if cache_dir:
        return JsonFileCacheStore(cache_dir)
    return MemoryCacheStore()
