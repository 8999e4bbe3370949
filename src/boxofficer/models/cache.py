"""Cache store data models."""

from datetime import datetime, timezone
from typing import Any

from attrs import define, field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@define
class CacheEntry:
    """One cached aggregation result, overwritten wholesale on each write."""

    key: str
    payload: Any
    written_at: datetime = field(factory=_utcnow)

    def to_document(self) -> dict:
        return {"payload": self.payload, "written_at": self.written_at.isoformat()}

    @classmethod
    def from_document(cls, key: str, document: dict) -> "CacheEntry":
        return cls(
            key=key,
            payload=document["payload"],
            written_at=datetime.fromisoformat(document["written_at"]),
        )
