"""Transcription repository interface.

Services depend on this abstraction so the document store (in-memory for
tests, MongoDB in production) can be swapped without touching them.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone

from app.schemas.transcription import TranscriptionRecord, TranscriptionSource


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def cutoff_for(days: int, now: datetime | None = None) -> datetime:
    """Oldest ``created_at`` still considered recent."""
    return (now or utcnow()) - timedelta(days=days)


class AbstractTranscriptionRepository(ABC):
    """Interface for transcription persistence."""

    @abstractmethod
    async def create(
        self,
        audio_url: str,
        transcription: str,
        source: TranscriptionSource = "mock",
        *,
        created_at: datetime | None = None,
    ) -> TranscriptionRecord:
        """Persist a transcription and return the stored record."""
        raise NotImplementedError

    @abstractmethod
    async def list_recent(self, days: int = 30) -> list[TranscriptionRecord]:
        """Return records created within the last ``days`` days, newest first."""
        raise NotImplementedError

    @abstractmethod
    async def get_by_id(self, transcription_id: str) -> TranscriptionRecord | None:
        """Return a record by id, or None when it does not exist."""
        raise NotImplementedError

    @abstractmethod
    async def ping(self) -> bool:
        """Return True when the store is reachable."""
        raise NotImplementedError

    async def close(self) -> None:
        """Release connections held by the repository."""
        return None
