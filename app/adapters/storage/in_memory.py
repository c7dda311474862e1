"""In-memory transcription repository.

Used for local development and tests. Data lives for the process lifetime.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from app.adapters.storage.base import AbstractTranscriptionRepository, cutoff_for, utcnow
from app.schemas.transcription import TranscriptionRecord, TranscriptionSource


class InMemoryTranscriptionRepository(AbstractTranscriptionRepository):
    """Dictionary-backed repository keyed by a generated hex id."""

    def __init__(self) -> None:
        self._records: dict[str, TranscriptionRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    async def create(
        self,
        audio_url: str,
        transcription: str,
        source: TranscriptionSource = "mock",
        *,
        created_at: datetime | None = None,
    ) -> TranscriptionRecord:
        record = TranscriptionRecord(
            id=uuid.uuid4().hex,
            audio_url=audio_url,
            transcription=transcription,
            source=source,
            created_at=created_at or utcnow(),
        )
        self._records[record.id] = record
        return record

    async def list_recent(self, days: int = 30) -> list[TranscriptionRecord]:
        cutoff = cutoff_for(days)
        recent = [r for r in self._records.values() if r.created_at >= cutoff]
        return sorted(recent, key=lambda r: r.created_at, reverse=True)

    async def get_by_id(self, transcription_id: str) -> TranscriptionRecord | None:
        return self._records.get(transcription_id)

    async def ping(self) -> bool:
        return True
