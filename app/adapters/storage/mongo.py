"""MongoDB transcription repository backed by mongoengine.

mongoengine is synchronous, so every query runs in a worker thread to keep
the event loop free.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

import mongoengine
from mongoengine import DateTimeField, Document, StringField, ValidationError

from app.adapters.storage.base import AbstractTranscriptionRepository, cutoff_for, utcnow
from app.core.config import StorageSettings
from app.schemas.transcription import TranscriptionRecord, TranscriptionSource

logger = logging.getLogger(__name__)

MONGO_ALIAS = "transcriptions"


class TranscriptionDocument(Document):
    audio_url = StringField(required=True)
    transcription = StringField(required=True)
    source = StringField(choices=("mock", "openai"), default="mock")
    created_at = DateTimeField(default=utcnow)

    meta = {
        "collection": "transcriptions",
        "db_alias": MONGO_ALIAS,
        "indexes": [
            "-created_at",
            ("-created_at", "source"),
            "audio_url",
            ("source", "-created_at"),
        ],
    }

    def to_record(self) -> TranscriptionRecord:
        return TranscriptionRecord(
            id=str(self.id),
            audio_url=self.audio_url,
            transcription=self.transcription,
            source=self.source,
            created_at=self.created_at,
        )


class MongoTranscriptionRepository(AbstractTranscriptionRepository):
    """Repository storing transcriptions in a MongoDB collection."""

    def __init__(self, storage_settings: StorageSettings) -> None:
        self._settings = storage_settings
        self._connected = False

    def connect(self) -> None:
        """Open the connection pool (idempotent)."""
        if self._connected:
            return
        mongoengine.connect(
            host=self._settings.mongodb_uri,
            alias=MONGO_ALIAS,
            maxPoolSize=self._settings.max_pool_size,
            minPoolSize=self._settings.min_pool_size,
            serverSelectionTimeoutMS=self._settings.server_selection_timeout_ms,
            tz_aware=True,
        )
        self._connected = True
        logger.info(
            "storage.mongodb_connected",
            extra={
                "max_pool_size": self._settings.max_pool_size,
                "min_pool_size": self._settings.min_pool_size,
            },
        )

    async def create(
        self,
        audio_url: str,
        transcription: str,
        source: TranscriptionSource = "mock",
        *,
        created_at: datetime | None = None,
    ) -> TranscriptionRecord:
        doc = TranscriptionDocument(
            audio_url=audio_url,
            transcription=transcription,
            source=source,
            created_at=created_at or utcnow(),
        )
        await asyncio.to_thread(doc.save)
        return doc.to_record()

    async def list_recent(self, days: int = 30) -> list[TranscriptionRecord]:
        cutoff = cutoff_for(days)

        def _query() -> list[TranscriptionRecord]:
            docs = TranscriptionDocument.objects(created_at__gte=cutoff).order_by("-created_at")
            return [doc.to_record() for doc in docs]

        return await asyncio.to_thread(_query)

    async def get_by_id(self, transcription_id: str) -> TranscriptionRecord | None:
        try:
            TranscriptionDocument.id.validate(transcription_id)
        except ValidationError:
            return None

        def _query() -> TranscriptionRecord | None:
            doc = TranscriptionDocument.objects(id=transcription_id).first()
            return doc.to_record() if doc else None

        return await asyncio.to_thread(_query)

    async def ping(self) -> bool:
        if not self._connected:
            return False

        def _ping() -> None:
            mongoengine.get_connection(MONGO_ALIAS).admin.command("ping")

        try:
            await asyncio.to_thread(_ping)
        except Exception as exc:
            logger.warning("storage.ping_failed", extra={"error_type": type(exc).__name__})
            return False
        return True

    async def close(self) -> None:
        if self._connected:
            mongoengine.disconnect(alias=MONGO_ALIAS)
            self._connected = False
            logger.info("storage.mongodb_disconnected")
