"""Transcription service orchestrating download, recognition and persistence.

Two creation paths exist:
- ``create_mock``: downloads the audio and stores a fixed transcript.
- ``create_with_speech``: downloads the audio and sends it to the configured
  speech client, retrying failures with exponential backoff.

Adapter failures are translated into domain errors here so routes stay thin:
download/provider failures become ``ExternalServiceAppError`` (502) and store
failures become ``StorageAppError`` (500).
"""

from __future__ import annotations

import logging

from app.adapters.speech.base import AbstractSpeechClient
from app.adapters.storage.base import AbstractTranscriptionRepository
from app.core.config import AppSettings
from app.core.errors import ExternalServiceAppError, NotFoundAppError, StorageAppError
from app.schemas.transcription import TranscriptionRecord
from app.services.audio_service import AudioService
from app.utils.retry import RetryExhaustedError, retry_async

logger = logging.getLogger(__name__)

MOCK_TRANSCRIPTION = "transcribed text"


class TranscriptionService:
    """Create and query transcriptions."""

    def __init__(
        self,
        *,
        repository: AbstractTranscriptionRepository,
        speech_client: AbstractSpeechClient,
        audio_service: AudioService,
        app_settings: AppSettings,
    ) -> None:
        self.repository = repository
        self.speech_client = speech_client
        self.audio_service = audio_service
        self.settings = app_settings

    async def _download(self, audio_url: str) -> bytes:
        try:
            return await self.audio_service.download_with_retry(audio_url)
        except RetryExhaustedError as exc:
            raise ExternalServiceAppError(
                code="audio_download_failed",
                message=f"Audio download: {exc}",
                details={"service": "audio download", "attempts": exc.attempts},
            ) from exc

    async def _recognize(self, audio: bytes, audio_url: str, language: str) -> str:
        client = self.speech_client
        try:
            return await retry_async(
                lambda: client.transcribe(audio, audio_url=audio_url, language=language),
                max_attempts=self.settings.retry_max_attempts,
                initial_delay_seconds=self.settings.retry_initial_delay_ms / 1000,
                name="speech transcription",
            )
        except RetryExhaustedError as exc:
            raise ExternalServiceAppError(
                code="speech_provider_failed",
                message=f"Speech-to-text ({client.name}): {exc}",
                details={"service": client.name, "attempts": exc.attempts},
            ) from exc

    async def _save(self, audio_url: str, text: str, source: str) -> TranscriptionRecord:
        try:
            record = await self.repository.create(audio_url, text, source)
        except Exception as exc:
            raise StorageAppError(
                code="storage_write_failed",
                message=f"Database error: Failed to create transcription: {exc}",
            ) from exc

        logger.info(
            "transcription.created",
            extra={"transcription_id": record.id, "source": record.source},
        )
        return record

    async def create_mock(self, audio_url: str) -> TranscriptionRecord:
        """Download the audio and persist the fixed mock transcript."""
        await self._download(audio_url)
        return await self._save(audio_url, MOCK_TRANSCRIPTION, "mock")

    async def create_with_speech(
        self,
        audio_url: str,
        language: str = "en-US",
    ) -> TranscriptionRecord:
        """Download the audio, transcribe it with the speech client and persist it."""
        audio = await self._download(audio_url)
        text = await self._recognize(audio, audio_url, language)
        return await self._save(audio_url, text, self.speech_client.name)

    async def list_recent(self, days: int | None = None) -> list[TranscriptionRecord]:
        """Return transcriptions from the last ``days`` days, newest first."""
        days = days or self.settings.recent_days
        try:
            return await self.repository.list_recent(days)
        except Exception as exc:
            raise StorageAppError(
                code="storage_read_failed",
                message=f"Database error: Failed to fetch transcriptions: {exc}",
            ) from exc

    async def get(self, transcription_id: str) -> TranscriptionRecord:
        """Return a single transcription.

        Raises:
            NotFoundAppError: If no transcription has this id.
        """
        try:
            record = await self.repository.get_by_id(transcription_id)
        except Exception as exc:
            raise StorageAppError(
                code="storage_read_failed",
                message=f"Database error: Failed to fetch transcription: {exc}",
            ) from exc

        if record is None:
            raise NotFoundAppError(
                code="transcription_not_found",
                message=f"Transcription {transcription_id} not found",
                details={"transcription_id": transcription_id},
            )
        return record
