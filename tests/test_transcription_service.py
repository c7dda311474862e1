"""Unit tests for TranscriptionService orchestration and error mapping."""

from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.adapters.speech.mock_client import MockSpeechClient
from app.adapters.storage.base import utcnow
from app.adapters.storage.in_memory import InMemoryTranscriptionRepository
from app.core.config import AppSettings
from app.core.errors import ExternalServiceAppError, NotFoundAppError, StorageAppError
from app.services.audio_service import MOCK_AUDIO, AudioService
from app.services.transcription_service import MOCK_TRANSCRIPTION, TranscriptionService

URL = "https://example.com/sample.mp3"


@pytest.fixture
def app_settings() -> AppSettings:
    return AppSettings(retry_max_attempts=3, retry_initial_delay_ms=0, recent_days=30)


@pytest.fixture
def repository() -> InMemoryTranscriptionRepository:
    return InMemoryTranscriptionRepository()


def _service(
    app_settings: AppSettings,
    repository,
    *,
    speech_client=None,
    audio_service=None,
) -> TranscriptionService:
    return TranscriptionService(
        repository=repository,
        speech_client=speech_client or MockSpeechClient(),
        audio_service=audio_service or AudioService(app_settings),
        app_settings=app_settings,
    )


@pytest.mark.asyncio
async def test_create_mock_persists_fixed_text(app_settings, repository) -> None:
    service = _service(app_settings, repository)

    record = await service.create_mock(URL)

    assert record.transcription == MOCK_TRANSCRIPTION == "transcribed text"
    assert record.source == "mock"
    assert record.audio_url == URL
    assert await repository.get_by_id(record.id) == record


@pytest.mark.asyncio
async def test_create_with_speech_uses_client_and_records_source(app_settings, repository) -> None:
    speech = MagicMock()
    speech.name = "openai"
    speech.transcribe = AsyncMock(return_value="bonjour")
    service = _service(app_settings, repository, speech_client=speech)

    record = await service.create_with_speech(URL, "fr-FR")

    assert record.transcription == "bonjour"
    assert record.source == "openai"
    speech.transcribe.assert_awaited_once_with(MOCK_AUDIO, audio_url=URL, language="fr-FR")


@pytest.mark.asyncio
async def test_create_with_mock_speech_client(app_settings, repository) -> None:
    service = _service(app_settings, repository)

    record = await service.create_with_speech(URL)

    assert record.transcription == f"[Mock] Transcribed text from {URL}"
    assert record.source == "mock"


@pytest.mark.asyncio
async def test_speech_failures_are_retried(app_settings, repository) -> None:
    speech = MagicMock()
    speech.name = "openai"
    speech.transcribe = AsyncMock(side_effect=[RuntimeError("flaky"), "hello"])
    service = _service(app_settings, repository, speech_client=speech)

    record = await service.create_with_speech(URL)

    assert record.transcription == "hello"
    assert speech.transcribe.await_count == 2


@pytest.mark.asyncio
async def test_speech_exhaustion_maps_to_external_service_error(app_settings, repository) -> None:
    speech = MagicMock()
    speech.name = "openai"
    speech.transcribe = AsyncMock(side_effect=RuntimeError("No speech could be recognized"))
    service = _service(app_settings, repository, speech_client=speech)

    with pytest.raises(ExternalServiceAppError) as exc_info:
        await service.create_with_speech(URL)

    assert exc_info.value.code == "speech_provider_failed"
    assert "failed after 3 attempts" in exc_info.value.message
    assert speech.transcribe.await_count == 3
    assert len(repository) == 0


@pytest.mark.asyncio
async def test_download_exhaustion_maps_to_external_service_error(app_settings, repository) -> None:
    audio = AudioService(app_settings)
    audio.download = AsyncMock(side_effect=ConnectionError("refused"))
    service = _service(app_settings, repository, audio_service=audio)

    with pytest.raises(ExternalServiceAppError) as exc_info:
        await service.create_mock(URL)

    assert exc_info.value.code == "audio_download_failed"
    assert exc_info.value.details["attempts"] == 3
    assert audio.download.await_count == 3


@pytest.mark.asyncio
async def test_storage_failure_maps_to_storage_error(app_settings) -> None:
    repository = MagicMock()
    repository.create = AsyncMock(side_effect=RuntimeError("connection reset"))
    service = _service(app_settings, repository)

    with pytest.raises(StorageAppError) as exc_info:
        await service.create_mock(URL)

    assert exc_info.value.code == "storage_write_failed"
    assert "connection reset" in exc_info.value.message


@pytest.mark.asyncio
async def test_list_recent_uses_default_days(app_settings, repository) -> None:
    await repository.create(URL, "old", created_at=utcnow() - timedelta(days=31))
    newer = await repository.create(URL, "newer", created_at=utcnow() - timedelta(days=1))
    newest = await repository.create(URL, "newest")
    service = _service(app_settings, repository)

    records = await service.list_recent()

    assert [r.id for r in records] == [newest.id, newer.id]


@pytest.mark.asyncio
async def test_list_recent_custom_days(app_settings, repository) -> None:
    await repository.create(URL, "ten days", created_at=utcnow() - timedelta(days=10))
    service = _service(app_settings, repository)

    assert await service.list_recent(7) == []
    assert len(await service.list_recent(14)) == 1


@pytest.mark.asyncio
async def test_get_unknown_id_raises_not_found(app_settings, repository) -> None:
    service = _service(app_settings, repository)

    with pytest.raises(NotFoundAppError):
        await service.get("does-not-exist")
