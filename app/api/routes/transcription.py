from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from app.api.dependencies import get_transcription_service, transcription_rate_limit
from app.schemas.transcription import (
    SpeechTranscriptionRequest,
    TranscriptionListData,
    TranscriptionListResponse,
    TranscriptionRequest,
    TranscriptionResponse,
)
from app.services.transcription_service import TranscriptionService

router = APIRouter(tags=["Transcription"])

ServiceDep = Annotated[TranscriptionService, Depends(get_transcription_service)]


@router.post(
    "/transcription",
    response_model=TranscriptionResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[transcription_rate_limit],
)
async def create_transcription(
    body: TranscriptionRequest,
    service: ServiceDep,
) -> TranscriptionResponse:
    """Create a mock transcription for the given audio URL.

    Downloads the audio (with retry) and stores a fixed transcript.

    Raises:
        ExternalServiceAppError: 502 if the audio cannot be downloaded.
        StorageAppError: 500 if the record cannot be saved.
    """
    record = await service.create_mock(body.audio_url)
    return TranscriptionResponse(
        message="Transcription created successfully",
        data=record,
    )


@router.post(
    "/speech-transcription",
    response_model=TranscriptionResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[transcription_rate_limit],
)
async def create_speech_transcription(
    body: SpeechTranscriptionRequest,
    service: ServiceDep,
) -> TranscriptionResponse:
    """Transcribe the audio with the configured speech-to-text provider.

    Falls back to the mock speech client when no provider credentials are
    configured. Provider calls are retried with exponential backoff.
    """
    record = await service.create_with_speech(body.audio_url, body.language)
    return TranscriptionResponse(
        message="Speech transcription created successfully",
        data=record,
    )


@router.get("/transcriptions", response_model=TranscriptionListResponse)
async def list_transcriptions(
    service: ServiceDep,
    days: Annotated[
        int | None,
        Query(ge=1, le=365, description="Look-back window in days (default 30)."),
    ] = None,
) -> TranscriptionListResponse:
    """List transcriptions created in the last ``days`` days, newest first."""
    records = await service.list_recent(days)
    return TranscriptionListResponse(
        message="Transcriptions fetched successfully",
        data=TranscriptionListData(count=len(records), transcriptions=records),
    )


@router.get("/transcriptions/{transcription_id}", response_model=TranscriptionResponse)
async def get_transcription(
    transcription_id: str,
    service: ServiceDep,
) -> TranscriptionResponse:
    """Fetch a single transcription by id."""
    record = await service.get(transcription_id)
    return TranscriptionResponse(
        message="Transcription fetched successfully",
        data=record,
    )
