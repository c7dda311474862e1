"""FastAPI Depends() providers.

State flows: lifespan creates → app.state stores → Depends() injects.
"""

from fastapi import Depends, Request

from app.adapters.storage.base import AbstractTranscriptionRepository
from app.core.rate_limit import API_LIMITER, TRANSCRIPTION_LIMITER, enforce_rate_limit
from app.services.transcription_service import TranscriptionService

api_rate_limit = Depends(enforce_rate_limit(API_LIMITER))
transcription_rate_limit = Depends(enforce_rate_limit(TRANSCRIPTION_LIMITER))


def get_transcription_service(request: Request) -> TranscriptionService:
    """Inject the TranscriptionService built during lifespan."""
    return request.app.state.transcription_service  # type: ignore[no-any-return]


def get_repository(request: Request) -> AbstractTranscriptionRepository:
    """Inject the transcription repository built during lifespan."""
    return request.app.state.repository  # type: ignore[no-any-return]
