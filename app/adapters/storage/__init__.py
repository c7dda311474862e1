"""Transcription persistence adapters."""

from app.adapters.storage.base import AbstractTranscriptionRepository
from app.adapters.storage.factory import create_transcription_repository
from app.adapters.storage.in_memory import InMemoryTranscriptionRepository

__all__ = [
    "AbstractTranscriptionRepository",
    "InMemoryTranscriptionRepository",
    "create_transcription_repository",
]
