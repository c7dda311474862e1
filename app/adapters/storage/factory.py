"""Factory for the configured transcription repository."""

from app.adapters.storage.base import AbstractTranscriptionRepository
from app.adapters.storage.in_memory import InMemoryTranscriptionRepository
from app.core.config import StorageSettings, settings
from app.core.errors import ValidationAppError


def create_transcription_repository(
    storage_settings: StorageSettings | None = None,
) -> AbstractTranscriptionRepository:
    """Instantiate the repository for the configured backend.

    Returns:
        AbstractTranscriptionRepository: Ready-to-use repository. The MongoDB
            backend is connected before it is returned.

    Raises:
        ValidationAppError: If the backend name is unknown.
    """
    cfg = storage_settings or settings.storage
    backend = cfg.backend.lower()

    if backend == "memory":
        return InMemoryTranscriptionRepository()

    if backend == "mongodb":
        # Imported lazily so the memory backend does not need a MongoDB driver loaded
        from app.adapters.storage.mongo import MongoTranscriptionRepository

        repository = MongoTranscriptionRepository(cfg)
        repository.connect()
        return repository

    raise ValidationAppError(
        code="storage_unknown_backend",
        message=f"Unknown storage backend: '{backend}'. Supported backends: memory, mongodb",
    )
