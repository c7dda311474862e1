"""Factory pattern for creating speech client instances."""

import logging

from app.adapters.speech.base import AbstractSpeechClient
from app.adapters.speech.mock_client import MockSpeechClient
from app.adapters.speech.openai_client import OpenAISpeechClient
from app.core.config import SpeechSettings, settings
from app.core.errors import ValidationAppError

logger = logging.getLogger(__name__)


def create_speech_client(speech_settings: SpeechSettings | None = None) -> AbstractSpeechClient:
    """Instantiate the speech client for the configured provider.

    A cloud provider without credentials degrades to the mock client so the
    service keeps answering in local and test environments.

    Args:
        speech_settings: Optional settings; defaults to the global settings.

    Returns:
        AbstractSpeechClient: Configured speech client instance.

    Raises:
        ValidationAppError: If the provider name is unknown.
    """
    cfg = speech_settings or settings.speech
    provider = cfg.provider.lower()

    if provider == "mock":
        return MockSpeechClient()

    if provider == "openai":
        if not cfg.api_key:
            logger.warning(
                "speech.credentials_missing",
                extra={"provider": provider, "fallback": "mock"},
            )
            return MockSpeechClient()
        return OpenAISpeechClient(
            api_key=cfg.api_key,
            model=cfg.model,
            base_url=cfg.base_url,
            timeout_seconds=cfg.timeout_seconds,
        )

    raise ValidationAppError(
        code="speech_unknown_provider",
        message=(
            f"Unknown speech provider: '{provider}'. Supported providers: mock, openai"
        ),
    )
