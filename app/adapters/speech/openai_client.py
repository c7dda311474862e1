"""OpenAI speech-to-text client adapter."""

from pathlib import PurePosixPath
from urllib.parse import urlparse

from openai import AsyncOpenAI

from app.adapters.speech.base import AbstractSpeechClient


def _filename_from_url(audio_url: str) -> str:
    """Pick an upload filename; the API infers the audio format from its extension."""
    name = PurePosixPath(urlparse(audio_url).path).name
    return name or "audio.mp3"


class OpenAISpeechClient(AbstractSpeechClient):
    """Client for the OpenAI audio transcription endpoint.

    Uses the official OpenAI Python SDK with async support.
    """

    name = "openai"

    def __init__(
        self,
        api_key: str,
        model: str = "whisper-1",
        base_url: str | None = None,
        timeout_seconds: float = 45.0,
    ) -> None:
        """Initialize OpenAI async client.

        Args:
            api_key: OpenAI API key for authentication.
            model: Transcription model name (e.g., "whisper-1").
            base_url: Optional custom base URL for OpenAI-compatible servers.
            timeout_seconds: Timeout for requests in seconds.
        """
        self.client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout_seconds,
            # Retries are owned by the transcription service
            max_retries=0,
        )
        self.model = model

    async def transcribe(
        self,
        audio: bytes,
        *,
        audio_url: str,
        language: str = "en-US",
    ) -> str:
        """Transcribe audio with the configured model.

        The API expects an ISO-639-1 code, so only the language part of the
        tag is sent (``fr-FR`` becomes ``fr``).

        Raises:
            RuntimeError: If the API call fails or returns no text.
        """
        try:
            response = await self.client.audio.transcriptions.create(
                model=self.model,
                file=(_filename_from_url(audio_url), audio),
                language=language.split("-")[0].lower(),
            )
        except Exception as exc:
            raise RuntimeError(f"OpenAI API error: {str(exc)}") from exc

        text = (response.text or "").strip()
        if not text:
            raise RuntimeError("No speech could be recognized")
        return text
