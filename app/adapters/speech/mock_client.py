"""Mock speech client used when no provider is configured."""

from app.adapters.speech.base import AbstractSpeechClient


class MockSpeechClient(AbstractSpeechClient):
    """Returns a deterministic transcript derived from the audio URL."""

    name = "mock"

    async def transcribe(
        self,
        audio: bytes,
        *,
        audio_url: str,
        language: str = "en-US",
    ) -> str:
        return f"[Mock] Transcribed text from {audio_url}"
