"""Speech-to-text adapter layer - abstracts over transcription providers."""

from app.adapters.speech.base import AbstractSpeechClient
from app.adapters.speech.factory import create_speech_client
from app.adapters.speech.mock_client import MockSpeechClient
from app.adapters.speech.openai_client import OpenAISpeechClient

__all__ = [
    "AbstractSpeechClient",
    "MockSpeechClient",
    "OpenAISpeechClient",
    "create_speech_client",
]
