"""Pydantic schemas for transcription requests and responses.

Field names are snake_case in Python and camelCase on the wire
(``audioUrl``, ``createdAt``).
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Literal
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator

TranscriptionSource = Literal["mock", "openai"]

LANGUAGE_PATTERN = re.compile(r"^[a-z]{2}-[A-Z]{2}$")


class TranscriptionRequest(BaseModel):
    """Body of ``POST /api/transcription``."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    audio_url: str = Field(
        ...,
        alias="audioUrl",
        description="Public http(s) URL of the audio file to transcribe.",
        examples=["https://example.com/sample.mp3"],
    )

    @field_validator("audio_url", mode="before")
    @classmethod
    def _validate_audio_url(cls, value: object) -> object:
        if not isinstance(value, str):
            raise ValueError("audioUrl must be a string")

        value = value.strip()
        if not value:
            raise ValueError("audioUrl cannot be empty")

        parsed = urlparse(value)
        if not parsed.scheme or not parsed.netloc or any(ch.isspace() for ch in value):
            raise ValueError("audioUrl must be a valid URL")
        if parsed.scheme not in ("http", "https"):
            raise ValueError("audioUrl must use http or https protocol")
        return value


class SpeechTranscriptionRequest(TranscriptionRequest):
    """Body of ``POST /api/speech-transcription``."""

    language: str = Field(
        "en-US",
        description="Spoken language in xx-XX form (e.g., en-US, fr-FR).",
    )

    @field_validator("language")
    @classmethod
    def _validate_language(cls, value: str) -> str:
        if not LANGUAGE_PATTERN.fullmatch(value):
            raise ValueError("language must be in format: xx-XX (e.g., en-US, fr-FR)")
        return value


class TranscriptionRecord(BaseModel):
    """A persisted transcription."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Store-assigned identifier.")
    audio_url: str = Field(..., alias="audioUrl")
    transcription: str = Field(..., min_length=1)
    source: TranscriptionSource = Field(
        "mock",
        description="Engine that produced the text.",
    )
    created_at: datetime = Field(..., alias="createdAt")


class TranscriptionResponse(BaseModel):
    """Envelope for a single transcription."""

    success: bool = True
    message: str
    data: TranscriptionRecord


class TranscriptionListData(BaseModel):
    count: int
    transcriptions: list[TranscriptionRecord]


class TranscriptionListResponse(BaseModel):
    """Envelope for a list of transcriptions."""

    success: bool = True
    message: str
    data: TranscriptionListData
