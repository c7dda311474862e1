"""Audio download service.

Fetches the audio referenced by a transcription request. Downloads can be
simulated (the default) so the API works without network access to the
audio host.
"""

from __future__ import annotations

import asyncio
import logging

import httpx

from app.core.config import AppSettings
from app.utils.retry import retry_async

logger = logging.getLogger(__name__)

MOCK_AUDIO = b"mock-audio-data"
MOCK_DOWNLOAD_DELAY_SECONDS = 0.1
CHUNK_SIZE = 64 * 1024


class AudioTooLargeError(RuntimeError):
    """Raised when the remote audio exceeds the configured size limit."""


class AudioService:
    """Download audio payloads with size enforcement and retries."""

    def __init__(
        self,
        app_settings: AppSettings,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = app_settings
        self._client = client

    async def _fetch(self, audio_url: str) -> bytes:
        """Stream the body of ``audio_url`` enforcing ``audio_max_bytes``."""
        max_bytes = self._settings.audio_max_bytes
        client = self._client or httpx.AsyncClient(
            timeout=self._settings.audio_download_timeout_seconds,
            follow_redirects=True,
        )
        try:
            async with client.stream("GET", audio_url) as response:
                response.raise_for_status()

                declared = response.headers.get("content-length")
                if declared and declared.isdigit() and int(declared) > max_bytes:
                    raise AudioTooLargeError(
                        f"Audio too large: {declared} bytes (max {max_bytes})"
                    )

                size = 0
                chunks: list[bytes] = []
                async for chunk in response.aiter_bytes(CHUNK_SIZE):
                    size += len(chunk)
                    if size > max_bytes:
                        raise AudioTooLargeError(
                            f"Audio too large: more than {max_bytes} bytes"
                        )
                    chunks.append(chunk)
                return b"".join(chunks)
        finally:
            if self._client is None:
                await client.aclose()

    async def download(self, audio_url: str) -> bytes:
        """Download audio once.

        Returns:
            bytes: Audio payload (a fixed placeholder when downloads are disabled).

        Raises:
            httpx.HTTPError: On transport failures or non-2xx responses.
            AudioTooLargeError: If the payload exceeds the size limit.
        """
        if not self._settings.audio_download_enabled:
            await asyncio.sleep(MOCK_DOWNLOAD_DELAY_SECONDS)
            return MOCK_AUDIO

        audio = await self._fetch(audio_url)
        logger.debug("audio.downloaded", extra={"size_bytes": len(audio)})
        return audio

    async def download_with_retry(self, audio_url: str) -> bytes:
        """Download audio, retrying failures with exponential backoff.

        Raises:
            RetryExhaustedError: If every attempt failed.
        """
        return await retry_async(
            lambda: self.download(audio_url),
            max_attempts=self._settings.retry_max_attempts,
            initial_delay_seconds=self._settings.retry_initial_delay_ms / 1000,
            name="audio download",
        )
