"""Pytest configuration and fixtures shared across all test modules.

Environment variables are set before any app import so the settings
singleton is built with test values (in-memory store, mock speech client,
no retry delays).
"""

import os

# CRITICAL: Set these before any imports that might load settings
os.environ["APP_ENV"] = "testing"
os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("SPEECH_PROVIDER", "mock")
os.environ.setdefault("APP_RETRY_INITIAL_DELAY_MS", "0")
os.environ.setdefault("APP_AUDIO_DOWNLOAD_ENABLED", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from app.core.app_factory import create_app
from app.services import audio_service


@pytest.fixture(autouse=True)
def no_mock_download_delay(monkeypatch: pytest.MonkeyPatch) -> None:
    """Skip the simulated download latency."""
    monkeypatch.setattr(audio_service, "MOCK_DOWNLOAD_DELAY_SECONDS", 0)


@pytest.fixture
def client() -> Iterator[TestClient]:
    """Test client for a fresh app; the lifespan runs so app.state is populated."""
    with TestClient(create_app()) as test_client:
        yield test_client
