"""Tests for sensitive data filtering in logs."""

from __future__ import annotations

import json
import logging
from io import StringIO

import pytest

from app.core.logging import (
    JsonFormatter,
    RequestIdFilter,
    SensitiveDataFilter,
    clear_request_id,
    set_request_id,
)


@pytest.fixture
def capture():
    """Logger wired with the production filters and formatter."""

    def _make(name: str) -> tuple[logging.Logger, StringIO]:
        logger = logging.getLogger(name)
        logger.setLevel(logging.INFO)
        logger.handlers.clear()
        logger.propagate = False

        stream = StringIO()
        handler = logging.StreamHandler(stream)
        handler.addFilter(RequestIdFilter())
        handler.addFilter(SensitiveDataFilter())
        handler.setFormatter(JsonFormatter())
        logger.addHandler(handler)
        return logger, stream

    yield _make
    clear_request_id()


def test_sensitive_filter_redacts_api_keys(capture):
    """Ensure SensitiveDataFilter redacts API key fields."""

    logger, stream = capture("test_redaction")

    logger.info(
        "test_event",
        extra={
            "api_key": "sk-secret-123",
            "x-api-key": "another-secret",
            "safe_field": "visible",
        },
    )

    output = stream.getvalue()

    assert "sk-secret-123" not in output
    assert "another-secret" not in output
    assert "[REDACTED]" in output
    assert "visible" in output


def test_sensitive_filter_redacts_connection_strings_and_addresses(capture):
    """Ensure database URIs and raw client addresses never reach the logs."""

    logger, stream = capture("test_storage_redaction")

    logger.info(
        "storage_event",
        extra={
            "mongodb_uri": "mongodb://admin:hunter2@db:27017/transcriptions",
            "client_ip": "203.0.113.7",
            "key_hash": "ab12cd34ef56ab78",
        },
    )

    output = stream.getvalue()

    assert "hunter2" not in output
    assert "203.0.113.7" not in output
    assert "[REDACTED]" in output
    assert "ab12cd34ef56ab78" in output


def test_sensitive_filter_allows_safe_fields(capture):
    """Verify safe fields pass through unmodified."""

    logger, stream = capture("test_safe_fields")

    logger.info(
        "safe_event",
        extra={
            "request_id": "req-123",
            "path": "/api/transcription",
            "status_code": 201,
            "duration_ms": 150.5,
        },
    )

    payload = json.loads(stream.getvalue())

    assert payload["request_id"] == "req-123"
    assert payload["path"] == "/api/transcription"
    assert payload["status_code"] == 201
    assert "[REDACTED]" not in stream.getvalue()


def test_sensitive_filter_redacts_nested_dicts(capture):
    """Ensure nested sensitive fields are redacted."""

    logger, stream = capture("test_nested")

    logger.info(
        "nested_event",
        extra={
            "headers": {
                "authorization": "Bearer secret-token",
                "user-agent": "pytest",
            },
            "safe_data": {
                "count": 5,
                "type": "test",
            },
        },
    )

    output = stream.getvalue()

    assert "secret-token" not in output
    assert "[REDACTED]" in output
    assert "pytest" in output


def test_request_id_comes_from_context(capture):
    logger, stream = capture("test_request_id")

    set_request_id("ctx-42")
    logger.info("correlated_event")

    payload = json.loads(stream.getvalue())
    assert payload["request_id"] == "ctx-42"
    assert payload["level"] == "info"
    assert payload["message"] == "correlated_event"


def test_exception_info_is_serialized(capture):
    logger, stream = capture("test_exc_info")

    try:
        raise RuntimeError("boom")
    except RuntimeError:
        logger.exception("failed_event")

    payload = json.loads(stream.getvalue())
    assert "RuntimeError: boom" in payload["exc_info"]
