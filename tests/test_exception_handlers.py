"""Tests for global exception handlers.

Validates that all exception types are handled consistently with
proper HTTP status codes, error format, and no information leakage.
"""

import asyncio
import json
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from pydantic import BaseModel

from app.core.errors import (
    AppError,
    ExternalServiceAppError,
    NotFoundAppError,
    RateLimitAppError,
    StorageAppError,
    ValidationAppError,
)
from app.core.exception_handlers import setup_exception_handlers, status_for


class Payload(BaseModel):
    name: str
    count: int


@pytest.fixture
def app_with_handlers() -> FastAPI:
    """Create FastAPI app with exception handlers registered."""
    app = FastAPI()
    setup_exception_handlers(app)
    return app


@pytest.fixture
def client(app_with_handlers: FastAPI) -> TestClient:
    """Create test client with handlers enabled."""
    return TestClient(app_with_handlers)


class TestAppErrorHandler:
    """Test handler for AppError and subclasses."""

    @pytest.mark.parametrize(
        ("error_type", "expected_status"),
        [
            (ValidationAppError, 400),
            (NotFoundAppError, 404),
            (RateLimitAppError, 429),
            (StorageAppError, 500),
            (ExternalServiceAppError, 502),
        ],
    )
    def test_error_maps_to_status(
        self,
        client: TestClient,
        app_with_handlers: FastAPI,
        error_type: type[AppError],
        expected_status: int,
    ):
        """Verify each domain error maps to its HTTP status."""
        @app_with_handlers.get("/test-error")
        async def test_endpoint():
            raise error_type(code="test_code", message="Test message")

        response = client.get("/test-error")

        assert response.status_code == expected_status
        data = response.json()
        assert data["error"]["code"] == "test_code"
        assert data["error"]["message"] == "Test message"
        assert "request_id" in data["error"]

    def test_error_includes_details(self, client: TestClient, app_with_handlers: FastAPI):
        """Verify details are included when provided."""
        @app_with_handlers.get("/test-details")
        async def test_endpoint():
            raise ExternalServiceAppError(
                code="speech_provider_failed",
                message="Speech-to-text (openai): failed after 3 attempts",
                details={"service": "openai", "attempts": 3},
            )

        response = client.get("/test-details")

        assert response.status_code == 502
        assert response.json()["error"]["details"] == {"service": "openai", "attempts": 3}

    def test_details_omitted_when_empty(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-no-details")
        async def test_endpoint():
            raise NotFoundAppError(code="missing", message="Nothing here")

        response = client.get("/test-no-details")

        assert "details" not in response.json()["error"]

    def test_plain_app_error_defaults_to_400(self):
        assert status_for(AppError(code="generic", message="generic")) == 400


class TestRequestValidationHandler:
    """Test request body/query validation mapping."""

    def test_body_validation_returns_400_with_all_fields(
        self, client: TestClient, app_with_handlers: FastAPI
    ):
        @app_with_handlers.post("/test-body")
        async def test_endpoint(payload: Payload):
            return payload

        response = client.post("/test-body", json={"count": "many"})

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "validation_error"
        assert "name: Field required" in error["message"]
        assert "count:" in error["message"]
        assert ", " in error["message"]


class TestHttpExceptionHandler:
    def test_unknown_route_returns_404(self, client: TestClient):
        response = client.get("/does-not-exist")

        assert response.status_code == 404
        error = response.json()["error"]
        assert error["code"] == "not_found"
        assert error["message"] == "Route GET /does-not-exist not found"

    def test_wrong_method_keeps_status(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/only-get")
        async def test_endpoint():
            return {}

        response = client.post("/only-get")

        assert response.status_code == 405
        assert response.json()["error"]["code"] == "http_error"


class TestGeneralExceptionHandler:
    """Test fallback handler for unexpected exceptions."""

    def test_unexpected_exception_handler_registered(self, app_with_handlers: FastAPI):
        """Verify fallback exception handler is registered."""
        assert Exception in app_with_handlers.exception_handlers

    def test_general_exception_handler_logic(self):
        """Verify general_exception_handler returns correct structure."""
        from app.core.exception_handlers import general_exception_handler

        request = AsyncMock()
        request.url.path = "/test"
        request.method = "GET"
        request.state.request_id = "req-abc"

        exc = RuntimeError("Unexpected error: database connection failed")
        response = asyncio.run(general_exception_handler(request, exc))

        data = json.loads(bytes(response.body).decode())
        assert response.status_code == 500
        assert data["error"]["code"] == "internal_server_error"
        # Original error message should NOT be in response
        assert "database connection" not in data["error"]["message"]
        assert data["error"]["request_id"] == "req-abc"
        assert response.headers["X-Request-ID"] == "req-abc"

    def test_general_exception_handler_never_leaks_stack_trace(self):
        """Verify stack traces are never included in response."""
        from app.core.exception_handlers import general_exception_handler

        request = AsyncMock()
        request.url.path = "/test"
        request.method = "GET"
        request.state.request_id = None

        exc = ValueError("Test error with details")
        response = asyncio.run(general_exception_handler(request, exc))

        response_text = bytes(response.body).decode()
        assert "Traceback" not in response_text
        assert "File \"" not in response_text
        assert "ValueError" not in response_text


class TestErrorHandlerIntegration:
    """Integration tests for exception handler setup."""

    def test_multiple_handler_setups_does_not_fail(self):
        """Verify calling setup_exception_handlers multiple times is safe."""
        app = FastAPI()

        setup_exception_handlers(app)
        setup_exception_handlers(app)

        assert AppError in app.exception_handlers


def test_unexpected_error_keeps_request_id_through_full_app():
    """500 responses carry the caller's request id in body and header."""
    from app.core.app_factory import create_app

    app = create_app()

    @app.get("/api/explode")
    async def explode():
        raise RuntimeError("kaboom")

    with TestClient(app, raise_server_exceptions=False) as client:
        response = client.get("/api/explode", headers={"X-Request-ID": "req-123"})

    assert response.status_code == 500
    error = response.json()["error"]
    assert error["code"] == "internal_server_error"
    assert error["request_id"] == "req-123"
    assert "kaboom" not in error["message"]
    assert response.headers["X-Request-ID"] == "req-123"
