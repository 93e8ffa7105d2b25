"""Tests for global exception handlers.

Validates that all exception types are rendered as ``{"message": ...}``
bodies with the proper HTTP status code and no information leakage.
"""

import asyncio
import json
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from kv_api.core.errors import (
    AppError,
    BadRequestAppError,
    ConflictAppError,
    NotFoundAppError,
    TooManyRequestsAppError,
)
from kv_api.core.exception_handlers import general_exception_handler, setup_exception_handlers


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
        "error, status_code, message",
        [
            (
                BadRequestAppError(code="missing_fields", message="'value' is expected"),
                400,
                "Bad Request: 'value' is expected",
            ),
            (NotFoundAppError(code="key_not_found"), 404, "Not Found"),
            (
                ConflictAppError(code="key_exists", message="'key' must be unique"),
                409,
                "Conflict: 'key' must be unique",
            ),
            (TooManyRequestsAppError(code="too_many_requests"), 429, "Too Many Requests"),
        ],
    )
    def test_domain_errors_map_to_status_and_message(
        self,
        client: TestClient,
        app_with_handlers: FastAPI,
        error: AppError,
        status_code: int,
        message: str,
    ):
        """Verify each domain error renders its own status and message."""
        @app_with_handlers.get("/test-error")
        async def test_endpoint():
            raise error

        response = client.get("/test-error")

        assert response.status_code == status_code
        assert response.json() == {"message": message}

    def test_error_headers_are_forwarded(self, client: TestClient, app_with_handlers: FastAPI):
        """Verify headers attached to an AppError reach the response."""
        @app_with_handlers.get("/test-headers")
        async def test_endpoint():
            raise TooManyRequestsAppError(code="too_many_requests", headers={"Retry-After": "1"})

        response = client.get("/test-headers")

        assert response.status_code == 429
        assert response.headers["Retry-After"] == "1"

    def test_details_are_not_exposed(self, client: TestClient, app_with_handlers: FastAPI):
        """Verify structured details stay in logs, not in the body."""
        @app_with_handlers.get("/test-details")
        async def test_endpoint():
            raise NotFoundAppError(code="key_not_found", details={"key": "secret-key-name"})

        response = client.get("/test-details")

        assert "secret-key-name" not in response.text

    def test_str_of_error_is_response_message(self):
        error = BadRequestAppError(code="x", message="'key' is expected")

        assert str(error) == "Bad Request: 'key' is expected"


class TestHttpExceptionHandler:
    def test_unknown_route_uses_message_body(self, client: TestClient):
        response = client.get("/does-not-exist")

        assert response.status_code == 404
        assert response.json() == {"message": "Not Found"}

    def test_wrong_method_uses_message_body(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.post("/only-post")
        async def test_endpoint():
            return {}

        response = client.get("/only-post")

        assert response.status_code == 405
        assert response.json() == {"message": "Method Not Allowed"}


class TestValidationExceptionHandler:
    def test_typed_parameter_failure_is_bad_request(
        self, client: TestClient, app_with_handlers: FastAPI
    ):
        """Verify framework validation errors become 400 instead of 422."""
        @app_with_handlers.get("/typed")
        async def test_endpoint(count: int):
            return {"count": count}

        response = client.get("/typed", params={"count": "many"})

        assert response.status_code == 400
        assert response.json() == {"message": "Bad Request: invalid query.count"}

    def test_missing_parameter_is_bad_request(
        self, client: TestClient, app_with_handlers: FastAPI
    ):
        @app_with_handlers.get("/required")
        async def test_endpoint(count: int):
            return {"count": count}

        response = client.get("/required")

        assert response.status_code == 400
        assert response.json()["message"].startswith("Bad Request: invalid")


class TestGeneralExceptionHandler:
    """Test fallback handler for unexpected exceptions."""

    def test_unexpected_exception_handler_registered(self, app_with_handlers: FastAPI):
        assert Exception in app_with_handlers.exception_handlers

    def test_general_exception_handler_never_leaks_details(self):
        """Verify exception text and stack traces are never included in response."""
        request = AsyncMock()
        request.url.path = "/test"
        request.method = "GET"

        exc = RuntimeError("Unexpected error: database connection failed")
        response = asyncio.run(general_exception_handler(request, exc))

        response_body = response.body if isinstance(response.body, bytes) else bytes(response.body)
        data = json.loads(response_body.decode())
        assert response.status_code == 500
        assert data == {"message": "Internal Server Error"}
        assert "database connection" not in response_body.decode()
        assert "Traceback" not in response_body.decode()


class TestErrorHandlerIntegration:
    def test_setup_exception_handlers_registers_handlers(self, app_with_handlers: FastAPI):
        assert AppError in app_with_handlers.exception_handlers
        assert Exception in app_with_handlers.exception_handlers

    def test_multiple_handler_setups_does_not_fail(self):
        """Verify calling setup_exception_handlers multiple times is safe."""
        app = FastAPI()

        setup_exception_handlers(app)
        setup_exception_handlers(app)

        assert AppError in app.exception_handlers
