"""Unit tests for the global exception handlers."""

from fastapi import FastAPI
from fastapi.testclient import TestClient
import pytest
from sqlalchemy.exc import OperationalError

from src.core.error_handlers import register_exception_handlers
from src.core.exceptions import (
    AppError,
    ConflictError,
    ExternalServiceError,
    NotFoundError,
    PermissionDeniedError,
    RateLimitError,
    ValidationError,
)


def make_client(exc: Exception) -> TestClient:
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/boom")
    def boom() -> None:
        raise exc

    return TestClient(app, raise_server_exceptions=False)


@pytest.mark.parametrize(
    ("exc", "status", "code"),
    [
        (NotFoundError(), 404, "not_found"),
        (ValidationError(), 422, "validation_error"),
        (PermissionDeniedError(), 403, "permission_denied"),
        (ConflictError(), 409, "conflict"),
        (RateLimitError(), 429, "rate_limited"),
        (ExternalServiceError(), 502, "external_service_error"),
        (AppError(), 400, "app_error"),
    ],
)
def test_app_errors_map_to_status(exc, status, code):
    """Test the status code and payload for each domain error."""
    response = make_client(exc).get("/boom")

    assert response.status_code == status
    assert response.json()["error"]["code"] == code


def test_details_are_passed_through():
    exc = ConflictError(message="Access code is already in use", details={"access_code": "x"})

    response = make_client(exc).get("/boom")

    assert response.json() == {
        "error": {
            "code": "conflict",
            "message": "Access code is already in use",
            "details": {"access_code": "x"},
        }
    }


def test_database_error_is_hidden():
    response = make_client(OperationalError("SELECT 1", {}, Exception("gone"))).get("/boom")

    assert response.status_code == 500
    assert response.json()["error"]["code"] == "database_error"


def test_unexpected_error():
    response = make_client(RuntimeError("kaput")).get("/boom")

    assert response.status_code == 500
    assert response.json()["error"]["message"] == "Internal server error"
