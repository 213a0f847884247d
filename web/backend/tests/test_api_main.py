"""Tests for the FastAPI application shell."""

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from aurora_music.domain.library.exceptions import (
    AuroraError,
    DuplicateError,
    NotFoundError,
    PermissionDeniedError,
    UploadValidationError,
)
from web.backend.errors import domain_errors, to_http_exception
from web.backend.main import app

client = TestClient(app)


def test_health_endpoint():
    """Test health check endpoint returns 200."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_cors_headers():
    """Test CORS headers are present."""
    response = client.options(
        "/health",
        headers={
            "Origin": "http://localhost:5173",
            "Access-Control-Request-Method": "GET",
        },
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:5173"


def test_lifespan_initializes_database(isolated_dirs):
    with TestClient(app) as started:
        response = started.get("/api/stats")
    assert response.status_code == 200
    assert (isolated_dirs / "data" / "aurora-music" / "aurora_music.db").exists()


@pytest.mark.parametrize(
    "error, status",
    [
        (NotFoundError("Song", 1), 404),
        (UploadValidationError("bad file"), 400),
        (DuplicateError("exists"), 409),
        (PermissionDeniedError("nope"), 403),
        (AuroraError("unknown"), 500),
    ],
)
def test_domain_errors_map_to_status(error, status):
    assert to_http_exception(error).status_code == status


def test_unexpected_errors_become_500():
    with pytest.raises(HTTPException) as exc_info:
        with domain_errors("do the thing"):
            raise RuntimeError("kaboom")
    assert exc_info.value.status_code == 500
    assert "Failed to do the thing" in exc_info.value.detail
