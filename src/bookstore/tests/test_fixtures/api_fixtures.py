"""Fixtures for HTTP-level tests."""

from pathlib import Path
from typing import Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from bookstore.config import Settings
from bookstore.main import create_app


@pytest.fixture
def api_settings(tmp_path: Path) -> Settings:
    """
    Settings pointing the app at a throwaway SQLite file.

    The engine is created by the app lifespan inside TestClient's own event
    loop, so it never crosses loops with pytest-asyncio.
    """
    return Settings(
        ENV="testing",
        DATABASE_URI=f"sqlite+aiosqlite:///{tmp_path / 'api.db'}",
        LOG_LEVEL="WARNING",
        LOG_FORMAT="json",
        LOG_TO_STDOUT=True,
    )


@pytest.fixture
def app(api_settings: Settings) -> FastAPI:
    return create_app(api_settings)


@pytest.fixture
def client(app: FastAPI) -> Iterator[TestClient]:
    """TestClient with the lifespan running (schema created, validator built)."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def post_book(client: TestClient):
    """
    Helper: POST a book and return the response.

    Usage:
        resp = post_book(title="Dune", author="Frank Herbert", year=1965)
    """
    def _post(**fields):
        payload = {
            "title": "Fahrenheit 451",
            "author": "Ray Bradbury",
            "year": 1953,
            "description": "A dystopian novel about book burning.",
        }
        payload.update(fields)
        return client.post("/book", json=payload)

    return _post
