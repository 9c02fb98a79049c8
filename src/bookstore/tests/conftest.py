"""
Core pytest configuration for the entire test suite.

Only the database setup shared by every kind of test lives here. Domain
fixtures are defined in:
- tests/test_fixtures/repository_fixtures.py
- tests/test_fixtures/api_fixtures.py

and imported at the bottom of this module so they are available everywhere.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import AsyncGenerator

# -------------------------------
# Early logging tuning
# -------------------------------
# Silence noisy third-party loggers before they get imported, so test
# collection stays quiet.
NOISY_LOGGERS = (
    "sqlalchemy",
    "sqlalchemy.engine",
    "sqlalchemy.engine.Engine",
    "aiosqlite",
    "asyncio",
    "httpx",
)
for _name in NOISY_LOGGERS:
    logging.getLogger(_name).setLevel(logging.WARNING)

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    create_async_engine,
    async_sessionmaker,
    AsyncEngine,
)

from bookstore.database.base import Base
from bookstore.models import book  # noqa: F401 - registers BookRecord with Base.metadata


def sqlite_url(path: Path) -> str:
    return f"sqlite+aiosqlite:///{path}"


# ------------------------------------------------------------------------------------------------
# DATABASE FIXTURES
# ------------------------------------------------------------------------------------------------
# A fresh SQLite file per test: ids restart at 1 and nothing leaks between tests.

@pytest.fixture
async def async_engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    engine = create_async_engine(sqlite_url(tmp_path / "repository.db"), echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def db_session(async_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """
    Session bound to the per-test engine.

    The repository never commits, so rows written by a test stay inside this
    session's transaction and are visible to its later statements.
    """
    maker = async_sessionmaker(bind=async_engine, class_=AsyncSession, expire_on_commit=False)
    async with maker() as session:
        yield session
        await session.rollback()


# Repository test fixtures
from .test_fixtures.repository_fixtures import (  # noqa: E402
    book_validator,
    book_repository,
    sample_book_data,
    sample_book,
    create_book,
    multiple_books,
)

# API test fixtures
from .test_fixtures.api_fixtures import (  # noqa: E402
    api_settings,
    app,
    client,
    post_book,
)
