"""
FastAPI dependencies.

Everything request handlers need is built from `app.state`, which the
lifespan in `bookstore.main` fills in: the session factory (owning the
connection pool) and the book validator.
"""
import logging
from typing import AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore.exceptions.mapper import db_error_handler
from bookstore.repositories.book_repository import BookRepository
from bookstore.validators.book_validators import BookValidator

logger = logging.getLogger(__name__)


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    Yield a request-scoped session.

    Rolls back if anything raised. Write handlers commit through
    `commit_session` before building their response; anything left
    uncommitted is discarded when the session closes.
    """
    session_factory = request.app.state.session_factory
    async with session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def commit_session(db: AsyncSession, operation: str) -> None:
    """Commit the work of `operation`; a failed commit is a COULD_NOT_QUERY error."""
    async with db_error_handler(db, operation):
        await db.commit()
    logger.debug("db.commit", extra={"operation": operation})


def get_book_validator(request: Request) -> BookValidator:
    return request.app.state.book_validator


def get_book_repository(
    db: AsyncSession = Depends(get_db_session),
    validator: BookValidator = Depends(get_book_validator),
) -> BookRepository:
    return BookRepository(db, validator)
