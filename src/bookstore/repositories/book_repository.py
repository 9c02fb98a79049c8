import time
import logging

from sqlalchemy import delete, insert, select, text, update
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore.entities import Book
from bookstore.exceptions.base import BookError
from bookstore.models import BookRecord, BOOK_ID_SEQUENCE, MAX_BOOK_ID
from bookstore.repositories.base_repository import BaseRepository
from bookstore.validators.book_validators import (
    BookValidator,
    FIELD_AUTHOR_EMPTY,
    FIELD_TITLE_EMPTY,
)

logger = logging.getLogger(__name__)

books = BookRecord.__table__


class BookRepository(BaseRepository[Book]):
    """
    Persistence operations for books.

    Each method issues one parameterized statement (delete-all adds the
    sequence reset) and reports failures as BookError:

        id < 1               -> INVALID_SERIAL, before any SQL is issued
        id > MAX_BOOK_ID     -> NOT_FOUND, before any SQL is issued
        invalid payload      -> BAD_REQUEST with field errors
        nothing matched      -> NOT_FOUND / NOT_FOUND_BY_AUTHOR / NOT_FOUND_BY_TITLE
        driver failure       -> COULD_NOT_QUERY
    """

    def __init__(self, db: AsyncSession, validator: BookValidator):
        super().__init__(Book, db)
        self.validator = validator

    # =================================================================================================================
    # Create
    # =================================================================================================================

    async def save_book(self, book: Book) -> Book:
        """Insert `book` and return a copy carrying the id assigned by the store."""
        self._validate(book, "save_book")
        start = time.perf_counter()

        stmt = (
            insert(books)
            .values(title=book.title, author=book.author, year=book.year, description=book.description)
            .returning(books.c.id)
        )
        result = await self._execute("save_book", stmt)
        new_id = result.scalar_one()

        self._log_success("save_book", start, book_id=new_id)
        return book.with_id(new_id)

    # =================================================================================================================
    # Read
    # =================================================================================================================

    async def get_book(self, book_id: int) -> Book:
        self._check_serial(book_id)
        start = time.perf_counter()

        result = await self._execute("get_book", select(books).where(books.c.id == book_id), book_id=book_id)
        row = result.mappings().first()
        if row is None:
            self._log_not_found("get_book", book_id=book_id)
            raise BookError.not_found()

        self._log_success("get_book", start, book_id=book_id)
        return self._to_entity(row)

    async def get_all_books(self) -> list[Book]:
        """
        Return every book ordered by id.

        Rows that can't be converted are skipped. An empty table (or one whose
        rows were all skipped) is reported as NOT_FOUND.
        """
        start = time.perf_counter()

        result = await self._execute("get_all_books", select(books).order_by(books.c.id))
        found = self._to_entities("get_all_books", result.mappings().all())
        if not found:
            self._log_not_found("get_all_books")
            raise BookError.not_found()

        self._log_success("get_all_books", start, count=len(found))
        return found

    async def search_by_author(self, author: str) -> list[Book]:
        if not author or not author.strip():
            raise BookError.validation([FIELD_AUTHOR_EMPTY])
        start = time.perf_counter()

        stmt = select(books).where(books.c.author == author).order_by(books.c.id)
        result = await self._execute("search_by_author", stmt, author=author)
        found = self._to_entities("search_by_author", result.mappings().all())
        if not found:
            self._log_not_found("search_by_author", author=author)
            raise BookError.not_found_by_author(author)

        self._log_success("search_by_author", start, count=len(found))
        return found

    async def search_by_title(self, title: str) -> Book:
        """Return the first book (lowest id) whose title matches exactly."""
        if not title or not title.strip():
            raise BookError.validation([FIELD_TITLE_EMPTY])
        start = time.perf_counter()

        stmt = select(books).where(books.c.title == title).order_by(books.c.id).limit(1)
        result = await self._execute("search_by_title", stmt, title=title)
        row = result.mappings().first()
        if row is None:
            self._log_not_found("search_by_title", title=title)
            raise BookError.not_found_by_title(title)

        self._log_success("search_by_title", start)
        return self._to_entity(row)

    # =================================================================================================================
    # Update
    # =================================================================================================================

    async def update_book(self, book_id: int, book: Book) -> Book:
        """
        Replace every field of book `book_id` except the id.

        A missing row is detected through the statement's rowcount, not a
        prior SELECT.
        """
        self._check_serial(book_id)
        self._validate(book, "update_book")
        start = time.perf_counter()

        stmt = (
            update(books)
            .where(books.c.id == book_id)
            .values(title=book.title, author=book.author, year=book.year, description=book.description)
        )
        result = await self._execute("update_book", stmt, book_id=book_id)
        if result.rowcount == 0:
            self._log_not_found("update_book", book_id=book_id)
            raise BookError.not_found()

        self._log_success("update_book", start, book_id=book_id)
        return book.with_id(book_id)

    # =================================================================================================================
    # Delete
    # =================================================================================================================

    async def delete_book(self, book_id: int) -> int:
        """Delete book `book_id`; returns the number of rows removed (1)."""
        self._check_serial(book_id)
        start = time.perf_counter()

        result = await self._execute("delete_book", delete(books).where(books.c.id == book_id), book_id=book_id)
        if result.rowcount == 0:
            self._log_not_found("delete_book", book_id=book_id)
            raise BookError.not_found()

        self._log_success("delete_book", start, book_id=book_id)
        return result.rowcount

    async def delete_all_books(self) -> int:
        """
        Delete every book and restart id numbering at 1.

        PostgreSQL needs the SERIAL sequence reset explicitly; SQLite hands
        out rowid 1 again once the table is empty.
        """
        start = time.perf_counter()

        result = await self._execute("delete_all_books", delete(books))
        affected = result.rowcount

        if self.dialect_name == "postgresql":
            await self._execute(
                "delete_all_books",
                text(f"ALTER SEQUENCE {BOOK_ID_SEQUENCE} RESTART WITH 1"),
            )

        if affected == 0:
            self._log_not_found("delete_all_books")
            raise BookError.not_found()

        self._log_success("delete_all_books", start, count=affected)
        return affected

    # =================================================================================================================
    # Guards
    # =================================================================================================================

    def _check_serial(self, book_id: int) -> None:
        if book_id < 1:
            logger.info("repo.invalid_serial", extra={"book_id": book_id})
            raise BookError.invalid_serial()
        if book_id > MAX_BOOK_ID:
            self._log_not_found("check_serial", book_id=book_id)
            raise BookError.not_found()

    def _validate(self, book: Book, operation: str) -> None:
        errors = self.validator.validate(book)
        if errors:
            logger.info(
                f"repo.{operation}.invalid_fields",
                extra={"operation": operation, "invalid_fields": [e.field for e in errors]},
            )
            raise BookError.validation(errors)
