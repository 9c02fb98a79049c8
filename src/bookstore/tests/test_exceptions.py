import pytest
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError, OperationalError

from bookstore.entities import Book
from bookstore.exceptions.base import BookError, ErrorKind, FieldError, KIND_TO_STATUS, MESSAGES
from bookstore.exceptions.integrity_classifier import ConstraintViolation, classify_integrity_error
from bookstore.exceptions.mapper import db_error_handler, map_integrity_error
from bookstore.exceptions.translator import translate_validation_error


class PgError(Exception):
    """Stand-in for a driver error carrying a SQLSTATE, like psycopg's."""

    def __init__(self, msg: str, sqlstate: str):
        super().__init__(msg)
        self.sqlstate = sqlstate


class FakeSession:
    def __init__(self):
        self.rolled_back = False

    async def rollback(self):
        self.rolled_back = True


def integrity(msg: str, orig: Exception | None = None) -> IntegrityError:
    return IntegrityError("INSERT", {}, orig if orig is not None else Exception(msg))


class TestBookError:
    def test_every_kind_has_message_and_status(self):
        assert set(MESSAGES) == set(ErrorKind)
        assert set(KIND_TO_STATUS) == set(ErrorKind)

    def test_payload_without_fields(self):
        err = BookError.not_found_by_author("Tolkien")
        assert err.to_payload() == {"msg": "Book(s) with author Tolkien not found in db", "code": "not_found_by_author"}
        assert err.http_status() == 404

    def test_payload_with_fields(self):
        err = BookError.validation([FieldError("Title", "Title cannot be empty")])
        assert err.to_payload() == {
            "msg": "Invalid request: invalid book payload",
            "code": "bad_request",
            "fields": [{"field": "Title", "msg": "Title cannot be empty"}],
        }
        assert "Title cannot be empty" in str(err)

    @pytest.mark.parametrize(
        "err, status",
        [
            (BookError.invalid_serial(), 400),
            (BookError.empty_body(), 400),
            (BookError.already_exists(), 409),
            (BookError.could_not_query("get_book"), 500),
            (BookError.unexpected("RuntimeError"), 500),
        ],
    )
    def test_status_codes(self, err, status):
        assert err.http_status() == status


class TestIntegrityMapping:
    def test_sqlstate_wins_over_message(self):
        exc = integrity("", PgError("something odd", "23505"))
        assert classify_integrity_error(exc) == (ConstraintViolation.UNIQUE, None)

    def test_sqlite_not_null_message(self):
        exc = integrity("NOT NULL constraint failed: bookstore.title")
        err = map_integrity_error(exc, "save_book")

        assert err.kind is ErrorKind.BAD_REQUEST
        assert err.fields[0].field == "Title"

    def test_postgres_unique_detail(self):
        exc = integrity("", PgError('duplicate key value violates unique constraint\nDETAIL:  Key (title)=(Dune) already exists.', "23505"))
        err = map_integrity_error(exc, "save_book")

        assert err.kind is ErrorKind.ALREADY_EXISTS
        assert err.message == "Requested book title already exists"

    def test_unknown_integrity_error(self):
        err = map_integrity_error(integrity("exotic failure"), "update_book")
        assert err.kind is ErrorKind.COULD_NOT_QUERY


@pytest.mark.asyncio
class TestDbErrorHandler:
    async def test_operational_error_rolls_back(self):
        session = FakeSession()

        with pytest.raises(BookError) as exc_info:
            async with db_error_handler(session, "get_book"):
                raise OperationalError("SELECT", {}, Exception("connection refused"))

        assert session.rolled_back
        assert exc_info.value.message == "Could not execute query: get_book"

    async def test_book_error_passes_through(self):
        session = FakeSession()

        with pytest.raises(BookError) as exc_info:
            async with db_error_handler(session, "get_book"):
                raise BookError.not_found()

        assert exc_info.value.kind is ErrorKind.NOT_FOUND
        assert not session.rolled_back


class TestTranslator:
    def test_type_errors_become_field_errors(self):
        with pytest.raises(ValidationError) as exc_info:
            Book.model_validate({"id": "x", "title": 12, "year": "abc"})

        fields = translate_validation_error(exc_info.value)
        assert FieldError("ID", "ID should be an integer") in fields
        assert FieldError("Title", "Title should be a string") in fields
        assert FieldError("Year", "Year should be an integer") in fields
