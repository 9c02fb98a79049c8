"""
Book routes, mounted at /book.

Handlers parse path ids and request bodies themselves so that every failure
is reported through BookError in the service's own vocabulary (INVALID_SERIAL,
EMPTY_BODY, field errors) instead of FastAPI's default 422 payloads.
"""
import json
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from bookstore.core.dependencies import commit_session, get_book_repository, get_book_validator
from bookstore.entities import Book
from bookstore.exceptions.base import BookError
from bookstore.exceptions.translator import translate_validation_error
from bookstore.repositories.book_repository import BookRepository
from bookstore.validators.book_validators import BookValidator
from .responses import respond_ok

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/book", tags=["books"])


def parse_book_id(raw: str) -> int:
    """
    Path ids must be integers >= 1; anything else is an invalid serial.

    Ids beyond the column range parse fine here and are answered as
    NOT_FOUND by the repository.
    """
    try:
        book_id = int(raw)
    except ValueError:
        raise BookError.invalid_serial() from None
    if book_id < 1:
        raise BookError.invalid_serial()
    return book_id


async def read_book(request: Request, validator: BookValidator) -> Book:
    """
    Decode and validate the JSON body of a write request.

    empty body           -> EMPTY_BODY
    malformed / non-object JSON -> BAD_REQUEST
    wrong field types    -> BAD_REQUEST with field errors
    validator rejections -> BAD_REQUEST with field errors
    """
    body = await request.body()
    if not body.strip():
        raise BookError.empty_body()

    try:
        payload = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise BookError.bad_request("malformed JSON body") from None

    if not isinstance(payload, dict):
        raise BookError.bad_request("expected a JSON object")

    try:
        book = Book.model_validate(payload)
    except ValidationError as exc:
        raise BookError.bad_request(fields=translate_validation_error(exc)) from None

    errors = validator.validate(book)
    if errors:
        raise BookError.validation(errors)
    return book


# Literal segments are registered before "/{book_id}" so they take precedence.

@router.get("/author/{author}")
async def search_by_author(author: str, repo: BookRepository = Depends(get_book_repository)) -> JSONResponse:
    return respond_ok(await repo.search_by_author(author))


@router.get("/title/{title}")
async def search_by_title(title: str, repo: BookRepository = Depends(get_book_repository)) -> JSONResponse:
    return respond_ok(await repo.search_by_title(title))


@router.get("/author", include_in_schema=False)
@router.get("/author/", include_in_schema=False)
async def search_by_empty_author(repo: BookRepository = Depends(get_book_repository)) -> JSONResponse:
    return respond_ok(await repo.search_by_author(""))


@router.get("/title", include_in_schema=False)
@router.get("/title/", include_in_schema=False)
async def search_by_empty_title(repo: BookRepository = Depends(get_book_repository)) -> JSONResponse:
    return respond_ok(await repo.search_by_title(""))


@router.get("")
@router.get("/", include_in_schema=False)
async def get_all_books(repo: BookRepository = Depends(get_book_repository)) -> JSONResponse:
    return respond_ok(await repo.get_all_books())


@router.get("/{book_id}")
async def get_book(book_id: str, repo: BookRepository = Depends(get_book_repository)) -> JSONResponse:
    return respond_ok(await repo.get_book(parse_book_id(book_id)))


@router.post("")
@router.post("/", include_in_schema=False)
async def save_book(
    request: Request,
    repo: BookRepository = Depends(get_book_repository),
    validator: BookValidator = Depends(get_book_validator),
) -> JSONResponse:
    book = await read_book(request, validator)
    saved = await repo.save_book(book)
    await commit_session(repo.db, "save_book")
    logger.info("book.saved", extra={"book_id": saved.id})
    return respond_ok(saved)


@router.put("/{book_id}")
async def update_book(
    book_id: str,
    request: Request,
    repo: BookRepository = Depends(get_book_repository),
    validator: BookValidator = Depends(get_book_validator),
) -> JSONResponse:
    serial = parse_book_id(book_id)
    book = await read_book(request, validator)
    updated = await repo.update_book(serial, book)
    await commit_session(repo.db, "update_book")
    return respond_ok(updated)


@router.delete("")
@router.delete("/", include_in_schema=False)
async def delete_all_books(repo: BookRepository = Depends(get_book_repository)) -> JSONResponse:
    deleted = await repo.delete_all_books()
    await commit_session(repo.db, "delete_all_books")
    return respond_ok(deleted)


@router.delete("/{book_id}")
async def delete_book(book_id: str, repo: BookRepository = Depends(get_book_repository)) -> JSONResponse:
    deleted = await repo.delete_book(parse_book_id(book_id))
    await commit_session(repo.db, "delete_book")
    return respond_ok(deleted)
