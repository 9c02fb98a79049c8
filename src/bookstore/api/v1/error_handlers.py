# bookstore/api/v1/error_handlers.py
"""
FastAPI exception handlers that render errors into the response envelope.

Repositories and handlers raise `BookError`; the status code and payload come
from the error itself (`http_status()`, `to_payload()`), so the handlers here
stay tiny. Anything else that escapes a route becomes a 500 UNEXPECTED without
leaking internals.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from bookstore.exceptions.base import BookError, FieldError
from bookstore.exceptions.translator import field_name
from .responses import respond, respond_error

logger = logging.getLogger(__name__)


async def book_error_handler(request: Request, exc: BookError) -> JSONResponse:
    if exc.http_status() >= 500:
        logger.error("BookError for %s %s: %s", request.method, request.url.path, exc)
    else:
        # Expected client-level outcome, no stack trace
        logger.info("BookError for %s %s: %s", request.method, request.url.path, exc)
    return respond_error(exc)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """400 with field errors for anything FastAPI rejects before the route runs."""
    fields = [
        FieldError(field_name(str(err.get("loc", ("body",))[-1])), err.get("msg", "invalid value"))
        for err in exc.errors()
    ]
    logger.info("Request validation failed for %s %s", request.method, request.url.path)
    return respond_error(BookError.bad_request("malformed request", fields=fields))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Unknown routes and disallowed methods keep the envelope shape."""
    return respond(exc.status_code, error={"msg": str(exc.detail), "code": "http_error"})


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error for %s %s", request.method, request.url.path)
    return respond_error(BookError.unexpected(exc.__class__.__name__))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BookError, book_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
