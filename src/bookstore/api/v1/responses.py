"""
Response envelope.

Every endpoint answers with the same shape:

    {"data": <payload or null>, "error": <error payload or null>}
"""
from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from bookstore.exceptions.base import BookError


def respond(status_code: int, data: Any = None, error: dict | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"data": jsonable_encoder(data), "error": error},
    )


def respond_ok(data: Any) -> JSONResponse:
    return respond(200, data=data)


def respond_error(exc: BookError) -> JSONResponse:
    return respond(exc.http_status(), error=exc.to_payload())
