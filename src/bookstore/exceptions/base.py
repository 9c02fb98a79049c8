"""
Domain errors for the bookstore service.

Every failure the repository or the HTTP layer can report is a `BookError`
tagged with an `ErrorKind`. The kind decides the HTTP status and the message
template, so the exception handlers never need to know which layer raised it.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable


@dataclass(frozen=True)
class FieldError:
    """A single field-level validation failure, e.g. FieldError("Title", "Title cannot be empty")."""

    field: str
    msg: str

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "msg": self.msg}

    def __str__(self) -> str:
        return f"field: {self.field}, msg: {self.msg}"


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    NOT_FOUND_BY_AUTHOR = "not_found_by_author"
    NOT_FOUND_BY_TITLE = "not_found_by_title"
    BAD_REQUEST = "bad_request"
    INVALID_SERIAL = "invalid_serial"
    EMPTY_BODY = "empty_body"
    ALREADY_EXISTS = "already_exists"
    COULD_NOT_QUERY = "could_not_query"
    UNEXPECTED = "unexpected"


# Message templates, rendered with the error's `context` mapping.
MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.NOT_FOUND: "Book(s) not found in db",
    ErrorKind.NOT_FOUND_BY_AUTHOR: "Book(s) with author {author} not found in db",
    ErrorKind.NOT_FOUND_BY_TITLE: "Book(s) with title {title} not found in db",
    ErrorKind.BAD_REQUEST: "Invalid request: {detail}",
    ErrorKind.INVALID_SERIAL: "Invalid serial. Serial must be more than 1",
    ErrorKind.EMPTY_BODY: "Expected body, found EOF",
    ErrorKind.ALREADY_EXISTS: "Requested {detail} already exists",
    ErrorKind.COULD_NOT_QUERY: "Could not execute query: {detail}",
    ErrorKind.UNEXPECTED: "Unexpected error: {detail}",
}

KIND_TO_STATUS: dict[ErrorKind, int] = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.NOT_FOUND_BY_AUTHOR: 404,
    ErrorKind.NOT_FOUND_BY_TITLE: 404,
    ErrorKind.BAD_REQUEST: 400,
    ErrorKind.INVALID_SERIAL: 400,
    ErrorKind.EMPTY_BODY: 400,
    ErrorKind.ALREADY_EXISTS: 409,
    ErrorKind.COULD_NOT_QUERY: 500,
    ErrorKind.UNEXPECTED: 500,
}


class BookError(Exception):
    """
    Base exception for repository and request errors.

    - kind: canonical ErrorKind; drives the HTTP status and the message template
    - fields: optional list of FieldError (validator output)
    - context: values substituted into the message template (e.g. the searched author)

    Build instances through the named constructors (`BookError.not_found()`,
    `BookError.invalid_serial()`, ...) so messages stay consistent.
    """

    def __init__(self, kind: ErrorKind, *, fields: Iterable[FieldError] | None = None, **context: str):
        self.kind = kind
        self.fields = list(fields) if fields else []
        self.context = context
        self.message = MESSAGES[kind].format(**context)
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.fields:
            return f"{self.message} ({'; '.join(str(f) for f in self.fields)})"
        return self.message

    def __repr__(self) -> str:
        return f"BookError(kind={self.kind.value!r}, message={self.message!r}, fields={self.fields!r})"

    # ------------------------
    # Named constructors
    # ------------------------
    @classmethod
    def not_found(cls) -> "BookError":
        return cls(ErrorKind.NOT_FOUND)

    @classmethod
    def not_found_by_author(cls, author: str) -> "BookError":
        return cls(ErrorKind.NOT_FOUND_BY_AUTHOR, author=author)

    @classmethod
    def not_found_by_title(cls, title: str) -> "BookError":
        return cls(ErrorKind.NOT_FOUND_BY_TITLE, title=title)

    @classmethod
    def bad_request(cls, detail: str = "invalid book payload", *, fields: Iterable[FieldError] | None = None) -> "BookError":
        return cls(ErrorKind.BAD_REQUEST, fields=fields, detail=detail)

    @classmethod
    def validation(cls, fields: Iterable[FieldError]) -> "BookError":
        """BAD_REQUEST carrying the validator's field errors."""
        return cls.bad_request("invalid book payload", fields=fields)

    @classmethod
    def invalid_serial(cls) -> "BookError":
        return cls(ErrorKind.INVALID_SERIAL)

    @classmethod
    def empty_body(cls) -> "BookError":
        return cls(ErrorKind.EMPTY_BODY)

    @classmethod
    def already_exists(cls, detail: str = "book") -> "BookError":
        return cls(ErrorKind.ALREADY_EXISTS, detail=detail)

    @classmethod
    def could_not_query(cls, detail: str) -> "BookError":
        return cls(ErrorKind.COULD_NOT_QUERY, detail=detail)

    @classmethod
    def unexpected(cls, detail: str) -> "BookError":
        return cls(ErrorKind.UNEXPECTED, detail=detail)

    # ------------------------
    # Structured payload for API responses
    # ------------------------
    def to_payload(self) -> dict:
        """
        Return the JSON-serializable `error` member of the response envelope:
            {"msg": "...", "code": "not_found", "fields": [{"field": "Title", "msg": "..."}]}
        `fields` is omitted when empty.
        """
        payload: dict = {"msg": self.message, "code": self.kind.value}
        if self.fields:
            payload["fields"] = [f.to_dict() for f in self.fields]
        return payload

    def http_status(self) -> int:
        """HTTP status for this error's kind; anything unmapped is a 500."""
        return KIND_TO_STATUS.get(self.kind, 500)


__all__ = [
    "FieldError",
    "ErrorKind",
    "BookError",
    "MESSAGES",
    "KIND_TO_STATUS",
]
