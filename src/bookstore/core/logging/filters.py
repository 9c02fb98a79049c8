# src/bookstore/core/logging/filters.py
"""
Logging filters.

- RequestIdFilter stamps every LogRecord with `request_id`, read from a
  contextvar set by RequestIDMiddleware. Records logged outside a request get
  the sentinel "-", so format strings using `%(request_id)s` never KeyError.
- RedactFilter masks record attributes whose names look sensitive
  (password, token, authorization, ...).

A contextvar is used rather than threading.local() because several requests
share one thread under asyncio, and the value has to survive `await`.
"""

import logging
from logging import LogRecord
import contextvars

# Request id for the current execution context; None means "not in a request".
_request_id_ctx: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_id", default=None
)


def set_request_id(request_id: str | None):
    """
    Set the request id in the current context.

    Returns:
        token: pass it to reset_request_id(token) to restore the previous value.
    """
    return _request_id_ctx.set(request_id)


def reset_request_id(token) -> None:
    _request_id_ctx.reset(token)


def get_request_id() -> str | None:
    return _request_id_ctx.get()


class RequestIdFilter(logging.Filter):
    """
    Guarantee every LogRecord has a `request_id` attribute.

    Precedence: an explicit `extra={"request_id": ...}` on the call, then the
    contextvar, then "-". Always returns True; it annotates, never drops.
    """

    def filter(self, record: LogRecord) -> bool:
        record.request_id = (
            getattr(record, "request_id", None) or get_request_id() or "-"
        )
        return True


class RedactFilter(logging.Filter):
    """Replace the value of sensitive record attributes with a fixed marker."""

    SENSITIVE = {"password", "secret", "token", "access_token", "refresh_token", "authorization", "database_uri"}
    MASK = "***REDACTED***"

    def filter(self, record: LogRecord) -> bool:
        for key in list(record.__dict__.keys()):
            if key.lower() in self.SENSITIVE:
                record.__dict__[key] = self.MASK
        return True
