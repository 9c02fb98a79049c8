"""
Translate SQLAlchemy errors into `BookError`.

Two levels are involved:

- `integrity_classifier.classify_integrity_error()` labels a raw IntegrityError
  (unique / not-null). Those labels stay internal.
- This module turns the label into the public taxonomy:

| Violation         | BookError kind     | HTTP |
| ----------------- | ------------------ | ---- |
| unique            | ALREADY_EXISTS     | 409  |
| not-null          | BAD_REQUEST        | 400  |
| unknown integrity | COULD_NOT_QUERY    | 500  |
| any other DB error| COULD_NOT_QUERY    | 500  |

Raw driver messages are logged (DEBUG) but never copied into the error that
reaches clients.
"""
import re
import logging
from contextlib import asynccontextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from .integrity_classifier import classify_integrity_error, ConstraintViolation
from .base import BookError, FieldError

logger = logging.getLogger(__name__)

# -----------------------
# Column extraction helpers
# -----------------------

def _extract_columns_postgres(msg: str) -> list[str] | None:
    """
    - 'null value in column "title" of relation "bookstore" violates not-null constraint'
    - 'DETAIL:  Key (title)=(Dune) already exists.'
    """
    m = re.search(r'null value in column "(?P<col>[^"]+)"', msg, flags=re.IGNORECASE)
    if m:
        return [m.group("col")]

    m = re.search(r'key \((?P<cols>[^)]+)\)=', msg, flags=re.IGNORECASE)
    if m:
        return [c.strip().strip('"') for c in m.group("cols").split(",")]

    return None


def _extract_columns_sqlite(msg: str) -> list[str] | None:
    # 'NOT NULL constraint failed: bookstore.title' / 'UNIQUE constraint failed: bookstore.title'
    m = re.search(r'(?:UNIQUE|NOT NULL) constraint failed: (?P<cols>.+)$', msg, flags=re.IGNORECASE)
    if m:
        return [c.split('.')[-1].strip() for c in re.split(r',\s*', m.group("cols"))]
    return None


def extract_columns_from_integrity(exc: IntegrityError) -> list[str]:
    """Best-effort extraction of the column names named in the DB message."""
    msg = str(exc.orig) if exc.orig is not None else str(exc)
    return _extract_columns_postgres(msg) or _extract_columns_sqlite(msg) or []


def _field_name(column: str) -> str:
    # Field errors use the wire-facing capitalised names ("Title", "Author", ...)
    return column[:1].upper() + column[1:]


# -----------------------
# Mapper
# -----------------------

def map_integrity_error(exc: IntegrityError, operation: str) -> BookError:
    """Map an IntegrityError raised by `operation` to the matching BookError."""
    violation, constraint_name = classify_integrity_error(exc)
    columns = extract_columns_from_integrity(exc)

    if violation is ConstraintViolation.UNIQUE:
        # Expected client-level scenario (409), INFO is enough
        logger.info(
            "mapper.duplicate_detected",
            extra={"operation": operation, "fields": columns, "constraint": constraint_name},
        )
        detail = f"book {', '.join(columns)}" if columns else "book"
        return BookError.already_exists(detail)

    if violation is ConstraintViolation.NOT_NULL:
        logger.info(
            "mapper.constraint_violation",
            extra={"operation": operation, "violation": violation.value, "fields": columns, "constraint": constraint_name},
        )
        fields = [FieldError(_field_name(c), f"{_field_name(c)} violates {violation.value.replace('_', ' ')} constraint") for c in columns]
        return BookError.bad_request(f"{violation.value.replace('_', ' ')} constraint violated", fields=fields)

    raw = str(exc.orig) if exc.orig is not None else str(exc)
    logger.warning("mapper.unknown_integrity_error", extra={"operation": operation, "constraint": constraint_name})
    logger.debug("mapper.unknown_integrity_raw", extra={"operation": operation, "raw": raw})
    return BookError.could_not_query(operation)


# -----------------------
# Async context manager to DRY error handling in repositories
# -----------------------
@asynccontextmanager
async def db_error_handler(db: AsyncSession, operation: str):
    """
    Usage:
        async with db_error_handler(self.db, "save_book"):
            ... a single DB statement ...

    BookError raised inside the block passes through untouched. SQLAlchemy
    errors roll the session back and are re-raised as BookError.
    """
    try:
        yield
    except BookError:
        raise
    except IntegrityError as exc:
        await _safe_rollback(db, operation)
        raise map_integrity_error(exc, operation) from exc
    except SQLAlchemyError as exc:
        await _safe_rollback(db, operation)
        logger.error(
            "Could not execute query for %s: %s", operation, exc.__class__.__name__,
            extra={"operation": operation},
        )
        logger.debug("repo.query_error_raw", extra={"operation": operation, "raw": str(exc)})
        raise BookError.could_not_query(operation) from exc


async def _safe_rollback(db: AsyncSession, operation: str) -> None:
    try:
        await db.rollback()
    except SQLAlchemyError:
        logger.exception("Failed to rollback session", extra={"operation": operation})
