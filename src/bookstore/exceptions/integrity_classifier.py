import logging
from enum import Enum
from sqlalchemy.exc import IntegrityError

logger = logging.getLogger(__name__)

# =================================================================================================================
# Constraint categories (internal only, never raised)
# =================================================================================================================


class ConstraintViolation(str, Enum):
    UNIQUE = "unique"
    NOT_NULL = "not_null"
    UNKNOWN = "unknown"


# https://www.postgresql.org/docs/current/errcodes-appendix.html
class PostgresErrorCodes(str, Enum):
    UNIQUE_VIOLATION = "23505"
    NOT_NULL_VIOLATION = "23502"


PGCODE_VIOLATION_MAP = {
    PostgresErrorCodes.UNIQUE_VIOLATION: ConstraintViolation.UNIQUE,
    PostgresErrorCodes.NOT_NULL_VIOLATION: ConstraintViolation.NOT_NULL,
}

# Substrings used when the driver gives no SQLSTATE (SQLite, or driver errors
# wrapped without `pgcode`).
MESSAGE_KEYWORDS = (
    (ConstraintViolation.UNIQUE, ("unique constraint", "unique failed", "unique violation", "duplicate")),
    (ConstraintViolation.NOT_NULL, ("not null constraint", "not null", "null value in column")),
)


# =================================================================================================================
# Integrity Error Classifiers
# =================================================================================================================

def _pgcode_of(orig) -> str | None:
    # psycopg 3 and asyncpg expose `sqlstate`, psycopg2 `pgcode`
    return getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)


def _classify_from_postgres_diag(orig) -> tuple[ConstraintViolation | None, str | None]:
    pgcode = _pgcode_of(orig)
    if not pgcode:
        return None, None

    diag = getattr(orig, "diag", None)
    constraint_name = getattr(diag, "constraint_name", None) if diag else None
    constraint_name = constraint_name or getattr(orig, "constraint_name", None)

    try:
        violation = PGCODE_VIOLATION_MAP[PostgresErrorCodes(pgcode)]
    except ValueError:
        logger.warning(
            "Unknown Postgres integrity error code encountered",
            extra={"pgcode": pgcode, "constraint_name": constraint_name},
        )
        return ConstraintViolation.UNKNOWN, constraint_name

    logger.debug("Postgres integrity diagnostic", extra={"pgcode": pgcode, "constraint_name": constraint_name})
    return violation, constraint_name


def _classify_from_generic_message(msg: str) -> ConstraintViolation:
    normalized = (msg or "").lower()

    for violation, keywords in MESSAGE_KEYWORDS:
        if any(keyword in normalized for keyword in keywords):
            return violation

    logger.warning("Unknown integrity error message encountered", extra={"message_snippet": (msg or "")[:200]})
    return ConstraintViolation.UNKNOWN


def classify_integrity_error(exc: IntegrityError) -> tuple[ConstraintViolation, str | None]:
    """
    Classify a SQLAlchemy IntegrityError.

    Returns:
        (ConstraintViolation, constraint name when the driver reports one)
    """
    orig = exc.orig

    violation, constraint_name = _classify_from_postgres_diag(orig)
    if violation is not None:
        return violation, constraint_name

    return _classify_from_generic_message(str(orig) if orig is not None else str(exc)), None
