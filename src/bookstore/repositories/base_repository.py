"""
Base repository providing the statement plumbing shared by repositories.

Every repository operation here is a single parameterized statement. The base
class wraps the execution with the central SQLAlchemy -> BookError mapping
(`db_error_handler`), structured start/success logging with a duration, and
the tolerant row-to-entity conversion used for multi-row reads.

Committing is not the repository's job: write handlers commit through
`commit_session` and the request-scoped session rolls back on error.
"""
import time
import logging
from typing import Any, Generic, Iterable, Type, TypeVar

from pydantic import BaseModel, ValidationError
from sqlalchemy.engine import Result
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Executable

from bookstore.exceptions.mapper import db_error_handler

# Type variable for the entity class rows are converted into
EntityType = TypeVar("EntityType", bound=BaseModel)

logger = logging.getLogger(__name__)


class BaseRepository(Generic[EntityType]):
    """
    Generic base repository.

    Type Parameters:
        EntityType: the pydantic entity rows are converted into.
    """

    def __init__(self, entity: Type[EntityType], db: AsyncSession):
        """
        Args:
            entity: the entity class (not an instance), e.g. Book.
            db: the async session injected by the request dependency.
        """
        self.entity = entity
        self.db = db

    @property
    def dialect_name(self) -> str:
        return self.db.get_bind().dialect.name

    # =================================================================================================================
    # Statement execution
    # =================================================================================================================

    async def _execute(self, operation: str, statement: Executable, **context: Any) -> Result:
        """
        Execute one statement inside `db_error_handler`.

        Logging:
        - DEBUG: start event with the operation name and context.
        - DEBUG: done event with duration_ms.
        Driver errors surface as BookError (COULD_NOT_QUERY, ALREADY_EXISTS, ...).
        """
        logger.debug(
            f"repo.{operation}.start",
            extra={"entity": self.entity.__name__, "operation": operation, **context},
        )
        start = time.perf_counter()

        async with db_error_handler(self.db, operation):
            result = await self.db.execute(statement)

        logger.debug(
            f"repo.{operation}.executed",
            extra={
                "entity": self.entity.__name__,
                "operation": operation,
                "duration_ms": int((time.perf_counter() - start) * 1000),
            },
        )
        return result

    # =================================================================================================================
    # Row conversion
    # =================================================================================================================

    def _to_entity(self, row: Any) -> EntityType:
        return self.entity.model_validate(dict(row))

    def _to_entities(self, operation: str, rows: Iterable[Any]) -> list[EntityType]:
        """Convert rows, skipping (and logging) the ones that don't fit the entity."""
        entities: list[EntityType] = []
        for row in rows:
            try:
                entities.append(self._to_entity(row))
            except ValidationError as exc:
                logger.warning(
                    f"repo.{operation}.row_skipped",
                    extra={
                        "entity": self.entity.__name__,
                        "operation": operation,
                        "row_id": dict(row).get("id"),
                        "errors": exc.error_count(),
                    },
                )
        return entities

    def _log_success(self, operation: str, start: float, **context: Any) -> None:
        logger.info(
            f"repo.{operation}.success",
            extra={
                "entity": self.entity.__name__,
                "operation": operation,
                "duration_ms": int((time.perf_counter() - start) * 1000),
                **context,
            },
        )

    def _log_not_found(self, operation: str, **context: Any) -> None:
        # INFO: expected client-level outcome, no stack trace
        logger.info(
            f"repo.{operation}.not_found",
            extra={"entity": self.entity.__name__, "operation": operation, **context},
        )
