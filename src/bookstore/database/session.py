import logging

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    create_async_engine,
    async_sessionmaker,
    AsyncSession,
)

from bookstore.config import Settings
from bookstore.database.base import Base

logger = logging.getLogger(__name__)


def create_engine_from_settings(settings: Settings) -> AsyncEngine:
    """
    Create the AsyncEngine for `settings.DATABASE_URL`.

    Pool sizing maps the connection limits onto SQLAlchemy's QueuePool:
        DB_MAX_IDLE_CONNECTIONS              -> pool_size
        DB_MAX_OPEN_CONNECTIONS - idle       -> max_overflow
        DB_MAX_CONN_IDLE_TIME (seconds)      -> pool_recycle

    SQLite (tests) does not use a QueuePool, so the pool arguments are skipped.
    """
    url = make_url(settings.DATABASE_URL)
    kwargs: dict = {"echo": settings.SQLALCHEMY_ECHO}

    if url.get_backend_name() != "sqlite":
        kwargs.update(
            pool_size=settings.DB_MAX_IDLE_CONNECTIONS,
            max_overflow=settings.DB_MAX_OPEN_CONNECTIONS - settings.DB_MAX_IDLE_CONNECTIONS,
            pool_recycle=settings.DB_MAX_CONN_IDLE_TIME,
            pool_pre_ping=True,  # Enables connection health checks
        )

    engine = create_async_engine(url, **kwargs)
    logger.info(
        "db.engine.created",
        extra={"backend": url.get_backend_name(), "host": url.host, "database": url.database},
    )
    return engine


def make_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False keeps loaded attributes usable after the request commits
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def init_db(engine: AsyncEngine) -> None:
    """Create the `bookstore` table when it does not exist yet."""
    # Registers BookRecord on Base.metadata
    import bookstore.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("db.schema.ready", extra={"tables": sorted(Base.metadata.tables)})
