from pydantic_settings import BaseSettings
from pydantic import ConfigDict, field_validator
from pathlib import Path
from typing import Literal
from functools import lru_cache
from ..validators.config_validators import to_uppercase, to_lowercase, split_csv

class Settings(BaseSettings):
    """
    Application settings loaded from environment.
    """

    # Environment
    ENV: Literal["development", "testing", "staging", "production"] = "development"

    # Database configuration
    POSTGRES_DRIVER: str = "psycopg"
    POSTGRES_USERNAME: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "bookstore"

    # Full SQLAlchemy URL; when set it wins over the POSTGRES_* parts
    DATABASE_URI: str | None = None

    # Connection pool
    DB_MAX_IDLE_CONNECTIONS: int = 5
    DB_MAX_OPEN_CONNECTIONS: int = 10
    DB_MAX_CONN_IDLE_TIME: int = 300  # seconds

    # SQLAlchemy
    SQLALCHEMY_ECHO: bool = False

    # HTTP server
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 8080
    CORS_ORIGINS: str = "*"

    # Logging
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    LOG_FORMAT: Literal["json", "text"] = "json"
    LOG_TO_STDOUT: bool = True
    LOG_DIR: Path = Path("/var/log/bookstore")
    LOG_MAX_BYTES: int = 10_000_000  # 10 MB
    LOG_BACKUP_COUNT: int = 5
    ENABLE_SQL_LOGGING: bool = False

    # --- Derived settings ---
    @property
    def DATABASE_URL(self) -> str:
        """
        Return the database URL the engine should connect to.

        `DATABASE_URI` is used verbatim when provided (tests point it at a
        throwaway SQLite file); otherwise the URL is assembled from the
        POSTGRES_* parts.
        """
        if self.DATABASE_URI:
            return self.DATABASE_URI

        return (
            f"postgresql+{self.POSTGRES_DRIVER}://"
            f"{self.POSTGRES_USERNAME}:{self.POSTGRES_PASSWORD}@"
            f"{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/"
            f"{self.POSTGRES_DB}"
        )

    @property
    def allow_origins(self) -> list[str]:
        return split_csv(self.CORS_ORIGINS)

    # --- Validators ---
    @field_validator("LOG_LEVEL", mode="before")
    def normalize_log_level(cls, v: str | None) -> str | None:
        """
        Normalize LOG_LEVEL to uppercase before Literal validation runs, so
        `LOG_LEVEL=debug` in the environment is accepted.
        """
        return to_uppercase(v)

    @field_validator("LOG_FORMAT", mode="before")
    def normalize_log_format(cls, v: str | None) -> str | None:
        return to_lowercase(v)

    @field_validator("DB_MAX_OPEN_CONNECTIONS")
    def open_connections_cover_idle(cls, v: int, info) -> int:
        idle = info.data.get("DB_MAX_IDLE_CONNECTIONS")
        if idle is not None and v < idle:
            raise ValueError("DB_MAX_OPEN_CONNECTIONS must be >= DB_MAX_IDLE_CONNECTIONS")
        return v

    model_config = ConfigDict(
        env_file=str(Path(__file__).parent.parent / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

# Settings come from the environment only, so one cached instance per process is enough.
@lru_cache()
def get_settings() -> Settings:
    return Settings()
