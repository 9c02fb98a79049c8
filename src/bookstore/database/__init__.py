from .base import Base
from .session import create_engine_from_settings, make_session_factory, init_db

__all__ = ["Base", "create_engine_from_settings", "make_session_factory", "init_db"]
