"""
Declarative base shared by every ORM table of the bookstore service.

`BookRecord` (bookstore.models.book) subclasses it; `init_db()` and the test
fixtures call `Base.metadata.create_all` to build the schema.
"""

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

# Deterministic constraint names, so PostgreSQL diagnostics (constraint_name)
# can be matched back to a column by the error mapper.
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    metadata = MetaData(naming_convention=NAMING_CONVENTION)
