r"""
Centralized access to the database models.

Importing this package registers every ORM table with `Base.metadata`, which
`init_db()` and the test fixtures rely on before calling `create_all`.

    from bookstore.models import BookRecord
"""

from .book import BookRecord, BOOK_ID_SEQUENCE, MAX_BOOK_ID

__all__ = [
    "BookRecord",
    "BOOK_ID_SEQUENCE",
    "MAX_BOOK_ID",
]
