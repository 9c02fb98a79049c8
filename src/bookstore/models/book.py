from sqlalchemy import Integer, Text
from sqlalchemy.orm import Mapped, mapped_column
from bookstore.database.base import Base


class BookRecord(Base):
    """
    SQLAlchemy model for the `bookstore` table.

    This is the persistence shape only. Request/response payloads use the
    `bookstore.entities.Book` value object, and the repository converts
    between the two.
    """
    __tablename__ = "bookstore"

    # Serial primary key; PostgreSQL backs it with `bookstore_id_seq`
    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True
    )

    title: Mapped[str] = mapped_column(
        Text,
        nullable=False
    )

    author: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        index=True  # search_by_author filters on it
    )

    # Negative years are valid (works dated BCE)
    year: Mapped[int] = mapped_column(
        Integer,
        nullable=False
    )

    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True
    )

    def __repr__(self) -> str:
        return f"<BookRecord(id={self.id!r}, title={self.title!r}, author={self.author!r})>"


# Largest value the 32-bit `id` column can hold; no row can have a larger id.
MAX_BOOK_ID = 2**31 - 1

# Name of the implicit sequence PostgreSQL creates for a SERIAL `id` column.
BOOK_ID_SEQUENCE = f"{BookRecord.__tablename__}_id_seq"
