"""
Book payload validation.

The validator is a plain table of rules built once at startup by
`build_book_validator()` and handed to the handlers and the repository.
Each rule looks at one Book and returns a FieldError or None; every rule
runs, so a payload missing both title and author reports both.
"""

import datetime
from dataclasses import dataclass, field
from typing import Callable

from bookstore.entities import Book
from bookstore.exceptions.base import FieldError

MIN_YEAR = -868

FIELD_TITLE = "Title"
FIELD_AUTHOR = "Author"
FIELD_YEAR = "Year"
FIELD_ID = "ID"

FIELD_TITLE_EMPTY = FieldError(FIELD_TITLE, "Title cannot be empty")
FIELD_AUTHOR_EMPTY = FieldError(FIELD_AUTHOR, "Author cannot be empty")
FIELD_YEAR_EMPTY = FieldError(FIELD_YEAR, "Year cannot be empty")
FIELD_ID_INVALID = FieldError(FIELD_ID, "ID should be positive non-null number")

Rule = Callable[[Book], FieldError | None]


def field_year_invalid(current_year: int) -> FieldError:
    return FieldError(FIELD_YEAR, f"Year should be between {MIN_YEAR} and {current_year}")


def _blank(value: str | None) -> bool:
    return value is None or not value.strip()


def title_required(book: Book) -> FieldError | None:
    return FIELD_TITLE_EMPTY if _blank(book.title) else None


def author_required(book: Book) -> FieldError | None:
    return FIELD_AUTHOR_EMPTY if _blank(book.author) else None


def year_required(book: Book) -> FieldError | None:
    # 0 is a legitimate year, only absence counts as empty
    return FIELD_YEAR_EMPTY if book.year is None else None


def year_in_range(current_year: int) -> Rule:
    def rule(book: Book) -> FieldError | None:
        if book.year is None:
            return None
        if MIN_YEAR <= book.year <= current_year:
            return None
        return field_year_invalid(current_year)

    return rule


def id_positive(book: Book) -> FieldError | None:
    # id 0 is "not persisted yet" and therefore allowed
    if book.id != 0 and book.id < 1:
        return FIELD_ID_INVALID
    return None


@dataclass(frozen=True)
class BookValidator:
    rules: tuple[Rule, ...] = field(default_factory=tuple)

    def validate(self, book: Book) -> list[FieldError]:
        """Run every rule; an empty list means the book is valid."""
        return [err for err in (rule(book) for rule in self.rules) if err is not None]


def build_book_validator(current_year: int | None = None) -> BookValidator:
    """
    Build the validator used by the service.

    Args:
        current_year: upper bound for `year`; defaults to today's year. Tests
            pin it to keep assertions stable across New Year.
    """
    if current_year is None:
        current_year = datetime.date.today().year

    return BookValidator(
        rules=(
            title_required,
            author_required,
            year_required,
            year_in_range(current_year),
            id_positive,
        )
    )
