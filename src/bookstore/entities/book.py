"""Entity: Book."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Book(BaseModel):
    """Book value object exchanged with clients and returned by the repository.

    Every field is optional at the type level so that a payload missing
    `title` decodes cleanly and is then rejected by `BookValidator` with a
    field error, instead of failing inside pydantic with a generic message.
    An `id` of 0 means the book has not been persisted yet.
    """

    # Strict: `"year": "1965"` or `"year": true` is a type error, not a coercion
    model_config = ConfigDict(strict=True, extra="ignore")

    id: int = Field(default=0, description="Surrogate key assigned by the store")
    title: str | None = None
    author: str | None = None
    year: int | None = None
    description: str | None = None

    def equal(self, other: Any) -> bool:
        """True when every field, id included, matches."""
        return isinstance(other, Book) and self == other

    def equal_no_id(self, other: Any) -> bool:
        """Like `equal`, but ignores `id` (pre-persist vs. persisted copies)."""
        if not isinstance(other, Book):
            return False
        return self.model_dump(exclude={"id"}) == other.model_dump(exclude={"id"})

    def with_id(self, book_id: int) -> "Book":
        """Return a copy carrying `book_id`; the receiver is left untouched."""
        return self.model_copy(update={"id": book_id})
