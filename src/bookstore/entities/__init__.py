"""Entity package: Book."""

from .book import Book

__all__ = ["Book"]
