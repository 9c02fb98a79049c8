from .book_validators import BookValidator, build_book_validator

__all__ = ["BookValidator", "build_book_validator"]
