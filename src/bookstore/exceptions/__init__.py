# bookstore/
# │
# ├── exceptions/
# │   ├── __init__.py
# │   ├── base.py                    # BookError, ErrorKind, FieldError, message/status tables
# │   ├── integrity_classifier.py    # SQL-level / DB-specific constraint labels
# │   ├── mapper.py                  # Map SQL-level errors to BookError
# │   └── translator.py              # pydantic ValidationError -> FieldError list

from .base import BookError, ErrorKind, FieldError, KIND_TO_STATUS, MESSAGES
from .mapper import db_error_handler
from .translator import translate_validation_error

__all__ = [
    "BookError",
    "ErrorKind",
    "FieldError",
    "KIND_TO_STATUS",
    "MESSAGES",
    "db_error_handler",
    "translate_validation_error",
]
