"""Turn pydantic decoding errors into the service's field-error shape."""

from pydantic import ValidationError

from .base import FieldError

# pydantic error type -> message template ({field} is the wire-facing name)
TYPE_MESSAGES: dict[str, str] = {
    "int_parsing": "{field} should be an integer",
    "int_type": "{field} should be an integer",
    "int_from_float": "{field} should be an integer",
    "string_type": "{field} should be a string",
    "missing": "{field} cannot be empty",
}

# Location names that don't follow the plain capitalisation rule
FIELD_NAMES: dict[str, str] = {"id": "ID"}


def field_name(loc: str) -> str:
    return FIELD_NAMES.get(loc, loc[:1].upper() + loc[1:])


def translate_validation_error(exc: ValidationError) -> list[FieldError]:
    """
    Map each pydantic error to a FieldError.

    `{"year": "abc"}` becomes FieldError("Year", "Year should be an integer").
    Unknown error types fall back to pydantic's own message.
    """
    fields: list[FieldError] = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ())) or "body"
        name = field_name(loc)
        template = TYPE_MESSAGES.get(err.get("type", ""))
        msg = template.format(field=name) if template else f"{name}: {err.get('msg', 'invalid value')}"
        fields.append(FieldError(name, msg))
    return fields
