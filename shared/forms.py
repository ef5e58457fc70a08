"""
Client-side form validation.

Forms are Pydantic models whose validators raise ValueError with the exact
message a user should see. validate_form() runs a form and converts any
failure into a ValidationError keyed by field, before any network call.
"""

from decimal import Decimal
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError as PydanticValidationError, validate_email
from pydantic_core import PydanticCustomError

from .exceptions import ValidationError

F = TypeVar("F", bound=BaseModel)
N = TypeVar("N", int, float, Decimal)

_VALUE_ERROR_PREFIX = "Value error, "


def validate_form(form: type[F], data: dict[str, Any]) -> F:
    """
    Validate ``data`` against ``form``.

    Raises:
        ValidationError: With ``details["fields"]`` mapping field -> message.
                         The exception message is the first field message.
    """
    try:
        return form.model_validate(data)
    except PydanticValidationError as e:
        fields: dict[str, str] = {}
        for err in e.errors():
            name = ".".join(str(part) for part in err["loc"]) or "form"
            message = err["msg"]
            if message.startswith(_VALUE_ERROR_PREFIX):
                message = message[len(_VALUE_ERROR_PREFIX):]
            fields.setdefault(name, message)
        first = next(iter(fields.values()), "Invalid input")
        raise ValidationError(first, code="INVALID_INPUT", details={"fields": fields})


def check_email(value: str) -> str:
    """Validator body for email fields."""
    try:
        _, email = validate_email(value)
    except PydanticCustomError:
        raise ValueError("Invalid email address")
    return email


def check_min_length(value: str, length: int, message: str) -> str:
    if len(value) < length:
        raise ValueError(message)
    return value


def check_min_amount(value: N, minimum: float, message: str) -> N:
    if value < minimum:
        raise ValueError(message)
    return value
