"""Error taxonomy and the field-keyed error normalizer.

Every failure that reaches the request boundary is turned into a flat
``{field: message}`` map by :func:`handle_errors`.  The map always carries
``email`` and ``password`` keys; a field stays blank when nothing went wrong
with it or when the cause of the error is not recognised.
"""

import re
from typing import Mapping, Optional

from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError

INCORRECT_EMAIL = "incorrect email"
INCORRECT_PASSWORD = "incorrect password"

PASSWORD_MISMATCH = "Password doesn't match!"
INVALID_TOKEN = "Invalid or expired token"

CONFLICT_MESSAGES = {
    "email": "This email is already registered.",
    "isbn": "This ISBN is already catalogued.",
}

NOT_FOUND_MESSAGES = {
    "email": "Email not found",
    "isbn": "Book not found",
}

# (field, pydantic error type) -> message shown to the user
FIELD_MESSAGES = {
    ("name", "missing"): "Please enter a name",
    ("name", "string_too_short"): "Please enter a name",
    ("email", "missing"): "Please enter an email",
    ("email", "value_error"): "Please enter a valid email",
    ("password", "missing"): "Please enter a password",
    ("password", "string_too_short"): "Please enter a password",
    ("confirmPassword", "missing"): "Please confirm your password",
    ("resetToken", "missing"): "Reset token is required",
    ("resetToken", "string_too_short"): "Reset token is required",
    ("newPassword", "missing"): "Please enter a new password",
    ("newPassword", "string_too_short"): "Please enter a new password",
    ("body", "json_invalid"): "Request body is not valid JSON",
}

_SQLITE_UNIQUE = re.compile(r"UNIQUE constraint failed: \w+\.(\w+)")
_POSTGRES_UNIQUE = re.compile(r"Key \((\w+)\)=")


class AppError(Exception):
    status_code = 400


class ValidationError(AppError):
    def __init__(self, fields: Mapping[str, str]) -> None:
        super().__init__("validation failed: " + ", ".join(fields))
        self.fields = dict(fields)


class ConflictError(AppError):
    def __init__(self, field: Optional[str]) -> None:
        super().__init__(f"unique constraint violated on {field or 'unknown field'}")
        self.field = field


class AuthError(AppError):
    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class NotFoundError(AppError):
    def __init__(self, field: str, message: Optional[str] = None) -> None:
        self.field = field
        self.message = message or NOT_FOUND_MESSAGES.get(field, "Not found")
        super().__init__(self.message)


class InvalidTokenError(AppError):
    def __init__(self, reason: str = INVALID_TOKEN) -> None:
        super().__init__(reason)


def unique_violation_field(err: IntegrityError) -> Optional[str]:
    """Return the column named by a unique-constraint failure, if any."""
    message = str(err.orig)
    match = _SQLITE_UNIQUE.search(message) or _POSTGRES_UNIQUE.search(message)
    if match:
        return match.group(1)
    return None


def _field_from_loc(loc, error_type=None) -> str:
    # Malformed JSON reports a byte offset, not a field
    if not loc or error_type == "json_invalid" or isinstance(loc[-1], int):
        return "body"
    return str(loc[-1])


def handle_errors(err: Exception) -> dict[str, str]:
    errors = {"email": "", "password": ""}

    if isinstance(err, AuthError):
        if err.reason == INCORRECT_EMAIL:
            errors["email"] = "This email is not registered"
        if err.reason == INCORRECT_PASSWORD:
            errors["password"] = "This password is incorrect"

    if isinstance(err, ConflictError):
        if err.field in CONFLICT_MESSAGES:
            errors[err.field] = CONFLICT_MESSAGES[err.field]
        return errors

    if isinstance(err, IntegrityError):
        field = unique_violation_field(err)
        if field in CONFLICT_MESSAGES:
            errors[field] = CONFLICT_MESSAGES[field]
        return errors

    if isinstance(err, ValidationError):
        errors.update(err.fields)

    if isinstance(err, NotFoundError):
        errors[err.field] = err.message

    if isinstance(err, InvalidTokenError):
        errors["token"] = INVALID_TOKEN

    if isinstance(err, (RequestValidationError, PydanticValidationError)):
        for detail in err.errors():
            field = _field_from_loc(detail.get("loc"), detail.get("type"))
            if errors.get(field):
                continue
            errors[field] = FIELD_MESSAGES.get((field, detail.get("type")), detail.get("msg", ""))

    return errors
