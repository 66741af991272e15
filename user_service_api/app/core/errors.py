"""
Error taxonomy for the user service.

Every failure the service reports to callers carries an ``ErrorKind``.
The API layer maps the kind to an HTTP status code, so dispatch never
depends on message text.
"""

from enum import Enum


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    DUPLICATE_EMAIL = "duplicate_email"
    VALIDATION = "validation"


class UserServiceError(Exception):
    """Base class for recoverable user service failures."""

    kind: ErrorKind = ErrorKind.VALIDATION

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UserNotFoundError(UserServiceError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, user_id: int) -> None:
        super().__init__(f"User not found with id: {user_id}")
        self.user_id = user_id


class DuplicateEmailError(UserServiceError):
    kind = ErrorKind.DUPLICATE_EMAIL

    def __init__(self, email: str) -> None:
        super().__init__(f"Email already exists: {email}")
        self.email = email
