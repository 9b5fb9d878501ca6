"""
core/errors.py -- Application error taxonomy.

Services and auth dependencies raise these; api/main.py owns the single
exception handler that turns an AppError into the JSON error envelope
{"message": ..., "code": ...} with the class's status code.
"""

from __future__ import annotations


class AppError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = 500
    code: str = "internal_error"
    message: str = "Internal Server Error"

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class Unauthenticated(AppError):
    status_code = 401
    code = "unauthenticated"
    message = "Unauthorized!"


class InvalidCredentials(AppError):
    """Raised for unknown usernames and wrong passwords alike."""

    status_code = 400
    code = "invalid_credentials"
    message = "Invalid username or password."


class DuplicateUser(AppError):
    status_code = 400
    code = "duplicate_user"
    message = "Failed! Username or email is already in use!"


class InvalidRole(AppError):
    status_code = 400
    code = "invalid_role"
    message = "Failed! Role does not exist!"


class Forbidden(AppError):
    status_code = 403
    code = "forbidden"
    message = "Insufficient role."


class NotFound(AppError):
    status_code = 404
    code = "not_found"
    message = "Not Found"


class Internal(AppError):
    """Server-side failure. The message is replaced by a fixed one in production."""


class BadRequest(AppError):
    status_code = 400
    code = "bad_request"
    message = "Bad Request"
