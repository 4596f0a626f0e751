# Overview: Domain error taxonomy shared by services and routes.

"""
Every failure a service can raise derives from RetailPosError and carries the
HTTP status the route layer answers with. Routes catch these at the operation
boundary; anything that escapes is converted by the app-level error handler.
"""


class RetailPosError(Exception):
    """Base class for expected, user-visible failures."""
    status_code = 500
    default_message = "Request failed"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class ValidationError(RetailPosError, ValueError):
    """400-level input problem."""
    status_code = 400
    default_message = "Invalid input"


class DuplicateUsername(RetailPosError):
    status_code = 400
    default_message = "Username already exists"


class InvalidCredentials(RetailPosError):
    status_code = 401
    default_message = "Invalid username or password"


class InvalidToken(RetailPosError):
    status_code = 401
    default_message = "Invalid or expired token"


class Forbidden(RetailPosError):
    status_code = 403
    default_message = "Permission denied"


class NotFound(RetailPosError):
    status_code = 404
    default_message = "Not found"


class InsufficientStock(RetailPosError):
    status_code = 400
    default_message = "Insufficient stock"


class StorageWriteFailed(RetailPosError):
    status_code = 502
    default_message = "Could not store file"


class PersistenceError(RetailPosError):
    status_code = 500
    default_message = "Database error"


class UnsupportedImageFormat(StorageWriteFailed):
    """Upload rejected by the backend's format allow-list."""
    status_code = 400
    default_message = "Image format not allowed"
