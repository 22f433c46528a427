"""Error taxonomy shared by the services and the HTTP layer.

Each error carries a stable category and HTTP status so the presentation
layer can branch on it (notably "No student details found").
"""
from fastapi import status


NO_STUDENT_DETAILS = "No student details found"
USER_NOT_FOUND = "User not found"
INVALID_CREDENTIALS = "Invalid email or password"
AUTH_REQUIRED = "Authentication required"


class AdvisorError(Exception):
    """Base class for expected, user-facing failures."""

    category = "error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AdvisorError):
    """Missing or malformed caller input."""

    category = "validation_error"
    status_code = status.HTTP_400_BAD_REQUEST


class AuthError(AdvisorError):
    """Credential mismatch or missing session."""

    category = "auth_error"
    status_code = status.HTTP_401_UNAUTHORIZED


class NotFoundError(AdvisorError):
    category = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(AdvisorError):
    """Uniqueness violation on email or phone."""

    category = "conflict"
    status_code = status.HTTP_409_CONFLICT


class StorageError(AdvisorError):
    """Reading or writing durable storage failed."""

    category = "storage_error"
