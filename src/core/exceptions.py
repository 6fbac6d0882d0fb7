"""Custom exceptions and error codes."""

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Standardized error codes for the API."""

    # Authentication errors (401)
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_TOKEN = "INVALID_TOKEN"

    # Authorization errors (403)
    INSUFFICIENT_PERMISSIONS = "INSUFFICIENT_PERMISSIONS"

    # Not found errors (404)
    TODO_NOT_FOUND = "TODO_NOT_FOUND"
    FOLDER_NOT_FOUND = "FOLDER_NOT_FOUND"

    # Validation errors (400)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_SHARE_TARGET = "INVALID_SHARE_TARGET"

    # Rate limiting (429)
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"

    # Server errors (5xx)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Any | None = None,
    ) -> None:
        self.error_code = error_code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class AuthenticationError(AppException):
    """Authentication failed."""

    def __init__(
        self,
        message: str = "Authentication required",
        error_code: ErrorCode = ErrorCode.UNAUTHORIZED,
    ) -> None:
        super().__init__(
            error_code=error_code,
            message=message,
            status_code=401,
        )


class TodoNotFoundError(AppException):
    """Todo not found or not visible to the caller."""

    def __init__(self, todo_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.TODO_NOT_FOUND,
            message=f"Todo not found: {todo_id}",
            status_code=404,
            details={"todo_id": todo_id},
        )


class FolderNotFoundError(AppException):
    """Folder not found or not visible to the caller."""

    def __init__(self, folder_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.FOLDER_NOT_FOUND,
            message=f"Folder not found: {folder_id}",
            status_code=404,
            details={"folder_id": folder_id},
        )


class InsufficientPermissionsError(AppException):
    """User does not have sufficient permissions."""

    def __init__(self, required: str = "edit") -> None:
        super().__init__(
            error_code=ErrorCode.INSUFFICIENT_PERMISSIONS,
            message=f"Insufficient permissions. Required: {required}",
            status_code=403,
            details={"required": required},
        )


class InvalidShareTargetError(AppException):
    """A folder cannot be shared with this user."""

    def __init__(self, user_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.INVALID_SHARE_TARGET,
            message="A folder cannot be shared with its owner",
            status_code=400,
            details={"user_id": user_id},
        )


class BlankFieldError(AppException):
    """A required text field is empty or only whitespace."""

    def __init__(self, field: str) -> None:
        super().__init__(
            error_code=ErrorCode.VALIDATION_ERROR,
            message=f"{field} must not be blank",
            status_code=422,
            details={"field": field},
        )


class BackendUnavailableError(AppException):
    """The database rejected or failed a read or write."""

    def __init__(self, operation: str) -> None:
        super().__init__(
            error_code=ErrorCode.DATABASE_ERROR,
            message=f"Database error during {operation}",
            status_code=503,
            details={"operation": operation},
        )
