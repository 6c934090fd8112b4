"""Custom exception classes."""

from typing import Any, Optional


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[dict[str, Any]] = None,
        status_code: int = 400,
    ):
        self.code = code
        self.message = message
        self.details = details or {}
        self.status_code = status_code
        super().__init__(message)


# ========== Auth Exceptions ==========
class AuthenticationError(AppException):
    """Authentication failed."""

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(
            code="AUTHENTICATION_ERROR",
            message=message,
            status_code=401,
        )


class AuthenticationRequiredError(AuthenticationError):
    """A mutating action was attempted without a resolvable viewer."""

    def __init__(self):
        super().__init__(message="Sign in to continue")


class InvalidCredentialsError(AuthenticationError):
    """Invalid credentials provided."""

    def __init__(self):
        super().__init__(message="Invalid email or password")


class InvalidTokenError(AuthenticationError):
    """Invalid or expired JWT token."""

    def __init__(self):
        super().__init__(message="Invalid token")


# ========== Authorization Exceptions ==========
class OwnershipViolationError(AppException):
    """Caller is authenticated but does not own the resource."""

    def __init__(self, resource: str, identifier: Any):
        super().__init__(
            code="OWNERSHIP_VIOLATION",
            message=f"You do not own this {resource.lower()}",
            details={"resource": resource, "id": str(identifier)},
            status_code=403,
        )


# ========== Resource Exceptions ==========
class ResourceNotFoundError(AppException):
    """Resource not found."""

    def __init__(self, resource: str, identifier: Any):
        super().__init__(
            code="RESOURCE_NOT_FOUND",
            message=f"{resource} with id '{identifier}' not found",
            status_code=404,
        )


class ProjectNotFoundError(ResourceNotFoundError):
    """Project absent, or present but hidden from the caller."""

    def __init__(self, project_id: Any):
        super().__init__(resource="Project", identifier=project_id)


class ProfileNotFoundError(ResourceNotFoundError):
    """Profile not found."""

    def __init__(self, identifier: Any):
        super().__init__(resource="Profile", identifier=identifier)


# ========== Validation Exceptions ==========
class ValidationError(AppException):
    """Validation failed."""

    def __init__(self, field: str, message: str):
        super().__init__(
            code="VALIDATION_ERROR",
            message=f"Validation failed for field '{field}': {message}",
            details={"field": field, "error": message},
            status_code=422,
        )


class DuplicateResourceError(AppException):
    """Resource already exists."""

    def __init__(self, resource: str, field: str, value: Any):
        super().__init__(
            code="DUPLICATE_RESOURCE",
            message=f"{resource} with {field} '{value}' already exists",
            details={"resource": resource, "field": field, "value": value},
            status_code=409,
        )


# ========== Storage Exceptions ==========
class TransientStorageError(AppException):
    """The store failed or timed out; the caller should re-fetch before retrying."""

    def __init__(self, operation: str, details: Optional[str] = None):
        message = f"Storage {operation} failed"
        if details:
            message += f": {details}"
        super().__init__(
            code="TRANSIENT_STORAGE_ERROR",
            message=message,
            details={"operation": operation, "retryable": True},
            status_code=503,
        )
