"""Custom exception classes for consistent error handling across the application."""

from dataclasses import dataclass, field

# Shared type alias for error detail values
type ErrorDetails = dict[
    str, str | int | float | bool | list[str] | list[dict[str, str | int]] | None
]


@dataclass
class AppError(Exception):
    """Base exception for all application errors."""

    code: str = "app_error"
    message: str = "An application error occurred"
    details: ErrorDetails = field(default_factory=dict)

    def __str__(self) -> str:  # pyright: ignore[reportImplicitOverride]
        return self.message


@dataclass
class NotFoundError(AppError):
    """Raised when a requested resource is not found."""

    code: str = "not_found"
    message: str = "Resource not found"


@dataclass
class ValidationError(AppError):
    """Raised when domain validation fails."""

    code: str = "validation_error"
    message: str = "Validation failed"


@dataclass
class PermissionDeniedError(AppError):
    """Raised when the caller may not read or write the addressed board."""

    code: str = "permission_denied"
    message: str = "Permission denied"


@dataclass
class ConflictError(AppError):
    """Raised when an operation conflicts with existing state."""

    code: str = "conflict"
    message: str = "Resource conflict"


@dataclass
class ExternalServiceError(AppError):
    """Raised when an upstream service (commentary model) fails."""

    code: str = "external_service_error"
    message: str = "Upstream service failed"


@dataclass
class RateLimitError(ExternalServiceError):
    """Raised when every upstream model stayed rate limited after retries."""

    code: str = "rate_limited"
    message: str = "All commentary models are rate limited, try again later"
