"""Custom domain exceptions for the application."""

# Stable, machine-readable error codes for API consumers.
VALIDATION_ERROR = "VALIDATION_ERROR"
UNAUTHORIZED = "UNAUTHORIZED"
FORBIDDEN = "FORBIDDEN"
NOT_FOUND = "NOT_FOUND"
DUPLICATE_RESOURCE = "DUPLICATE_RESOURCE"
INTERNAL_ERROR = "INTERNAL_ERROR"
INVALID_CREDENTIALS = "INVALID_CREDENTIALS"

# Password reset outcomes
USER_NOT_FOUND = "USER_NOT_FOUND"
TOKEN_NOT_FOUND = "TOKEN_NOT_FOUND"
INVALID_TOKEN = "INVALID_TOKEN"
TOKEN_EXPIRED = "TOKEN_EXPIRED"
TOKEN_ALREADY_USED = "TOKEN_ALREADY_USED"
WEAK_PASSWORD = "WEAK_PASSWORD"


class DomainError(Exception):
    """Base exception for domain/business logic errors."""

    code = INTERNAL_ERROR


class NotFoundError(DomainError):
    """Raised when a requested resource does not exist."""

    code = NOT_FOUND


class DuplicateResourceError(DomainError):
    """Raised when attempting to create or update a resource that would violate a uniqueness constraint."""

    code = DUPLICATE_RESOURCE


class DomainValidationError(DomainError):
    """Raised when business rules or domain validation fail (e.g. blank title, unknown group)."""

    code = VALIDATION_ERROR


class UnauthorizedError(DomainError):
    """Raised when a request carries no session or an invalid one."""

    code = UNAUTHORIZED


class InvalidCredentialsError(UnauthorizedError):
    """Raised on a failed login. The message never says which credential was wrong."""

    code = INVALID_CREDENTIALS


class ForbiddenError(DomainError):
    """Raised when an authenticated user lacks the role or group membership required."""

    code = FORBIDDEN


class PasswordResetError(DomainError):
    """
    Raised by the password reset lifecycle.

    ``code`` is one of USER_NOT_FOUND, TOKEN_NOT_FOUND, INVALID_TOKEN,
    TOKEN_EXPIRED, TOKEN_ALREADY_USED or WEAK_PASSWORD.
    """

    def __init__(self, code: str, message: str | None = None):
        super().__init__(message or code)
        self.code = code
