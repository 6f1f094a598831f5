"""Global exception handlers that map domain exceptions to HTTP responses."""

import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from qadesk.errors import (
    INTERNAL_ERROR,
    INVALID_TOKEN,
    TOKEN_ALREADY_USED,
    TOKEN_EXPIRED,
    TOKEN_NOT_FOUND,
    USER_NOT_FOUND,
    VALIDATION_ERROR,
    WEAK_PASSWORD,
    DomainValidationError,
    DuplicateResourceError,
    ForbiddenError,
    InvalidCredentialsError,
    NotFoundError,
    PasswordResetError,
    UnauthorizedError,
)
from qadesk.schemas.error import ErrorDetail, ErrorResponse

logger = logging.getLogger(__name__)

PASSWORD_RESET_STATUS = {
    TOKEN_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    USER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    TOKEN_EXPIRED: status.HTTP_400_BAD_REQUEST,
    TOKEN_ALREADY_USED: status.HTTP_400_BAD_REQUEST,
    WEAK_PASSWORD: status.HTTP_400_BAD_REQUEST,
    INVALID_TOKEN: status.HTTP_400_BAD_REQUEST,
    VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
}


def _error_response(status_code: int, message: str, code: str, **extra) -> JSONResponse:
    """Return a standardized error response with message and machine-readable code."""
    body = ErrorResponse(error=ErrorDetail(code=code, message=message))
    return JSONResponse(status_code=status_code, content={**extra, **body.model_dump()})


def domain_validation_error_handler(
    _request: Request, exc: DomainValidationError
) -> JSONResponse:
    return _error_response(status.HTTP_400_BAD_REQUEST, str(exc), exc.code)


def duplicate_resource_error_handler(
    _request: Request, exc: DuplicateResourceError
) -> JSONResponse:
    return _error_response(status.HTTP_409_CONFLICT, str(exc), exc.code)


def not_found_error_handler(_request: Request, exc: NotFoundError) -> JSONResponse:
    return _error_response(status.HTTP_404_NOT_FOUND, str(exc), exc.code)


def forbidden_error_handler(_request: Request, exc: ForbiddenError) -> JSONResponse:
    return _error_response(status.HTTP_403_FORBIDDEN, str(exc), exc.code)


def unauthorized_error_handler(_request: Request, exc: UnauthorizedError) -> JSONResponse:
    return _error_response(status.HTTP_401_UNAUTHORIZED, str(exc), exc.code)


def invalid_credentials_error_handler(
    _request: Request, exc: InvalidCredentialsError
) -> JSONResponse:
    return _error_response(status.HTTP_401_UNAUTHORIZED, str(exc), exc.code, success=False)


def password_reset_error_handler(_request: Request, exc: PasswordResetError) -> JSONResponse:
    status_code = PASSWORD_RESET_STATUS.get(exc.code, status.HTTP_500_INTERNAL_SERVER_ERROR)
    if status_code == status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("Unexpected password reset error code %s: %s", exc.code, exc)
        return _error_response(status_code, "Internal server error", INTERNAL_ERROR)
    return _error_response(status_code, str(exc), exc.code)


def request_validation_error_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    if any(error.get("type") == "json_invalid" for error in errors):
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Invalid JSON in request body",
            INTERNAL_ERROR,
        )

    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query"))
    message = first.get("msg", "Invalid request")
    if field:
        message = f"{field}: {message}"
    return _error_response(status.HTTP_400_BAD_REQUEST, message, VALIDATION_ERROR)


def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal server error",
        INTERNAL_ERROR,
    )


def register_exception_handlers(app):
    """Register domain exception handlers on the FastAPI app."""
    app.add_exception_handler(DomainValidationError, domain_validation_error_handler)
    app.add_exception_handler(DuplicateResourceError, duplicate_resource_error_handler)
    app.add_exception_handler(ForbiddenError, forbidden_error_handler)
    app.add_exception_handler(NotFoundError, not_found_error_handler)
    app.add_exception_handler(InvalidCredentialsError, invalid_credentials_error_handler)
    app.add_exception_handler(UnauthorizedError, unauthorized_error_handler)
    app.add_exception_handler(PasswordResetError, password_reset_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
