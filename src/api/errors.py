"""
Error handlers - Maps the domain error taxonomy onto HTTP responses.

Invariants:
    - Only the error kind and a fixed message reach the client
    - VALIDATION_FAILED carries the full violation list
    - Unknown username and wrong password produce identical responses
    - Request schema errors reuse the VALIDATION_FAILED shape
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.api.models import ErrorResponse, ViolationModel
from src.domain.exceptions import CredentialError, ErrorKind, ValidationFailed

logger = logging.getLogger(__name__)

_INVALID_LOGIN = (status.HTTP_401_UNAUTHORIZED, ErrorKind.INVALID_CREDENTIAL, "Invalid username or password")

# kind -> (status, outward kind, fixed message)
ERROR_RESPONSES: dict[ErrorKind, tuple[int, ErrorKind, str]] = {
    ErrorKind.VALIDATION_FAILED: (
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        ErrorKind.VALIDATION_FAILED,
        "Validation failed",
    ),
    ErrorKind.CREDENTIAL_NOT_FOUND: _INVALID_LOGIN,
    ErrorKind.INVALID_CREDENTIAL: _INVALID_LOGIN,
    ErrorKind.MALFORMED_CREDENTIAL: _INVALID_LOGIN,
    ErrorKind.HASHING_FAILURE: (
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        ErrorKind.HASHING_FAILURE,
        "Credential could not be processed",
    ),
    ErrorKind.STORAGE_FAILURE: (
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        ErrorKind.STORAGE_FAILURE,
        "Storage unavailable",
    ),
    ErrorKind.IDENTITY_CONFLICT: (
        status.HTTP_409_CONFLICT,
        ErrorKind.IDENTITY_CONFLICT,
        "Username or email already registered",
    ),
}


def error_response(exc: CredentialError) -> JSONResponse:
    """Build the outward response for a classified domain error."""
    status_code, kind, message = ERROR_RESPONSES[exc.kind]
    violations = None
    if isinstance(exc, ValidationFailed):
        violations = [
            ViolationModel(field=v.field, rule=v.rule, message=v.message) for v in exc.violations
        ]
    body = ErrorResponse(kind=kind.value, detail=message, violations=violations)
    return JSONResponse(status_code=status_code, content=body.model_dump())


def register_error_handlers(app: FastAPI) -> None:
    """Register domain and request-validation handlers on the app."""

    @app.exception_handler(CredentialError)
    async def credential_error_handler(request: Request, exc: CredentialError) -> JSONResponse:
        logger.info("%s on %s", exc.kind.value, request.url.path)
        return error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        violations = [
            ViolationModel(
                field=".".join(str(part) for part in error["loc"][1:]) or "body",
                rule=error["type"],
                message=error["msg"],
            )
            for error in exc.errors()
        ]
        body = ErrorResponse(
            kind=ErrorKind.VALIDATION_FAILED.value,
            detail="Validation failed",
            violations=violations,
        )
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content=body.model_dump()
        )
