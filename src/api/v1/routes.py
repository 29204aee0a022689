"""
API v1 routes.

Defines REST endpoints for registration and login. Service calls run
in the threadpool: Argon2 is CPU and memory bound and must not block
the event loop. Domain errors propagate to the handlers in src.api.errors.
"""

from fastapi import APIRouter, Depends, status
from fastapi.concurrency import run_in_threadpool

from src.api.dependencies import get_registration_service
from src.api.models import (
    ErrorResponse,
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
    UserResponse,
)
from src.domain.registration import RegistrationService

router = APIRouter(tags=["v1"])


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        409: {"model": ErrorResponse, "description": "Username or email already registered"},
        422: {"model": ErrorResponse, "description": "Validation error"},
        500: {"model": ErrorResponse, "description": "Storage unavailable"},
    },
    summary="Register a new user",
    description="Submit username, email and a confirmed password. "
    "The password is stored as an Argon2id hash.",
)
async def register(
    request_data: RegisterRequest,
    service: RegistrationService = Depends(get_registration_service),
) -> RegisterResponse:
    """
    Register a new user.

    - **username**: 3 to 30 characters
    - **email**: Valid email address, at most 50 characters
    - **password**: 6+ characters with an uppercase letter, a lowercase letter and a digit
    - **confirm_password**: Must equal password
    """
    user = await run_in_threadpool(
        service.register,
        request_data.username,
        request_data.email,
        request_data.password,
        request_data.confirm_password,
    )
    return RegisterResponse(message="Registration successful", user=UserResponse.from_record(user))


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Invalid username or password"},
        422: {"model": ErrorResponse, "description": "Validation error"},
    },
    summary="Verify a username and password",
    description="Check credentials and return the stored identity. "
    "Unknown usernames and wrong passwords are indistinguishable.",
)
async def login(
    request_data: LoginRequest,
    service: RegistrationService = Depends(get_registration_service),
) -> LoginResponse:
    """
    Verify credentials.

    - **username**: Registered username
    - **password**: Plaintext password
    """
    result = await run_in_threadpool(service.login, request_data.username, request_data.password)
    return LoginResponse(
        user=UserResponse.from_record(result.user),
        credential_state=result.credential_state,
    )
