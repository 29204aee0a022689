"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
Request models only enforce presence and type; content rules live in the
domain validation pipeline so every violation is reported together.
"""

from pydantic import BaseModel

from src.domain.ports import CredentialState, UserRecord


class RegisterRequest(BaseModel):
    """Request model for user registration."""

    username: str
    email: str
    password: str
    confirm_password: str


class LoginRequest(BaseModel):
    """Request model for login."""

    username: str
    password: str


class UserResponse(BaseModel):
    """Public view of a stored user. Never carries the credential."""

    id: int
    username: str
    email: str
    team_id: int | None = None
    group_id: int | None = None

    @classmethod
    def from_record(cls, user: UserRecord) -> "UserResponse":
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            team_id=user.team_id,
            group_id=user.group_id,
        )


class RegisterResponse(BaseModel):
    """Response model for successful registration."""

    message: str
    user: UserResponse


class LoginResponse(BaseModel):
    """Response model for successful login."""

    user: UserResponse
    credential_state: CredentialState


class ViolationModel(BaseModel):
    """A single validation violation."""

    field: str
    rule: str
    message: str


class ErrorResponse(BaseModel):
    """Standard error response model."""

    kind: str
    detail: str
    violations: list[ViolationModel] | None = None
