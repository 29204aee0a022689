"""
Unit tests for API v1 routes.

Tests endpoint responses with mocked dependencies.
"""

from unittest.mock import MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.api.dependencies import get_registration_service
from src.api.errors import register_error_handlers
from src.api.v1.routes import router
from src.domain.exceptions import (
    HashingFailure,
    IdentityAlreadyExists,
    InvalidCredential,
    StorageFailure,
    ValidationFailed,
)
from src.domain.ports import CredentialState, LoginResult, UserRecord
from src.domain.registration import RegistrationService
from src.domain.validation import Violation
from tests.fakes import InMemoryUserRepository

ALICE = UserRecord(id=1, username="alice", email="alice@example.com", credential="$argon2id$secret")

REGISTER_BODY = {
    "username": "alice",
    "email": "alice@example.com",
    "password": "Abc123",
    "confirm_password": "Abc123",
}


@pytest.fixture
def mock_service() -> MagicMock:
    return MagicMock(spec=RegistrationService)


@pytest.fixture
def app(mock_service: MagicMock) -> FastAPI:
    """Create test FastAPI application with the service overridden."""
    test_app = FastAPI()
    register_error_handlers(test_app)
    test_app.include_router(router, prefix="/v1")
    test_app.dependency_overrides[get_registration_service] = lambda: mock_service
    return test_app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Create test client for the application."""
    return TestClient(app)


@pytest.fixture
def live_client(hasher) -> TestClient:
    """Client wired to a real service over the in-memory repository."""
    test_app = FastAPI()
    register_error_handlers(test_app)
    test_app.include_router(router, prefix="/v1")
    service = RegistrationService(repository=InMemoryUserRepository(), hasher=hasher)
    test_app.dependency_overrides[get_registration_service] = lambda: service
    return TestClient(test_app)


class TestRegisterEndpoint:
    """Tests for POST /v1/register endpoint."""

    def test_register_success_returns_201(self, client: TestClient, mock_service) -> None:
        mock_service.register.return_value = ALICE

        response = client.post("/v1/register", json=REGISTER_BODY)

        assert response.status_code == 201
        assert response.json() == {
            "message": "Registration successful",
            "user": {
                "id": 1,
                "username": "alice",
                "email": "alice@example.com",
                "team_id": None,
                "group_id": None,
            },
        }
        mock_service.register.assert_called_once_with("alice", "alice@example.com", "Abc123", "Abc123")

    def test_register_never_returns_credential(self, client: TestClient, mock_service) -> None:
        mock_service.register.return_value = ALICE

        response = client.post("/v1/register", json=REGISTER_BODY)

        assert "argon2" not in response.text
        assert "Abc123" not in response.text

    def test_register_duplicate_returns_409(self, client: TestClient, mock_service) -> None:
        mock_service.register.side_effect = IdentityAlreadyExists("alice")

        response = client.post("/v1/register", json=REGISTER_BODY)

        assert response.status_code == 409
        assert response.json() == {
            "kind": "IDENTITY_CONFLICT",
            "detail": "Username or email already registered",
            "violations": None,
        }

    def test_register_validation_failure_returns_422_with_violations(
        self, client: TestClient, mock_service
    ) -> None:
        mock_service.register.side_effect = ValidationFailed(
            [
                Violation("password", "uppercase", "Password must contain at least one uppercase letter"),
                Violation("password", "digit", "Password must contain at least one digit"),
            ]
        )

        response = client.post("/v1/register", json=REGISTER_BODY)

        assert response.status_code == 422
        body = response.json()
        assert body["kind"] == "VALIDATION_FAILED"
        assert body["violations"] == [
            {
                "field": "password",
                "rule": "uppercase",
                "message": "Password must contain at least one uppercase letter",
            },
            {
                "field": "password",
                "rule": "digit",
                "message": "Password must contain at least one digit",
            },
        ]

    def test_register_storage_failure_returns_500(self, client: TestClient, mock_service) -> None:
        mock_service.register.side_effect = StorageFailure("connection refused on 10.0.0.5")

        response = client.post("/v1/register", json=REGISTER_BODY)

        assert response.status_code == 500
        assert response.json()["detail"] == "Storage unavailable"
        assert "10.0.0.5" not in response.text

    def test_register_hashing_failure_returns_422(self, client: TestClient, mock_service) -> None:
        mock_service.register.side_effect = HashingFailure("entropy")

        response = client.post("/v1/register", json=REGISTER_BODY)

        assert response.status_code == 422
        assert response.json()["kind"] == "HASHING_FAILURE"

    def test_register_missing_field_uses_validation_shape(
        self, client: TestClient, mock_service
    ) -> None:
        body = {k: v for k, v in REGISTER_BODY.items() if k != "confirm_password"}

        response = client.post("/v1/register", json=body)

        assert response.status_code == 422
        assert response.json()["kind"] == "VALIDATION_FAILED"
        assert response.json()["violations"][0]["field"] == "confirm_password"
        mock_service.register.assert_not_called()


class TestLoginEndpoint:
    """Tests for POST /v1/login endpoint."""

    def test_login_success_returns_identity(self, client: TestClient, mock_service) -> None:
        mock_service.login.return_value = LoginResult(user=ALICE, credential_state=CredentialState.HASHED)

        response = client.post("/v1/login", json={"username": "alice", "password": "Abc123"})

        assert response.status_code == 200
        assert response.json()["user"]["username"] == "alice"
        assert response.json()["credential_state"] == "hashed"
        mock_service.login.assert_called_once_with("alice", "Abc123")

    def test_login_invalid_credential_returns_401(self, client: TestClient, mock_service) -> None:
        mock_service.login.side_effect = InvalidCredential()

        response = client.post("/v1/login", json={"username": "alice", "password": "wrong"})

        assert response.status_code == 401
        assert response.json() == {
            "kind": "INVALID_CREDENTIAL",
            "detail": "Invalid username or password",
            "violations": None,
        }

    def test_login_requires_password(self, client: TestClient, mock_service) -> None:
        response = client.post("/v1/login", json={"username": "alice"})

        assert response.status_code == 422
        mock_service.login.assert_not_called()


class TestUnencodableInput:
    """Text JSON can carry but UTF-8 and PostgreSQL cannot."""

    def test_register_surrogate_password_returns_422(self, live_client: TestClient) -> None:
        body = (
            '{"username": "alice", "email": "alice@example.com", '
            '"password": "Abc123\\ud800", "confirm_password": "Abc123\\ud800"}'
        )

        response = live_client.post(
            "/v1/register", content=body, headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 422
        assert response.json()["kind"] == "VALIDATION_FAILED"
        assert {v["field"] for v in response.json()["violations"]} == {"password", "confirm_password"}

    def test_register_nul_username_returns_422(self, live_client: TestClient) -> None:
        response = live_client.post("/v1/register", json={**REGISTER_BODY, "username": "a\x00b"})

        assert response.status_code == 422
        assert response.json()["violations"] == [
            {
                "field": "username",
                "rule": "characters",
                "message": "Contains characters that are not allowed",
            }
        ]

    def test_login_nul_username_returns_422(self, live_client: TestClient) -> None:
        response = live_client.post("/v1/login", json={"username": "a\x00b", "password": "Abc123"})

        assert response.status_code == 422
        assert response.json()["violations"][0]["rule"] == "characters"
