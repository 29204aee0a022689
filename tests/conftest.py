"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- A credential hasher with cheap Argon2 parameters
- An in-memory user repository
- A registration service wired to both
"""

import pytest

from src.domain.hashing import CredentialHasher
from src.domain.registration import RegistrationService
from tests.fakes import InMemoryUserRepository


@pytest.fixture(scope="session")
def hasher() -> CredentialHasher:
    """Argon2id hasher with minimal work factors to keep tests fast."""
    return CredentialHasher(time_cost=1, memory_cost=8, parallelism=1)


@pytest.fixture
def repository() -> InMemoryUserRepository:
    """Fresh in-memory repository for each test."""
    return InMemoryUserRepository()


@pytest.fixture
def service(repository: InMemoryUserRepository, hasher: CredentialHasher) -> RegistrationService:
    """Registration service backed by the in-memory repository."""
    return RegistrationService(repository=repository, hasher=hasher)
