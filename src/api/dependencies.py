"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.
"""

from fastapi import Request
from psycopg_pool import ConnectionPool

from src.adapters.repository.postgres import PostgresUserRepository
from src.config.settings import Settings
from src.domain.hashing import CredentialHasher
from src.domain.registration import RegistrationService


def create_hasher(settings: Settings) -> CredentialHasher:
    """Build the hashing service from configured Argon2 work factors."""
    return CredentialHasher(
        time_cost=settings.argon2_time_cost,
        memory_cost=settings.argon2_memory_cost,
        parallelism=settings.argon2_parallelism,
        hash_len=settings.argon2_hash_len,
        salt_len=settings.argon2_salt_len,
    )


def get_pool(request: Request) -> ConnectionPool:
    """
    Get connection pool from app state.

    The pool is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.pool


def get_hasher(request: Request) -> CredentialHasher:
    """Get the hashing service built once during lifespan startup."""
    return request.app.state.hasher


def get_repository(request: Request) -> PostgresUserRepository:
    """Create repository with connection pool from app state."""
    pool = get_pool(request)
    return PostgresUserRepository(pool)


def get_registration_service(request: Request) -> RegistrationService:
    """
    Create registration service with injected dependencies.

    Wires together the repository and hasher for the domain service.
    """
    return RegistrationService(repository=get_repository(request), hasher=get_hasher(request))
