"""
Domain layer - Pure business logic with zero framework imports.

This package contains the credential lifecycle: validation, hashing,
legacy migration, error taxonomy and the register/login orchestration.
It defines its own port interfaces for storage, keeping web and
database frameworks out of the core.
"""

from .exceptions import (
    CredentialError,
    CredentialNotFound,
    ErrorKind,
    HashingFailure,
    IdentityAlreadyExists,
    InvalidCredential,
    MalformedCredential,
    StorageFailure,
    ValidationFailed,
)
from .hashing import CredentialHasher
from .migration import CredentialMigrator, MigrationReport
from .ports import (
    CredentialState,
    CredentialStore,
    Identity,
    LoginResult,
    StoredCredential,
    UserRecord,
    UserRepository,
)
from .registration import RegistrationService
from .validation import LOGIN_RULES, REGISTRATION_RULES, Violation, validate

__all__ = [
    "LOGIN_RULES",
    "REGISTRATION_RULES",
    "CredentialError",
    "CredentialHasher",
    "CredentialMigrator",
    "CredentialNotFound",
    "CredentialState",
    "CredentialStore",
    "ErrorKind",
    "HashingFailure",
    "Identity",
    "IdentityAlreadyExists",
    "InvalidCredential",
    "LoginResult",
    "MalformedCredential",
    "MigrationReport",
    "RegistrationService",
    "StorageFailure",
    "StoredCredential",
    "UserRecord",
    "UserRepository",
    "ValidationFailed",
    "Violation",
    "validate",
]
