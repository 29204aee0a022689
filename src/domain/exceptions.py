"""
Domain exceptions - Error taxonomy for the credential lifecycle.

Every failure raised by validation, hashing, migration or the storage
port is classified into one ErrorKind. The transport layer maps kinds
to statuses; exception text never reaches a client.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Fixed set of failure classifications."""

    VALIDATION_FAILED = "VALIDATION_FAILED"
    CREDENTIAL_NOT_FOUND = "CREDENTIAL_NOT_FOUND"
    INVALID_CREDENTIAL = "INVALID_CREDENTIAL"
    HASHING_FAILURE = "HASHING_FAILURE"
    STORAGE_FAILURE = "STORAGE_FAILURE"
    IDENTITY_CONFLICT = "IDENTITY_CONFLICT"
    MALFORMED_CREDENTIAL = "MALFORMED_CREDENTIAL"


class CredentialError(Exception):
    """Base class for credential domain errors."""

    kind: ErrorKind


class ValidationFailed(CredentialError):
    """One or more validation rules were violated."""

    kind = ErrorKind.VALIDATION_FAILED

    def __init__(self, violations) -> None:
        self.violations = tuple(violations)
        super().__init__(f"{len(self.violations)} validation violation(s)")


class InvalidCredential(CredentialError):
    """Password did not verify against the stored credential."""

    kind = ErrorKind.INVALID_CREDENTIAL


class CredentialNotFound(InvalidCredential):
    """
    Login username has no matching identity.

    Subclasses InvalidCredential so callers handling wrong passwords also
    handle unknown usernames; the response mapper folds both together.
    """

    kind = ErrorKind.CREDENTIAL_NOT_FOUND


class HashingFailure(CredentialError):
    """Internal failure of the hashing engine (entropy, parameters)."""

    kind = ErrorKind.HASHING_FAILURE


class StorageFailure(CredentialError):
    """Storage collaborator raised an I/O or constraint error."""

    kind = ErrorKind.STORAGE_FAILURE


class IdentityAlreadyExists(StorageFailure):
    """Username or email already belongs to a stored identity."""

    kind = ErrorKind.IDENTITY_CONFLICT


class MalformedCredential(CredentialError):
    """
    Stored credential could not be decoded.

    Diagnostic only: verify() logs it and reports a plain mismatch.
    """

    kind = ErrorKind.MALFORMED_CREDENTIAL
