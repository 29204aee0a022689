"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the records the domain exchanges with storage and
the interfaces (ports) it requires. Adapters implement these protocols.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Protocol


class CredentialState(str, Enum):
    """
    Storage state of a credential.

    State Transitions (forward-only):
    - PLAINTEXT -> HASHED (migration sweep)

    HASHED is terminal: a hashed credential never reverts.
    """

    PLAINTEXT = "plaintext"
    HASHED = "hashed"


@dataclass(frozen=True)
class Identity:
    """Non-credential attributes supplied at registration."""

    username: str
    email: str


@dataclass(frozen=True)
class UserRecord:
    """A stored user row, credential included."""

    id: int
    username: str
    email: str
    team_id: int | None = None
    group_id: int | None = None
    credential: str | None = None


@dataclass(frozen=True)
class StoredCredential:
    """Credential column of a single user row, as seen by the migrator."""

    user_id: int
    credential: str | None


@dataclass(frozen=True)
class LoginResult:
    """Successful login outcome."""

    user: UserRecord
    credential_state: CredentialState


class UserRepository(Protocol):
    """Port interface for identity persistence."""

    def fetch_user_by_username(self, username: str) -> UserRecord | None:
        """
        Look up a user row by exact username.

        Returns:
            The stored record, or None when no row matches
        """
        ...

    def persist_user(self, identity: Identity, credential_hash: str) -> UserRecord:
        """
        Insert a new identity with its encoded credential.

        Uniqueness of username and email is enforced by the store.

        Raises:
            IdentityAlreadyExists: username or email already stored
            StorageFailure: any other I/O or constraint error
        """
        ...


class CredentialStore(Protocol):
    """Port interface for the migration sweep."""

    def iter_credentials(self) -> Iterable[StoredCredential]:
        """
        Yield the credential of every stored user.

        Raises:
            StorageFailure: store unreachable
        """
        ...

    def replace_credential(self, user_id: int, expected: str, replacement: str) -> bool:
        """
        Atomically swap a credential if it still equals ``expected``.

        Returns:
            True if the row was updated, False if it changed underneath us

        Raises:
            StorageFailure: store unreachable
        """
        ...
