"""
Registration domain service - Register and login orchestration.

Register:  Start -> Validating -> Hashing -> Persisting -> Done
Login:     Start -> Validating -> Lookup -> Verifying -> Done

Every step runs in order and validation always precedes storage access.
Any step may exit with a typed CredentialError; nothing user-driven
raises anything else.

Login Enumeration Safety
========================

An unknown username spends one decoy verification and raises
CredentialNotFound, a subclass of InvalidCredential that the transport
layer renders exactly like a wrong password. A row whose
credential has not been migrated yet is rejected the same way.
"""

import logging
from dataclasses import dataclass

from .exceptions import CredentialNotFound, InvalidCredential, ValidationFailed
from .hashing import CredentialHasher
from .ports import CredentialState, Identity, LoginResult, UserRecord, UserRepository
from .validation import LOGIN_RULES, REGISTRATION_RULES, validate

logger = logging.getLogger(__name__)


@dataclass
class RegistrationService:
    """
    Domain service for user registration and login.

    Orchestrates validation, hashing and persistence. The hasher is
    injected rather than looked up so the service holds no global state.
    """

    repository: UserRepository
    hasher: CredentialHasher

    def register(
        self, username: str, email: str, password: str, confirm_password: str
    ) -> UserRecord:
        """
        Register a new user.

        Args:
            username: Desired username (surrounding whitespace stripped)
            email: Email address (will be normalized)
            password: Plaintext password
            confirm_password: Must equal ``password``

        Returns:
            The stored user record

        Raises:
            ValidationFailed: Input violates one or more rules
            HashingFailure: Hashing engine failed
            IdentityAlreadyExists: Username or email already registered
            StorageFailure: Store failed for another reason
        """
        username = self._normalize_username(username)
        email = self._normalize_email(email)

        violations = validate(
            {
                "username": username,
                "email": email,
                "password": password,
                "confirm_password": confirm_password,
            },
            REGISTRATION_RULES,
        )
        if violations:
            raise ValidationFailed(violations)

        credential_hash = self.hasher.hash(password)
        user = self.repository.persist_user(Identity(username, email), credential_hash)
        logger.info("Registered user id=%s", user.id)
        return user

    def login(self, username: str, password: str) -> LoginResult:
        """
        Verify a username/password pair.

        Returns:
            LoginResult with the stored user and its credential state

        Raises:
            ValidationFailed: Input violates one or more rules
            CredentialNotFound: Unknown username (an InvalidCredential)
            InvalidCredential: Unmigrated credential or wrong password
            HashingFailure: Hashing engine failed during verification
        """
        username = self._normalize_username(username)

        violations = validate({"username": username, "password": password}, LOGIN_RULES)
        if violations:
            raise ValidationFailed(violations)

        user = self.repository.fetch_user_by_username(username)
        if user is None:
            self.hasher.verify_dummy(password)
            raise CredentialNotFound()

        if not self.hasher.is_hashed(user.credential):
            logger.warning("Login rejected for user id=%s: credential not migrated", user.id)
            self.hasher.verify_dummy(password)
            raise InvalidCredential()

        if not self.hasher.verify(password, user.credential):
            raise InvalidCredential()

        return LoginResult(user=user, credential_state=CredentialState.HASHED)

    def _normalize_username(self, username: str | None) -> str | None:
        return username.strip() if username is not None else None

    def _normalize_email(self, email: str | None) -> str | None:
        """
        Normalize email address for consistent storage and lookup.

        Applies: strip whitespace + lowercase
        """
        return email.strip().lower() if email is not None else None
