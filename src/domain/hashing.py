"""
Credential hashing engine - Argon2id via argon2-cffi.

Encoded credentials use the PHC string format, which embeds algorithm,
version, work-factor parameters, salt and digest in one value:

    $argon2id$v=19$m=65536,t=3,p=4$<salt>$<digest>

Default parameters (overridable through Settings):
- time_cost: 3 iterations
- memory_cost: 65536 KiB (64 MiB)
- parallelism: 4 lanes
- hash_len: 32 bytes
- salt_len: 16 bytes, fresh from os.urandom on every hash()

verify() compares in constant time and answers a plain bool: a corrupt
stored value is indistinguishable from a wrong password to the caller.
"""

import logging
import secrets

from argon2 import Parameters, PasswordHasher, Type, extract_parameters
from argon2.exceptions import (
    Argon2Error,
    HashingError,
    InvalidHashError,
    VerificationError,
    VerifyMismatchError,
)

from .exceptions import HashingFailure, MalformedCredential

logger = logging.getLogger(__name__)

ARGON2_PREFIX = "$argon2"


class CredentialHasher:
    """
    Stateless hashing service.

    Constructed once at startup and injected into the services that
    need it. Holds only its parameters and a decoy hash.
    """

    def __init__(
        self,
        time_cost: int = 3,
        memory_cost: int = 65536,
        parallelism: int = 4,
        hash_len: int = 32,
        salt_len: int = 16,
    ) -> None:
        self._hasher = PasswordHasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
            hash_len=hash_len,
            salt_len=salt_len,
            type=Type.ID,
        )
        # Verified against for unknown usernames so login timing does not
        # reveal whether an account exists.
        self._decoy = self.hash(secrets.token_urlsafe(16))

    def hash(self, plaintext: str) -> str:
        """
        Hash a plaintext password with a fresh random salt.

        Raises:
            HashingFailure: argon2 or the entropy source failed, or the
                plaintext cannot be encoded as UTF-8
        """
        try:
            return self._hasher.hash(plaintext)
        except UnicodeEncodeError as e:
            logger.warning("Plaintext cannot be encoded as UTF-8")
            raise HashingFailure("plaintext is not encodable") from e
        except (HashingError, OSError) as e:
            logger.error("Password hashing failed: %s", type(e).__name__)
            raise HashingFailure("password hashing failed") from e

    def verify(self, plaintext: str, encoded: str) -> bool:
        """
        Check a plaintext password against an encoded credential.

        Returns:
            True on match; False on mismatch or undecodable credential

        Raises:
            HashingFailure: argon2 failed for a reason other than mismatch or decoding
        """
        try:
            return self._hasher.verify(encoded, plaintext)
        except VerifyMismatchError:
            return False
        except UnicodeEncodeError:
            logger.warning("Plaintext cannot be encoded as UTF-8")
            return False
        except (InvalidHashError, VerificationError) as e:
            diagnostic = MalformedCredential(type(e).__name__)
            logger.warning("Stored credential is malformed: %s", diagnostic)
            return False
        except Argon2Error as e:
            logger.error("Password verification failed: %s", type(e).__name__)
            raise HashingFailure("password verification failed") from e

    def verify_dummy(self, plaintext: str) -> bool:
        """Spend one verification on the decoy hash. Always False."""
        self.verify(plaintext, self._decoy)
        return False

    def inspect(self, encoded: str) -> Parameters:
        """
        Parse the parameters embedded in an encoded credential.

        Raises:
            MalformedCredential: value is not a well-formed Argon2 encoding
        """
        if not self.looks_hashed(encoded):
            raise MalformedCredential("missing argon2 prefix")
        try:
            return extract_parameters(encoded)
        except (InvalidHashError, ValueError) as e:
            raise MalformedCredential("unparseable argon2 encoding") from e

    def looks_hashed(self, encoded: str | None) -> bool:
        """Prefix check only; see is_hashed() for the structural check."""
        return bool(encoded) and encoded.startswith(ARGON2_PREFIX)

    def is_hashed(self, encoded: str | None) -> bool:
        """True when ``encoded`` is a structurally valid Argon2 credential."""
        if not self.looks_hashed(encoded):
            return False
        try:
            self.inspect(encoded)
        except MalformedCredential:
            return False
        return True
