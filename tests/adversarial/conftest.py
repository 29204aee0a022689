"""
Shared fixtures for adversarial tests.

Attacks run against the in-memory repository so they exercise the
domain's guarantees without a database.
"""

from unittest.mock import patch

import pytest
from argon2 import PasswordHasher

# Module-level marker for all adversarial tests
pytestmark = pytest.mark.adversarial


@pytest.fixture
def verification_counter():
    """Count argon2 verifications performed by any hasher."""
    calls = {"count": 0}
    real_verify = PasswordHasher.verify

    def counting_verify(self, hash, password):
        calls["count"] += 1
        return real_verify(self, hash, password)

    with patch.object(PasswordHasher, "verify", counting_verify):
        yield calls
