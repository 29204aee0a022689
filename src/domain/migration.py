"""
Legacy credential migrator - One-time plaintext to Argon2 sweep.

Detection is structural: a credential is considered migrated when it
parses as an Argon2 encoding, so no separate flag can drift out of sync
with the stored value. Writes are compare-and-swap against the plaintext
that was read, so two concurrent sweeps never double-hash a row.

Per-record anomalies are logged and skipped; a storage outage aborts
the sweep. Re-running is always safe.
"""

import logging
from dataclasses import dataclass

from .exceptions import HashingFailure
from .hashing import CredentialHasher
from .ports import CredentialStore

logger = logging.getLogger(__name__)


@dataclass
class MigrationReport:
    """Counters for one sweep."""

    scanned: int = 0
    migrated: int = 0
    skipped: int = 0
    failed: int = 0


@dataclass
class CredentialMigrator:
    """Upgrades plaintext credentials to hashed form in place."""

    hasher: CredentialHasher

    def migrate_all(self, credential_store: CredentialStore) -> MigrationReport:
        """
        Hash every stored plaintext credential.

        Args:
            credential_store: Store to sweep

        Returns:
            MigrationReport with per-outcome counts

        Raises:
            StorageFailure: store unreachable; remaining rows stay unmigrated
        """
        report = MigrationReport()

        for stored in credential_store.iter_credentials():
            report.scanned += 1
            credential = stored.credential

            if not credential:
                logger.warning("User %s has no stored credential, skipping", stored.user_id)
                report.skipped += 1
                continue

            if self.hasher.is_hashed(credential):
                report.skipped += 1
                continue

            if self.hasher.looks_hashed(credential):
                # Carries the algorithm prefix but does not parse: corrupt, not plaintext.
                logger.error("User %s has a malformed hashed credential, leaving it", stored.user_id)
                report.failed += 1
                continue

            try:
                replacement = self.hasher.hash(credential)
            except HashingFailure:
                logger.error("Hashing failed for user %s, continuing sweep", stored.user_id)
                report.failed += 1
                continue

            if credential_store.replace_credential(stored.user_id, credential, replacement):
                report.migrated += 1
            else:
                logger.info("User %s was migrated concurrently, skipping", stored.user_id)
                report.skipped += 1

        logger.info(
            "Credential migration complete: scanned=%d migrated=%d skipped=%d failed=%d",
            report.scanned,
            report.migrated,
            report.skipped,
            report.failed,
        )
        return report
