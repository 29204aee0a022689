"""
PostgreSQL repository adapter - Implements UserRepository and CredentialStore.

This module provides the PostgreSQL implementation of the domain's
storage ports using psycopg3 with raw SQL.

Uniqueness:
-----------
username and email carry UNIQUE constraints. persist_user() inserts with
ON CONFLICT DO NOTHING, so a duplicate on either column returns zero rows
instead of raising, and concurrent registrations for the same identity
resolve to exactly one winner.

Migration writes:
-----------------
replace_credential() only updates a row whose password column still holds
the plaintext that was read, so a row migrated by another process between
read and write is left alone.
"""

import logging
from collections.abc import Iterator
from pathlib import Path

import psycopg
from psycopg_pool import ConnectionPool

from src.domain.exceptions import IdentityAlreadyExists, StorageFailure
from src.domain.ports import Identity, StoredCredential, UserRecord

logger = logging.getLogger(__name__)

_USER_COLUMNS = "id, username, email, team_id, group_id, password"


def _row_to_user(row: tuple) -> UserRecord:
    return UserRecord(
        id=row[0],
        username=row[1],
        email=row[2],
        team_id=row[3],
        group_id=row[4],
        credential=row[5],
    )


class PostgresUserRepository:
    """
    Implements UserRepository and CredentialStore protocols via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize repository with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    def fetch_user_by_username(self, username: str) -> UserRecord | None:
        """
        Look up a user by exact username.

        Raises:
            StorageFailure: database error
        """
        sql = f"SELECT {_USER_COLUMNS} FROM users WHERE username = %s"

        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql, (username,))
                row = cursor.fetchone()
        except psycopg.Error as e:
            logger.error("User lookup failed: %s", type(e).__name__)
            raise StorageFailure("user lookup failed") from e

        return _row_to_user(row) if row is not None else None

    def persist_user(self, identity: Identity, credential_hash: str) -> UserRecord:
        """
        Insert a new user with an encoded credential.

        Team and group associations start out NULL.

        Raises:
            IdentityAlreadyExists: username or email already taken
            StorageFailure: any other database error
        """
        sql = f"""
            INSERT INTO users (username, email, password)
            VALUES (%s, %s, %s)
            ON CONFLICT DO NOTHING
            RETURNING {_USER_COLUMNS}
        """

        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql, (identity.username, identity.email, credential_hash))
                row = cursor.fetchone()
                conn.commit()
        except psycopg.Error as e:
            logger.error("User insert failed: %s", type(e).__name__)
            raise StorageFailure("user insert failed") from e

        if row is None:
            raise IdentityAlreadyExists(identity.username)
        return _row_to_user(row)

    def iter_credentials(self) -> Iterator[StoredCredential]:
        """
        Yield (id, password) for every user, ordered by id.

        Rows are read up front so no connection is held while hashing.

        Raises:
            StorageFailure: database error
        """
        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute("SELECT id, password FROM users ORDER BY id")
                rows = cursor.fetchall()
        except psycopg.Error as e:
            logger.error("Credential scan failed: %s", type(e).__name__)
            raise StorageFailure("credential scan failed") from e

        for user_id, credential in rows:
            yield StoredCredential(user_id=user_id, credential=credential)

    def replace_credential(self, user_id: int, expected: str, replacement: str) -> bool:
        """
        Compare-and-swap the password column of one user.

        Returns:
            True if the row still held ``expected`` and was updated

        Raises:
            StorageFailure: database error
        """
        sql = "UPDATE users SET password = %s WHERE id = %s AND password = %s"

        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql, (replacement, user_id, expected))
                conn.commit()
                return cursor.rowcount == 1
        except psycopg.Error as e:
            logger.error("Credential update failed for user %s: %s", user_id, type(e).__name__)
            raise StorageFailure("credential update failed") from e


def run_migrations(pool: ConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance
    """
    # Structure: src/adapters/repository/postgres.py -> migrations/
    migrations_dir = Path(__file__).parent.parent.parent.parent / "migrations"

    if not migrations_dir.exists():
        logger.warning(f"Migrations directory not found: {migrations_dir}")
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info(f"Running {len(sql_files)} migration(s)")

    for sql_file in sql_files:
        logger.info(f"Executing migration: {sql_file.name}")
        try:
            sql_content = sql_file.read_text()

            with pool.connection() as conn:
                conn.execute(sql_content)

            logger.info(f"Migration complete: {sql_file.name}")
        except Exception as e:
            logger.error(f"Migration failed: {sql_file.name} - {e}")
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
