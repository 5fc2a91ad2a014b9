"""
SchemaBootstrapper

Creates the keyspace, the users table and the email index with
IF NOT EXISTS semantics. Safe to run on every process start.

Identifiers cannot be bound as parameters, so the keyspace name is checked
against an allow-list before it is interpolated.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from cassandra import DriverException
from cassandra.cluster import NoHostAvailable

from user_store.core.errors import SchemaError

logger = logging.getLogger("user_store.db.schema")

USERS_TABLE = "users"
EMAIL_INDEX = "users_email_idx"

# Replication is a fixed single-node policy.
REPLICATION = "{'class': 'SimpleStrategy', 'replication_factor': 1}"

_IDENTIFIER_RE = re.compile(r"^[A-Za-z0-9_]{1,48}$")

CREATE_USERS_TABLE = f"""
    CREATE TABLE IF NOT EXISTS {USERS_TABLE} (
        id uuid PRIMARY KEY,
        email text,
        first_name text,
        last_name text,
        created_at timestamp,
        updated_at timestamp
    )
"""

CREATE_EMAIL_INDEX = f"CREATE INDEX IF NOT EXISTS {EMAIL_INDEX} ON {USERS_TABLE} (email)"


def validate_identifier(name: str) -> str:
    """Return name unchanged if it is a plain CQL identifier, else raise SchemaError."""
    if not isinstance(name, str) or not _IDENTIFIER_RE.match(name):
        raise SchemaError(
            f"Invalid keyspace name {name!r}: use 1-48 letters, digits or underscores"
        )
    return name


class SchemaBootstrapper:

    def __init__(self, session: Any, keyspace: str) -> None:
        self._session = session
        self._keyspace = validate_identifier(keyspace)

    @property
    def keyspace(self) -> str:
        return self._keyspace

    def _create_keyspace_statement(self) -> str:
        return (
            f"CREATE KEYSPACE IF NOT EXISTS {self._keyspace} "
            f"WITH replication = {REPLICATION}"
        )

    def _run(self, step: str, fn, *args) -> None:
        logger.debug("Schema step: %s", step)
        try:
            fn(*args)
        except (NoHostAvailable, DriverException) as exc:
            logger.error("Error initializing database schema (%s): %s", step, exc)
            raise SchemaError(f"Schema step '{step}' failed: {exc}") from exc

    def bootstrap(self) -> None:
        """
        Ensure keyspace, table and index exist, in that order.
        Any failure is fatal: the caller must not serve traffic afterwards.
        """
        self._run("create keyspace", self._session.execute, self._create_keyspace_statement())
        self._run("use keyspace", self._session.set_keyspace, self._keyspace)
        self._run("create users table", self._session.execute, CREATE_USERS_TABLE)
        self._run("create email index", self._session.execute, CREATE_EMAIL_INDEX)
        logger.info("Database schema initialized successfully (keyspace=%s)", self._keyspace)
