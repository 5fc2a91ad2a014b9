"""
UserDAO

Table layout (see user_store.db.schema):
  users(id uuid PRIMARY KEY, email, first_name, last_name, created_at, updated_at)
  users_email_idx on email (secondary, not unique)

Rows are returned as dicts keyed by the camelCase field names of
user_store.models.user.User.
"""

import logging
from datetime import datetime
from typing import Any
from uuid import UUID

from user_store.dao.base import BaseDAO
from user_store.db.schema import USERS_TABLE

logger = logging.getLogger("user_store.dao.user")

COLUMNS = "id, email, first_name, last_name, created_at, updated_at"
REQUIRED_COLUMNS = ("id", "email", "first_name", "last_name", "created_at", "updated_at")

# camelCase field -> column
FIELD_COLUMNS = {
    "email": "email",
    "firstName": "first_name",
    "lastName": "last_name",
}


class UserDAO(BaseDAO):

    SELECT_ALL = f"SELECT {COLUMNS} FROM {USERS_TABLE}"
    SELECT_BY_ID = f"SELECT {COLUMNS} FROM {USERS_TABLE} WHERE id = ?"
    SELECT_BY_EMAIL = f"SELECT {COLUMNS} FROM {USERS_TABLE} WHERE email = ?"
    INSERT = (
        f"INSERT INTO {USERS_TABLE} ({COLUMNS}) VALUES (?, ?, ?, ?, ?, ?)"
    )
    DELETE = f"DELETE FROM {USERS_TABLE} WHERE id = ?"

    @staticmethod
    def _row_to_user(row: dict[str, Any]) -> dict[str, Any] | None:
        """
        None for a partial row. An UPDATE that races a DELETE upserts only the
        columns it sets, leaving a row without email or created_at; such a row
        is not a user.
        """
        missing = [c for c in REQUIRED_COLUMNS if row.get(c) is None]
        if missing:
            logger.warning(
                "Ignoring partial user row %s (null: %s)", row.get("id"), ", ".join(missing)
            )
            return None
        return {
            "id": row["id"],
            "email": row["email"],
            "firstName": row["first_name"],
            "lastName": row["last_name"],
            "createdAt": row["created_at"],
            "updatedAt": row["updated_at"],
        }

    # ── Write ─────────────────────────────────────────────────────────────────

    def create(
        self, user_id: UUID, data: dict[str, Any], now: datetime
    ) -> dict[str, Any]:
        """Insert a full row. No existence or email-uniqueness check."""
        self._execute(
            "creating user",
            self.INSERT,
            [user_id, data["email"], data["firstName"], data["lastName"], now, now],
        )
        return {
            "id": user_id,
            "email": data["email"],
            "firstName": data["firstName"],
            "lastName": data["lastName"],
            "createdAt": now,
            "updatedAt": now,
        }

    def update(
        self,
        user_id: UUID,
        fields: dict[str, Any],
        now: datetime,
        *,
        if_exists: bool = False,
    ) -> bool:
        """
        Set the supplied camelCase fields plus updated_at; id is bound last.

        With if_exists=True the statement is a lightweight transaction and
        the return value is its [applied] flag. Otherwise always True: a
        plain UPDATE does not report whether the row existed.
        """
        columns = {FIELD_COLUMNS[k]: v for k, v in fields.items()}
        columns["updated_at"] = now
        set_clause, params = self._build_set_clause(columns)
        params.append(user_id)

        query = f"UPDATE {USERS_TABLE} {set_clause} WHERE id = ?"
        if if_exists:
            query += " IF EXISTS"
        result = self._execute("updating user", query, params)
        return self._was_applied(result) if if_exists else True

    def delete(self, user_id: UUID, *, if_exists: bool = False) -> bool:
        query = self.DELETE + (" IF EXISTS" if if_exists else "")
        result = self._execute("deleting user", query, [user_id])
        return self._was_applied(result) if if_exists else True

    # ── Read ──────────────────────────────────────────────────────────────────

    def get(self, user_id: UUID) -> dict[str, Any] | None:
        rows = self._fetch("fetching user", self.SELECT_BY_ID, [user_id])
        return self._row_to_user(rows[0]) if rows else None

    def _users(self, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        users = (self._row_to_user(row) for row in rows)
        return [user for user in users if user is not None]

    def list_all(self) -> list[dict[str, Any]]:
        """Unfiltered scan; the driver pages transparently while iterating."""
        return self._users(self._fetch("fetching users", self.SELECT_ALL))

    def list_by_email(self, email: str) -> list[dict[str, Any]]:
        """Lookup through users_email_idx. Several rows may share an email."""
        return self._users(
            self._fetch("fetching users by email", self.SELECT_BY_EMAIL, [email])
        )
