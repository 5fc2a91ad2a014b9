"""
UserService — the service-call interface over the users table.

Read-before-write
-----------------
A plain CQL UPDATE or DELETE does not say whether the row existed, so
update_user / delete_user first read the row to report not-found. The
read and the write are two independent round trips: a concurrent delete
landing between them makes update_user write the supplied columns into a
row that was just removed (the store upserts). The resulting partial row
has no email or createdAt; the DAO treats it as absent, so update_user
returns None and reads skip it.

With conditional_writes=True the existence check is folded into the write
as an IF EXISTS lightweight transaction instead. That closes the window at
the cost of a Paxos round.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Mapping
from uuid import UUID

from pydantic import ValidationError

from user_store.core.errors import InvalidArgumentError
from user_store.dao.base import utc_now
from user_store.dao.user_dao import UserDAO
from user_store.models.user import User, UserCreateRequest, UserUpdateRequest

logger = logging.getLogger("user_store.services.user")


def parse_user_id(user_id: str | UUID) -> UUID:
    """Parse a caller-supplied id; malformed input never reaches the store."""
    if isinstance(user_id, UUID):
        return user_id
    try:
        return UUID(str(user_id))
    except (TypeError, ValueError):
        raise InvalidArgumentError(f"Invalid user id: {user_id!r}") from None


def _validation_message(exc: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(p) for p in err['loc']) or 'body'}: {err['msg']}"
        for err in exc.errors()
    )


class UserService:

    def __init__(self, dao: UserDAO, *, conditional_writes: bool = False) -> None:
        self._dao = dao
        self._conditional_writes = conditional_writes

    # ── Read ──────────────────────────────────────────────────────────────────

    def get_all_users(self) -> list[User]:
        """Every user, in whatever order the store returns them."""
        return [User(**row) for row in self._dao.list_all()]

    def get_user_by_id(self, user_id: str | UUID) -> User | None:
        row = self._dao.get(parse_user_id(user_id))
        return User(**row) if row else None

    def find_users_by_email(self, email: str) -> list[User]:
        """Lookup through the email index. Email is not unique."""
        return [User(**row) for row in self._dao.list_by_email(email)]

    # ── Write ─────────────────────────────────────────────────────────────────

    def create_user(self, email: str, first_name: str, last_name: str) -> User:
        """
        Insert a new user with a fresh uuid4 id. One timestamp is taken and
        used for both createdAt and updatedAt. The row is not read back.
        """
        try:
            data = UserCreateRequest(
                email=email, firstName=first_name, lastName=last_name
            )
        except ValidationError as exc:
            raise InvalidArgumentError(_validation_message(exc)) from None

        user_id = uuid.uuid4()
        row = self._dao.create(user_id, data.model_dump(), utc_now())
        logger.info("Created user %s", user_id)
        return User(**row)

    def update_user(
        self,
        user_id: str | UUID,
        data: Mapping[str, Any] | UserUpdateRequest,
    ) -> User | None:
        """
        Change only the supplied fields (email, firstName, lastName) and
        refresh updatedAt. Returns the row as stored afterwards, or None if
        the user does not exist.

        Raises InvalidArgumentError for a malformed id, unknown keys, or a
        payload with nothing to update.
        """
        uid = parse_user_id(user_id)
        if not isinstance(data, UserUpdateRequest):
            try:
                data = UserUpdateRequest.model_validate(dict(data))
            except ValidationError as exc:
                raise InvalidArgumentError(_validation_message(exc)) from None
            except (TypeError, ValueError):
                raise InvalidArgumentError("Update payload must be a mapping") from None

        fields = data.supplied_fields()
        if not fields:
            raise InvalidArgumentError("No fields to update")

        if self._conditional_writes:
            if not self._dao.update(uid, fields, utc_now(), if_exists=True):
                return None
        else:
            if self._dao.get(uid) is None:
                return None
            self._dao.update(uid, fields, utc_now())

        logger.info("Updated user %s (%s)", uid, ", ".join(sorted(fields)))
        row = self._dao.get(uid)
        return User(**row) if row else None

    def delete_user(self, user_id: str | UUID) -> bool:
        """True if the user existed and was removed, False if there was none."""
        uid = parse_user_id(user_id)

        if self._conditional_writes:
            deleted = self._dao.delete(uid, if_exists=True)
        else:
            if self._dao.get(uid) is None:
                return False
            deleted = self._dao.delete(uid)

        if deleted:
            logger.info("Deleted user %s", uid)
        return deleted
