"""
Pydantic schemas for the User entity.

Field names follow the camelCase shape exposed by the service-call
interface; the DAO maps them to the snake_case columns of the users table.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class User(BaseModel):
    id: UUID
    email: str
    firstName: str
    lastName: str
    createdAt: datetime
    updatedAt: datetime


class UserCreateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    email: str
    firstName: str
    lastName: str


class UserUpdateRequest(BaseModel):
    """Only mutable fields. Omit a field (or pass None) to leave it unchanged."""

    model_config = ConfigDict(extra="forbid")

    email: str | None = None
    firstName: str | None = None
    lastName: str | None = None

    def supplied_fields(self) -> dict[str, str]:
        return {k: v for k, v in self.model_dump().items() if v is not None}
