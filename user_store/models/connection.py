"""
Connection descriptor handed to the ConnectionManager.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator


class ConnectionDescriptor(BaseModel):
    """Where and how to reach the cluster. Omit both credentials to connect unauthenticated."""

    contact_points: list[str] = Field(min_length=1)
    port: int = 9042
    keyspace: str
    datacenter: str
    username: str | None = None
    password: str | None = None

    @model_validator(mode="after")
    def _credentials_are_paired(self) -> "ConnectionDescriptor":
        if (self.username is None) != (self.password is None):
            raise ValueError("username and password must be supplied together")
        return self

    @property
    def authenticated(self) -> bool:
        return self.username is not None and self.password is not None
