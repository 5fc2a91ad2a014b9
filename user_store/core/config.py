from functools import lru_cache
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from user_store.models.connection import ConnectionDescriptor


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # ── App ──────────────────────────────────────────────────────────────────
    app_name: str = "User Store"
    app_version: str = "0.1.0"
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # ── Cluster ──────────────────────────────────────────────────────────────
    db_contact_points: Annotated[list[str], NoDecode] = Field(
        default=["localhost"], alias="DB_CONTACT_POINTS"
    )
    db_port: int = Field(default=9042, alias="DB_PORT")
    db_keyspace: str = Field(default="express_db", alias="DB_KEYSPACE")
    db_datacenter: str = Field(default="datacenter1", alias="DB_DATACENTER")

    # ── Credentials (both or neither) ────────────────────────────────────────
    db_username: str | None = Field(default=None, alias="DB_USERNAME")
    db_password: str | None = Field(default=None, alias="DB_PASSWORD")

    # ── Timeouts / consistency ───────────────────────────────────────────────
    db_connect_timeout_seconds: float = Field(
        default=10.0, alias="DB_CONNECT_TIMEOUT_SECONDS"
    )
    db_request_timeout_seconds: float = Field(
        default=10.0, alias="DB_REQUEST_TIMEOUT_SECONDS"
    )
    db_consistency_level: str = Field(
        default="LOCAL_ONE", alias="DB_CONSISTENCY_LEVEL"
    )

    # Use IF EXISTS lightweight transactions for update/delete instead of
    # a separate existence read.
    db_conditional_writes: bool = Field(default=False, alias="DB_CONDITIONAL_WRITES")

    @field_validator("db_contact_points", mode="before")
    @classmethod
    def _split_contact_points(cls, value):
        if isinstance(value, str):
            return [host.strip() for host in value.split(",") if host.strip()]
        return value

    @field_validator("db_username", "db_password", mode="before")
    @classmethod
    def _blank_is_unset(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def connection_descriptor(self) -> ConnectionDescriptor:
        return ConnectionDescriptor(
            contact_points=self.db_contact_points,
            port=self.db_port,
            keyspace=self.db_keyspace,
            datacenter=self.db_datacenter,
            username=self.db_username,
            password=self.db_password,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
