"""
ConnectionManager

Owns the single long-lived cassandra-driver Session for the process.

  connect()     build the Cluster and open a pooled session (no keyspace bound;
                the keyspace may not exist until the SchemaBootstrapper runs)
  session()     the live handle shared by every query-issuing component
  disconnect()  shut the Cluster down; safe to call twice

No retries happen here; a failed connect is fatal to startup and the caller
decides whether to try the whole sequence again.
"""

from __future__ import annotations

import logging

from cassandra import ConsistencyLevel, DriverException
from cassandra.auth import PlainTextAuthProvider
from cassandra.cluster import (
    EXEC_PROFILE_DEFAULT,
    Cluster,
    ExecutionProfile,
    NoHostAvailable,
    Session,
)
from cassandra.policies import DCAwareRoundRobinPolicy, TokenAwarePolicy
from cassandra.query import dict_factory

from user_store.core.errors import StoreConnectionError
from user_store.models.connection import ConnectionDescriptor

logger = logging.getLogger("user_store.db.connection")


def _consistency_level(name: str) -> int:
    try:
        return ConsistencyLevel.name_to_value[name.upper()]
    except KeyError:
        raise StoreConnectionError(f"Unknown consistency level: {name!r}") from None


class ConnectionManager:

    def __init__(
        self,
        *,
        connect_timeout: float = 10.0,
        request_timeout: float = 10.0,
        consistency_level: str = "LOCAL_ONE",
    ) -> None:
        self._connect_timeout = connect_timeout
        self._request_timeout = request_timeout
        self._consistency_level = consistency_level
        self._cluster: Cluster | None = None
        self._session: Session | None = None
        self._descriptor: ConnectionDescriptor | None = None

    @property
    def connected(self) -> bool:
        return self._session is not None

    @property
    def descriptor(self) -> ConnectionDescriptor | None:
        return self._descriptor

    @property
    def request_timeout(self) -> float:
        return self._request_timeout

    # ── Lifecycle ─────────────────────────────────────────────────────────────

    def _build_cluster(self, descriptor: ConnectionDescriptor) -> Cluster:
        profile = ExecutionProfile(
            load_balancing_policy=TokenAwarePolicy(
                DCAwareRoundRobinPolicy(local_dc=descriptor.datacenter)
            ),
            request_timeout=self._request_timeout,
            consistency_level=_consistency_level(self._consistency_level),
            row_factory=dict_factory,
        )
        auth_provider = None
        if descriptor.authenticated:
            auth_provider = PlainTextAuthProvider(
                username=descriptor.username, password=descriptor.password
            )
        return Cluster(
            contact_points=descriptor.contact_points,
            port=descriptor.port,
            auth_provider=auth_provider,
            execution_profiles={EXEC_PROFILE_DEFAULT: profile},
            connect_timeout=self._connect_timeout,
            control_connection_timeout=self._connect_timeout,
        )

    def connect(self, descriptor: ConnectionDescriptor) -> Session:
        """
        Open the pooled session. Raises StoreConnectionError if no contact
        point answers or the credentials are rejected.
        """
        if self._session is not None:
            raise StoreConnectionError("Already connected; call disconnect() first")

        logger.info(
            "Connecting to %s:%s (dc=%s, auth=%s)",
            ",".join(descriptor.contact_points),
            descriptor.port,
            descriptor.datacenter,
            "on" if descriptor.authenticated else "off",
        )
        cluster: Cluster | None = None
        try:
            # Contact points are resolved while the Cluster is constructed.
            cluster = self._build_cluster(descriptor)
            session = cluster.connect()
        except (NoHostAvailable, DriverException) as exc:
            logger.error("Unable to connect to the database: %s", exc)
            if cluster is not None:
                cluster.shutdown()
            raise StoreConnectionError(f"Unable to connect to the database: {exc}") from exc

        self._cluster = cluster
        self._session = session
        self._descriptor = descriptor
        logger.info("Database connection has been established successfully.")
        return session

    def disconnect(self) -> None:
        """Release pooled connections. A no-op when not connected."""
        if self._cluster is None:
            logger.info("Disconnect requested but no connection is open.")
            return

        cluster = self._cluster
        self._cluster = None
        self._session = None
        try:
            cluster.shutdown()
        except DriverException as exc:
            logger.warning("Error while closing database connection: %s", exc)
            return
        logger.info("Database connection closed successfully.")

    def session(self) -> Session:
        if self._session is None:
            raise StoreConnectionError("Not connected to the database")
        return self._session
