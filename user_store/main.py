"""
Process lifecycle: connect → bootstrap schema → serve → disconnect.

    with lifespan() as users:
        users.create_user("a@x.com", "A", "B")
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from user_store.core.config import Settings, get_settings
from user_store.core.log import configure_logging
from user_store.dao.user_dao import UserDAO
from user_store.db.connection import ConnectionManager
from user_store.db.schema import SchemaBootstrapper
from user_store.services.user_service import UserService

logger = logging.getLogger("user_store.main")


def build_connection_manager(settings: Settings) -> ConnectionManager:
    return ConnectionManager(
        connect_timeout=settings.db_connect_timeout_seconds,
        request_timeout=settings.db_request_timeout_seconds,
        consistency_level=settings.db_consistency_level,
    )


@contextmanager
def lifespan(settings: Settings | None = None) -> Iterator[UserService]:
    """
    Startup: connect and bootstrap the schema; both failures are fatal and
    propagate. Yields a ready UserService. Shutdown: always disconnect.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)
    descriptor = settings.connection_descriptor()
    logger.info("Starting %s %s", settings.app_name, settings.app_version)

    connections = build_connection_manager(settings)
    session = connections.connect(descriptor)
    try:
        SchemaBootstrapper(session, descriptor.keyspace).bootstrap()
        dao = UserDAO(session, request_timeout=connections.request_timeout)
        logger.info("User store ready (keyspace=%s)", descriptor.keyspace)
        yield UserService(dao, conditional_writes=settings.db_conditional_writes)
    finally:
        connections.disconnect()
