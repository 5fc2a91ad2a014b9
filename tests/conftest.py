from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from tests.fakes import FakeCluster, FakeSession
from user_store.dao.user_dao import UserDAO
from user_store.db import connection as connection_module
from user_store.db.schema import SchemaBootstrapper
from user_store.services.user_service import UserService

KEYSPACE = "test_users"


@pytest.fixture()
def session() -> FakeSession:
    """A fake session with the schema already bootstrapped."""
    fake = FakeSession()
    SchemaBootstrapper(fake, KEYSPACE).bootstrap()
    fake.executed.clear()
    fake.calls.clear()
    return fake


@pytest.fixture()
def dao(session: FakeSession) -> UserDAO:
    return UserDAO(session, request_timeout=5.0)


@pytest.fixture()
def service(dao: UserDAO) -> UserService:
    return UserService(dao)


@pytest.fixture()
def conditional_service(session: FakeSession) -> UserService:
    return UserService(UserDAO(session, request_timeout=5.0), conditional_writes=True)


@pytest.fixture()
def fake_cluster(monkeypatch):
    FakeCluster.instances = []
    FakeCluster.connect_error = None
    FakeCluster.construct_error = None
    monkeypatch.setattr(connection_module, "Cluster", FakeCluster)
    yield FakeCluster
    FakeCluster.instances = []
    FakeCluster.connect_error = None
    FakeCluster.construct_error = None
