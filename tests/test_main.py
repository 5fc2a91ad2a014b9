from __future__ import annotations

import pytest
from cassandra import InvalidRequest
from cassandra.cluster import NoHostAvailable

from tests.fakes import FakeCluster, FakeSession
from user_store.core.config import Settings
from user_store.core.errors import SchemaError, StoreConnectionError
from user_store.main import lifespan


def _settings(**overrides) -> Settings:
    data = {"db_keyspace": "lifecycle_ks", "db_request_timeout_seconds": 2.5}
    data.update(overrides)
    return Settings(_env_file=None, **data)


def test_lifespan_connects_bootstraps_and_disconnects(fake_cluster) -> None:
    with lifespan(_settings()) as users:
        cluster = fake_cluster.instances[0]
        session = cluster.session
        assert session.keyspace == "lifecycle_ks"
        assert ("lifecycle_ks", "users") in session.tables

        created = users.create_user("a@x.com", "A", "B")
        assert users.get_user_by_id(created.id) == created
        assert session.calls[-1][2] == 2.5
        assert cluster.shutdown_calls == 0

    assert cluster.shutdown_calls == 1


def test_lifespan_disconnects_when_body_raises(fake_cluster) -> None:
    with pytest.raises(RuntimeError):
        with lifespan(_settings()):
            raise RuntimeError("request handler crashed")

    assert fake_cluster.instances[0].shutdown_calls == 1


def test_bootstrap_failure_is_fatal(fake_cluster, monkeypatch) -> None:
    class BrokenSession(FakeSession):
        def __init__(self) -> None:
            super().__init__()
            self.fail_on("CREATE INDEX", InvalidRequest("index creation refused"))

    monkeypatch.setattr(FakeCluster, "session_factory", BrokenSession)

    with pytest.raises(SchemaError):
        with lifespan(_settings()):
            pytest.fail("must not serve with an unverified schema")

    assert fake_cluster.instances[0].shutdown_calls == 1


def test_unreachable_cluster_is_fatal(fake_cluster) -> None:
    fake_cluster.connect_error = NoHostAvailable("Unable to connect to any servers", {})

    with pytest.raises(StoreConnectionError):
        with lifespan(_settings()):
            pytest.fail("must not start without a session")
