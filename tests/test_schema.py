from __future__ import annotations

import pytest
from cassandra import InvalidRequest, OperationTimedOut

from tests.fakes import FakeSession
from user_store.core.errors import SchemaError
from user_store.db.schema import SchemaBootstrapper, validate_identifier


def test_bootstrap_creates_keyspace_table_and_index_in_order() -> None:
    session = FakeSession()
    SchemaBootstrapper(session, "express_db").bootstrap()

    assert [q.split(" (")[0] for q in session.executed] == [
        "CREATE KEYSPACE IF NOT EXISTS express_db WITH replication = {'class': 'SimpleStrategy', 'replication_factor': 1}",
        "CREATE TABLE IF NOT EXISTS users",
        "CREATE INDEX IF NOT EXISTS users_email_idx ON users",
    ]
    assert session.keyspace == "express_db"
    assert ("express_db", "users") in session.tables
    assert session.indexes[("express_db", "users_email_idx")] == ("users", "email")


def test_users_table_columns() -> None:
    session = FakeSession()
    SchemaBootstrapper(session, "express_db").bootstrap()

    definition = session.tables[("express_db", "users")]
    for column in (
        "id uuid PRIMARY KEY",
        "email text",
        "first_name text",
        "last_name text",
        "created_at timestamp",
        "updated_at timestamp",
    ):
        assert column in definition


def test_bootstrap_twice_is_idempotent() -> None:
    session = FakeSession()
    SchemaBootstrapper(session, "express_db").bootstrap()
    first = session.schema_state()

    SchemaBootstrapper(session, "express_db").bootstrap()

    assert session.schema_state() == first


@pytest.mark.parametrize(
    "name",
    ["", "bad-name", "ks; DROP KEYSPACE system", "ks name", "k" * 49, None],
)
def test_invalid_keyspace_rejected_before_any_statement(name) -> None:
    session = FakeSession()
    with pytest.raises(SchemaError):
        SchemaBootstrapper(session, name)
    assert session.executed == []


def test_validate_identifier_accepts_plain_names() -> None:
    assert validate_identifier("express_db") == "express_db"
    assert validate_identifier("Users2") == "Users2"


def test_failed_step_is_fatal_and_named() -> None:
    session = FakeSession()
    session.fail_on("CREATE TABLE", InvalidRequest("boom"))

    with pytest.raises(SchemaError, match="create users table") as excinfo:
        SchemaBootstrapper(session, "express_db").bootstrap()

    assert isinstance(excinfo.value.__cause__, InvalidRequest)
    assert not any(q.startswith("CREATE INDEX") for q in session.executed)


def test_keyspace_timeout_surfaces_as_schema_error() -> None:
    session = FakeSession()
    session.fail_on("CREATE KEYSPACE", OperationTimedOut("no answer"))

    with pytest.raises(SchemaError, match="create keyspace"):
        SchemaBootstrapper(session, "express_db").bootstrap()
    assert session.keyspace is None
