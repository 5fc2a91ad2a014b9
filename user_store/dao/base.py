import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Iterator, Sequence

from cassandra import DriverException, OperationTimedOut, Timeout
from cassandra.cluster import NoHostAvailable

from user_store.core.errors import QueryError, QueryTimeoutError

logger = logging.getLogger("user_store.dao")


def utc_now() -> datetime:
    """Current UTC time truncated to the store's millisecond precision."""
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond - now.microsecond % 1000)


def _to_python(obj: Any) -> Any:
    """Driver timestamps come back naive; they are always UTC."""
    if isinstance(obj, datetime) and obj.tzinfo is None:
        return obj.replace(tzinfo=timezone.utc)
    if isinstance(obj, dict):
        return {k: _to_python(v) for k, v in obj.items()}
    return obj


@contextmanager
def driver_errors(action: str) -> Iterator[None]:
    """
    Translate driver faults raised inside the block: timeouts to
    QueryTimeoutError, anything else to QueryError. `action` names the
    operation in messages and logs.
    """
    try:
        yield
    except (OperationTimedOut, Timeout) as exc:
        logger.error("Timed out %s", action, exc_info=True)
        raise QueryTimeoutError(f"Timed out {action}") from exc
    except (NoHostAvailable, DriverException) as exc:
        logger.error("Error %s", action, exc_info=True)
        raise QueryError(f"Error {action}") from exc


class BaseDAO:
    def __init__(self, session: Any, request_timeout: float | None = None) -> None:
        self._session = session
        self._timeout = request_timeout
        self._prepared: dict[str, Any] = {}

    def _clean(self, row: dict[str, Any]) -> dict[str, Any]:
        return _to_python(row)

    def _prepare(self, query: str) -> Any:
        stmt = self._prepared.get(query)
        if stmt is None:
            stmt = self._session.prepare(query)
            self._prepared[query] = stmt
        return stmt

    def _send(self, stmt: Any, params: Sequence[Any]) -> Any:
        # Without an explicit timeout the execution profile's request_timeout applies.
        if self._timeout is None:
            return self._session.execute(stmt, list(params))
        return self._session.execute(stmt, list(params), timeout=self._timeout)

    def _execute(self, action: str, query: str, params: Sequence[Any] = ()) -> Any:
        """Prepare (once) and execute query with bound params."""
        with driver_errors(action):
            stmt = self._prepare(query)
            return self._send(stmt, params)

    def _fetch(
        self, action: str, query: str, params: Sequence[Any] = ()
    ) -> list[dict[str, Any]]:
        """
        Execute and drain every page. Later pages are fetched while iterating,
        so draining stays inside the error translation: no partial results.
        """
        with driver_errors(action):
            stmt = self._prepare(query)
            result = self._send(stmt, params)
            return [self._clean(row) for row in result]

    def _build_set_clause(
        self, fields: dict[str, Any]
    ) -> tuple[str, list[Any]]:
        """
        Build a CQL SET clause from a flat dict of {column: value}.

        Returns ("SET a = ?, b = ?", [value_a, value_b]). Column names come
        from the DAO's own mapping, never from caller input.
        """
        parts: list[str] = []
        values: list[Any] = []

        for column, val in fields.items():
            parts.append(f"{column} = ?")
            values.append(val)

        return "SET " + ", ".join(parts), values

    @staticmethod
    def _was_applied(result: Any) -> bool:
        """Read the [applied] flag of a conditional (IF EXISTS) statement."""
        return bool(result.was_applied)
