"""Tests for execution helpers and the DB-API runner."""

import logging
import sqlite3
from collections.abc import Iterator
from unittest.mock import Mock

import pytest

from sqlmerge import DBAPIRunner, Row, exec_with, expr, query_row_with, query_with
from sqlmerge.exceptions import MissingOnClauseError, RunnerLacksQueryRowCapabilityError
from sqlmerge.typing import QueryRower, Runner
from sqlmerge.utils.logging import correlation_context, get_correlation_id


@pytest.fixture
def connection() -> Iterator[sqlite3.Connection]:
    conn = sqlite3.connect(":memory:")
    yield conn
    conn.close()


def test_row_scan_returns_row() -> None:
    assert Row(row=(1, "a")).scan() == (1, "a")
    assert Row().scan() is None


def test_row_scan_raises_deferred_error() -> None:
    row = Row(error=ValueError("deferred"))
    with pytest.raises(ValueError, match="deferred"):
        row.scan()


def test_exec_with_renders_statement(runner) -> None:
    assert exec_with(runner, expr("DELETE FROM t WHERE id = ?", 1)) == "exec-result"
    assert runner.calls == [("execute", "DELETE FROM t WHERE id = ?", [1])]


def test_query_with_renders_statement(runner) -> None:
    assert query_with(runner, expr("SELECT * FROM t WHERE id = ?", 1)) == "rows"
    assert runner.calls == [("query", "SELECT * FROM t WHERE id = ?", [1])]


def test_query_row_with_requires_capability() -> None:
    runner = Mock(spec=["execute", "query"])

    row = query_row_with(runner, expr("SELECT 1"))

    assert isinstance(row.error, RunnerLacksQueryRowCapabilityError)
    runner.execute.assert_not_called()


def test_query_row_with_defers_render_errors(row_runner) -> None:
    statement = Mock(spec=["to_sql"])
    statement.to_sql.side_effect = MissingOnClauseError()

    row = query_row_with(row_runner, statement)

    with pytest.raises(MissingOnClauseError):
        row.scan()
    assert row_runner.calls == []


def test_query_row_with_defers_runner_errors() -> None:
    runner = Mock(spec=["execute", "query", "query_row"])
    runner.query_row.side_effect = sqlite3.OperationalError("no such table: users")

    row = query_row_with(runner, expr("SELECT name FROM users WHERE id = ?", 1))

    with pytest.raises(sqlite3.OperationalError, match="no such table"):
        row.scan()
    runner.query_row.assert_called_once_with("SELECT name FROM users WHERE id = ?", [1])


def test_dispatch_logs_carry_correlation_id(runner, caplog) -> None:
    with caplog.at_level(logging.DEBUG, logger="sqlmerge.runner"):
        exec_with(runner, expr("DELETE FROM t"))
        with correlation_context("req-42"):
            query_with(runner, expr("SELECT 1"))

    executed, queried = (r for r in caplog.records if r.name == "sqlmerge.runner")
    assert executed.correlation_id
    assert executed.correlation_id != "req-42"
    assert queried.correlation_id == "req-42"
    assert get_correlation_id() is None


def test_runner_capabilities(runner, row_runner) -> None:
    assert isinstance(runner, Runner)
    assert not isinstance(runner, QueryRower)
    assert isinstance(row_runner, QueryRower)
    assert isinstance(DBAPIRunner(None), QueryRower)


class TestDBAPIRunner:
    def test_round_trip(self, connection: sqlite3.Connection) -> None:
        runner = DBAPIRunner(connection)
        exec_with(runner, expr("CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT)"))

        affected = exec_with(runner, expr("INSERT INTO users (id, name) VALUES (?, ?)", 1, "alice"))

        assert affected == 1
        assert query_with(runner, expr("SELECT id, name FROM users WHERE id = ?", 1)).fetchall() == [(1, "alice")]

    def test_query_row(self, connection: sqlite3.Connection) -> None:
        runner = DBAPIRunner(connection)
        exec_with(runner, expr("CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT)"))
        exec_with(runner, expr("INSERT INTO users (id, name) VALUES (?, ?)", 1, "alice"))

        assert query_row_with(runner, expr("SELECT name FROM users WHERE id = ?", 1)).scan() == ("alice",)
        assert query_row_with(runner, expr("SELECT name FROM users WHERE id = ?", 2)).scan() is None

    def test_execute_closes_cursor(self) -> None:
        connection = Mock()
        cursor = connection.cursor.return_value
        cursor.rowcount = 3

        assert DBAPIRunner(connection).execute("DELETE FROM t WHERE id = ?", [1]) == 3
        cursor.execute.assert_called_once_with("DELETE FROM t WHERE id = ?", (1,))
        cursor.close.assert_called_once_with()

    def test_query_row_failure_is_deferred(self, connection: sqlite3.Connection) -> None:
        row = query_row_with(DBAPIRunner(connection), expr("SELECT name FROM missing WHERE id = ?", 1))

        with pytest.raises(sqlite3.OperationalError):
            row.scan()
