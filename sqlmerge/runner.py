"""Execution helpers that hand rendered statements to a runner.

A runner is any object with ``execute(sql, args)`` and ``query(sql, args)``;
``query_row(sql, args)`` is an optional capability. :class:`DBAPIRunner`
adapts a DB-API 2.0 connection to that protocol.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional

from sqlmerge.exceptions import RunnerLacksQueryRowCapabilityError
from sqlmerge.typing import QueryRower
from sqlmerge.utils.logging import correlation_context, get_logger

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlmerge.typing import Execer, Queryer, Sqlizer

__all__ = (
    "DBAPIRunner",
    "Row",
    "exec_with",
    "query_row_with",
    "query_with",
)

logger = get_logger("runner")


@dataclass(frozen=True)
class Row:
    """Result of a single-row query.

    Errors raised while preparing the query are held here and raised on the
    first :meth:`scan`, so ``query_row`` itself never fails.
    """

    row: Any = None
    error: Optional[Exception] = None

    def scan(self) -> Any:
        """Return the fetched row.

        Raises:
            Exception: The deferred error, if one was recorded.

        Returns:
            The row as produced by the runner, or None when no row matched.
        """
        if self.error is not None:
            raise self.error
        return self.row


def exec_with(runner: "Execer", statement: "Sqlizer") -> Any:
    """Render ``statement`` and execute it with ``runner``.

    Dispatch is logged under the current correlation ID, or a fresh one when
    none is set.

    Returns:
        Whatever the runner's ``execute`` returns.
    """
    sql, args = statement.to_sql()
    with correlation_context():
        logger.debug("Executing statement", extra={"extra_fields": {"sql": sql, "arg_count": len(args)}})
        return runner.execute(sql, args)


def query_with(runner: "Queryer", statement: "Sqlizer") -> Any:
    """Render ``statement`` and query it with ``runner``.

    Returns:
        Whatever the runner's ``query`` returns.
    """
    sql, args = statement.to_sql()
    with correlation_context():
        logger.debug("Querying statement", extra={"extra_fields": {"sql": sql, "arg_count": len(args)}})
        return runner.query(sql, args)


def query_row_with(runner: Any, statement: "Sqlizer") -> Row:
    """Render ``statement`` and fetch a single row with ``runner``.

    Never raises: rendering failures, runners without ``query_row`` and
    errors raised by the runner itself produce a :class:`Row` carrying the
    error.

    Returns:
        Row: The fetched row or the deferred error.
    """
    if not isinstance(runner, QueryRower):
        return Row(error=RunnerLacksQueryRowCapabilityError())
    try:
        sql, args = statement.to_sql()
        with correlation_context():
            logger.debug("Querying single row", extra={"extra_fields": {"sql": sql, "arg_count": len(args)}})
            row = runner.query_row(sql, args)
    except Exception as exc:  # noqa: BLE001
        return Row(error=exc)
    return Row(row=row)


class DBAPIRunner:
    """Runner backed by a DB-API 2.0 connection.

    The connection's driver must accept the placeholder format the
    statements are rendered with. Cursors opened by :meth:`execute` and
    :meth:`query_row` are closed before returning; the cursor returned by
    :meth:`query` belongs to the caller, who must close it.
    """

    __slots__ = ("connection",)

    def __init__(self, connection: Any) -> None:
        self.connection = connection

    def execute(self, sql: str, args: "Sequence[Any]") -> int:
        """Execute and return the number of affected rows."""
        cursor = self.connection.cursor()
        try:
            cursor.execute(sql, tuple(args))
            return cursor.rowcount
        finally:
            cursor.close()

    def query(self, sql: str, args: "Sequence[Any]") -> Any:
        """Execute and return the open cursor for iteration."""
        cursor = self.connection.cursor()
        cursor.execute(sql, tuple(args))
        return cursor

    def query_row(self, sql: str, args: "Sequence[Any]") -> Any:
        cursor = self.connection.cursor()
        try:
            cursor.execute(sql, tuple(args))
            return cursor.fetchone()
        finally:
            cursor.close()
