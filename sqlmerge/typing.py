from collections.abc import Sequence
from typing import Any, Protocol, Union, runtime_checkable

from sqlglot import exp
from typing_extensions import TypeAlias

__all__ = (
    "Execer",
    "QueryRower",
    "Queryer",
    "RawSqlizer",
    "Runner",
    "SQLArgs",
    "SQLPart",
    "Sqlizer",
)

SQLArgs: TypeAlias = "list[Any]"
"""Positional statement arguments, in placeholder order."""


@runtime_checkable
class Sqlizer(Protocol):
    """Anything that renders to SQL text plus positional arguments."""

    def to_sql(self) -> "tuple[str, SQLArgs]": ...  # pragma: no cover


@runtime_checkable
class RawSqlizer(Protocol):
    """A renderable that can skip its own placeholder rewrite when nested."""

    def to_sql_raw(self) -> "tuple[str, SQLArgs]": ...  # pragma: no cover


SQLPart: TypeAlias = Union[Sqlizer, exp.Expression]
"""Any value accepted where a renderable clause is expected."""


@runtime_checkable
class Execer(Protocol):
    """Runs statements that return no rows."""

    def execute(self, sql: str, args: "Sequence[Any]") -> Any: ...  # pragma: no cover


@runtime_checkable
class Queryer(Protocol):
    """Runs statements that return a row stream."""

    def query(self, sql: str, args: "Sequence[Any]") -> Any: ...  # pragma: no cover


@runtime_checkable
class QueryRower(Protocol):
    """Runs statements that return at most one row."""

    def query_row(self, sql: str, args: "Sequence[Any]") -> Any: ...  # pragma: no cover


@runtime_checkable
class Runner(Execer, Queryer, Protocol):
    """Execution backend able to execute statements and query rows."""
