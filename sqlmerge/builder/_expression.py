"""Rendering atoms shared by the statement builders.

An :class:`Expression` is raw SQL text plus positional arguments. Arguments
that are themselves renderable are spliced in place of their ``?`` marker, so
sub-statements compose without reordering arguments.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from io import StringIO
from typing import TYPE_CHECKING, Any

from sqlglot import exp

from sqlmerge.exceptions import SQLBuilderError
from sqlmerge.parameters import iter_placeholder_positions
from sqlmerge.typing import RawSqlizer, Sqlizer

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlglot.dialects.dialect import DialectType

    from sqlmerge.typing import SQLArgs, SQLPart

__all__ = (
    "ClauseList",
    "Expression",
    "Predicate",
    "append_part",
    "expr",
    "is_sql_part",
    "sqlize",
)


def is_sql_part(value: Any) -> bool:
    """Check whether ``value`` renders to SQL rather than binding as a value.

    Returns:
        True for sqlglot expressions and objects exposing ``to_sql``.
    """
    return isinstance(value, (exp.Expression, Sqlizer))


def sqlize(part: "SQLPart", dialect: "DialectType" = None) -> "tuple[str, SQLArgs]":
    """Render any accepted clause value to SQL text and arguments.

    Nested builders are rendered without their own placeholder rewrite; the
    outermost statement numbers every marker once.

    Args:
        part: A sqlglot expression or an object with ``to_sql``.
        dialect: sqlglot dialect used when ``part`` is a sqlglot expression.

    Raises:
        SQLBuilderError: If ``part`` cannot be rendered.

    Returns:
        The SQL text and its positional arguments.
    """
    if isinstance(part, exp.Expression):
        return part.sql(dialect=dialect), []
    if isinstance(part, RawSqlizer):
        sql, args = part.to_sql_raw()
        return sql, list(args)
    if isinstance(part, Sqlizer):
        sql, args = part.to_sql()
        return sql, list(args)
    msg = f"Cannot render {type(part).__name__!r} as SQL"
    raise SQLBuilderError(msg)


def append_part(part: "SQLPart", buffer: StringIO, args: "SQLArgs", dialect: "DialectType" = None) -> "SQLArgs":
    """Write ``part`` into ``buffer`` and extend ``args`` with its arguments.

    Returns:
        The same ``args`` list, extended.
    """
    if isinstance(part, (Expression, Predicate)):
        return part.append_to_sql(buffer, args, dialect)
    sql, part_args = sqlize(part, dialect)
    buffer.write(sql)
    args.extend(part_args)
    return args


@dataclass(frozen=True)
class Expression:
    """Raw SQL text with positional arguments.

    The number of ``?`` markers in ``sql`` is expected to match ``args``;
    this is not validated.
    """

    sql: str
    args: "tuple[Any, ...]" = ()

    def to_sql(self) -> "tuple[str, SQLArgs]":
        buffer = StringIO()
        args = self.append_to_sql(buffer, [])
        return buffer.getvalue(), args

    def append_to_sql(self, buffer: StringIO, args: "SQLArgs", dialect: "DialectType" = None) -> "SQLArgs":
        """Write the expression text and collect its arguments.

        Args:
            buffer: Shared output buffer.
            args: Running argument list, extended in place.
            dialect: sqlglot dialect for nested sqlglot expressions.

        Returns:
            The same ``args`` list, extended.
        """
        if not any(is_sql_part(value) for value in self.args):
            buffer.write(self.sql)
            args.extend(self.args)
            return args

        cursor = 0
        positions: Iterator[int] = iter_placeholder_positions(self.sql)
        for value in self.args:
            position = next(positions, None)
            if position is None or not is_sql_part(value):
                args.append(value)
                continue
            buffer.write(self.sql[cursor:position])
            append_part(value, buffer, args, dialect)
            cursor = position + 1
        buffer.write(self.sql[cursor:])
        return args


def expr(sql: str, *args: Any) -> Expression:
    """Build an :class:`Expression` from SQL text and positional arguments.

    Example:
        ```python
        expr("UPDATE SET total = total + ?", 5)
        expr("EXISTS(?)", expr("SELECT 1 FROM t WHERE id = ?", 1))
        ```

    Returns:
        Expression: The new expression.
    """
    return Expression(sql, args)


@dataclass(frozen=True)
class ClauseList:
    """Ordered sequence of renderables joined by a separator."""

    parts: "tuple[SQLPart, ...]" = ()

    def __len__(self) -> int:
        return len(self.parts)

    def __iter__(self) -> "Iterator[SQLPart]":
        return iter(self.parts)

    def append(self, *parts: "SQLPart") -> "ClauseList":
        return ClauseList((*self.parts, *parts))

    def append_to_sql(
        self, buffer: StringIO, sep: str, args: "SQLArgs", dialect: "DialectType" = None
    ) -> "SQLArgs":
        """Render every part in order with ``sep`` between them.

        Parts rendering to empty text are skipped and get no separator. An
        empty list writes nothing; callers decide on surrounding keywords.

        Returns:
            The same ``args`` list, extended.
        """
        written = False
        for part in self.parts:
            part_buffer = StringIO()
            part_args = append_part(part, part_buffer, [], dialect)
            part_sql = part_buffer.getvalue()
            if not part_sql:
                continue
            if written:
                buffer.write(sep)
            buffer.write(part_sql)
            args.extend(part_args)
            written = True
        return args


@dataclass(frozen=True)
class Predicate:
    """A boolean condition in one of the accepted forms.

    * a SQL string with trailing positional arguments,
    * any renderable (an :class:`Expression`, a builder or a sqlglot expression),
    * a mapping of column to value, rendered as ANDed equalities with keys sorted.
    """

    pred: Any
    args: "tuple[Any, ...]" = field(default=())

    def __post_init__(self) -> None:
        if isinstance(self.pred, (str, Mapping)) or is_sql_part(self.pred):
            return
        msg = f"Expected a string, mapping or SQL expression predicate, got {type(self.pred).__name__!r}"
        raise SQLBuilderError(msg)

    def to_sql(self) -> "tuple[str, SQLArgs]":
        buffer = StringIO()
        args = self.append_to_sql(buffer, [])
        return buffer.getvalue(), args

    def append_to_sql(self, buffer: StringIO, args: "SQLArgs", dialect: "DialectType" = None) -> "SQLArgs":
        if isinstance(self.pred, str):
            return Expression(self.pred, self.args).append_to_sql(buffer, args, dialect)
        if isinstance(self.pred, Mapping):
            return _append_equalities(self.pred, buffer, args)
        return append_part(self.pred, buffer, args, dialect)


def _append_equalities(columns: "Mapping[str, Any]", buffer: StringIO, args: "SQLArgs") -> "SQLArgs":
    if not columns:
        buffer.write("(1=1)")
        return args

    clauses: list[str] = []
    for column in sorted(columns):
        value = columns[column]
        if value is None:
            clauses.append(f"{column} IS NULL")
        elif isinstance(value, (list, tuple)):
            if not value:
                clauses.append("(1=0)")
                continue
            markers = ",".join("?" * len(value))
            clauses.append(f"{column} IN ({markers})")
            args.extend(value)
        else:
            clauses.append(f"{column} = ?")
            args.append(value)
    buffer.write(" AND ".join(clauses))
    return args
