"""Immutable MERGE statement builder.

Every configuration call returns a new :class:`MergeBuilder` wrapping a new
:class:`MergeData` snapshot; the receiver is never modified, so any
intermediate builder can be shared and extended independently.
"""

from dataclasses import dataclass, field, replace
from io import StringIO
from typing import TYPE_CHECKING, Any, Optional, Union

from sqlglot.dialects.dialect import DialectType

from sqlmerge.builder._expression import ClauseList, Expression, Predicate, append_part
from sqlmerge.exceptions import (
    MissingOnClauseError,
    MissingTargetError,
    MissingUsingClauseError,
    RunnerNotSetError,
)
from sqlmerge.parameters import PlaceholderFormat
from sqlmerge.runner import Row, exec_with, query_row_with, query_with
from sqlmerge.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Mapping

    from sqlmerge.typing import Runner, SQLArgs, SQLPart

__all__ = (
    "MergeBuilder",
    "MergeData",
)

logger = get_logger("builder.merge")


@dataclass(frozen=True)
class MergeData:
    """Full state of one MERGE statement.

    ``table``, ``using`` and ``on`` are required at render time; every other
    clause is optional and omitted entirely when unset.
    """

    placeholder_format: PlaceholderFormat = PlaceholderFormat.QUESTION
    runner: "Optional[Runner]" = None
    dialect: DialectType = None
    prefixes: ClauseList = field(default_factory=ClauseList)
    table: str = ""
    using: "Optional[SQLPart]" = None
    on: Optional[Predicate] = None
    when_matched: "Optional[SQLPart]" = None
    when_not_matched: "Optional[SQLPart]" = None
    suffixes: ClauseList = field(default_factory=ClauseList)
    output: "tuple[str, ...]" = ()
    output_into: str = ""

    def with_field(self, name: str, value: Any) -> "MergeData":
        """Return a copy with one field set."""
        return replace(self, **{name: value})

    def append(self, name: str, *values: Any) -> "MergeData":
        """Return a copy with ``values`` appended to one sequence field."""
        current = getattr(self, name)
        if isinstance(current, ClauseList):
            return replace(self, **{name: current.append(*values)})
        return replace(self, **{name: (*current, *values)})

    def _validate(self) -> None:
        if not self.table:
            raise MissingTargetError
        if self.using is None:
            raise MissingUsingClauseError
        if self.on is None:
            raise MissingOnClauseError

    def to_sql_raw(self) -> "tuple[str, SQLArgs]":
        """Render the statement keeping ``?`` markers.

        Raises:
            MissingTargetError: If no target table is set.
            MissingUsingClauseError: If no USING source is set.
            MissingOnClauseError: If no ON condition is set.

        Returns:
            The SQL text and its positional arguments in marker order.
        """
        self._validate()

        sql = StringIO()
        args: SQLArgs = []

        if self.prefixes:
            self.prefixes.append_to_sql(sql, " ", args, self.dialect)
            sql.write(" ")

        sql.write("MERGE INTO ")
        sql.write(self.table)

        sql.write(" USING ")
        append_part(self.using, sql, args, self.dialect)  # type: ignore[arg-type]

        sql.write(" ON ")
        append_part(self.on, sql, args, self.dialect)  # type: ignore[arg-type]

        if self.when_matched is not None:
            sql.write(" WHEN MATCHED THEN ")
            append_part(self.when_matched, sql, args, self.dialect)

        if self.when_not_matched is not None:
            sql.write(" WHEN NOT MATCHED THEN ")
            append_part(self.when_not_matched, sql, args, self.dialect)

        if self.output:
            sql.write(" OUTPUT ")
            sql.write(",".join(self.output))

        if self.output_into:
            sql.write(" INTO ")
            sql.write(self.output_into)

        if self.suffixes:
            sql.write(" ")
            self.suffixes.append_to_sql(sql, " ", args, self.dialect)

        sql.write(";")
        return sql.getvalue(), args

    def to_sql(self) -> "tuple[str, SQLArgs]":
        """Render the statement with the configured placeholder format.

        The placeholder rewrite runs once over the whole statement so markers
        are numbered across every clause.

        Raises:
            MissingTargetError: If no target table is set.
            MissingUsingClauseError: If no USING source is set.
            MissingOnClauseError: If no ON condition is set.
            PlaceholderFormatError: If the format rejects the assembled SQL.

        Returns:
            The SQL text and its positional arguments in placeholder order.
        """
        raw_sql, args = self.to_sql_raw()
        sql = self.placeholder_format.replace_placeholders(raw_sql)
        logger.debug(
            "Rendered MERGE statement",
            extra={
                "extra_fields": {
                    "sql": sql,
                    "arg_count": len(args),
                    "placeholder_format": str(self.placeholder_format),
                }
            },
        )
        return sql, args

    def execute(self) -> Any:
        """Execute the statement with the configured runner.

        Raises:
            RunnerNotSetError: If no runner is configured.

        Returns:
            The runner's result, unchanged.
        """
        if self.runner is None:
            raise RunnerNotSetError
        return exec_with(self.runner, self)

    def query(self) -> Any:
        """Query the statement with the configured runner.

        Raises:
            RunnerNotSetError: If no runner is configured.

        Returns:
            The runner's row stream, unchanged.
        """
        if self.runner is None:
            raise RunnerNotSetError
        return query_with(self.runner, self)

    def query_row(self) -> Row:
        """Fetch one row with the configured runner.

        Never raises; a missing runner, a runner without ``query_row`` or a
        rendering failure is carried by the returned row and raised on
        :meth:`Row.scan`.

        Returns:
            Row: The fetched row or the deferred error.
        """
        if self.runner is None:
            return Row(error=RunnerNotSetError())
        return query_row_with(self.runner, self)


@dataclass(frozen=True)
class MergeBuilder:
    """Builder for MERGE statements.

    Example:
        ```python
        sql, args = (
            merge("users AS t")
            .using(expr("(SELECT ? AS id, ? AS name) AS s", 1, "alice"))
            .on("s.id = t.id")
            .when_matched(expr("UPDATE SET name = s.name"))
            .when_not_matched(expr("INSERT (id, name) VALUES (s.id, s.name)"))
            .placeholder_format(DOLLAR)
            .to_sql()
        )
        ```
    """

    data: MergeData = field(default_factory=MergeData)

    def _set(self, name: str, value: Any) -> "MergeBuilder":
        return MergeBuilder(self.data.with_field(name, value))

    def _append(self, name: str, *values: Any) -> "MergeBuilder":
        return MergeBuilder(self.data.append(name, *values))

    # Format methods

    def placeholder_format(self, placeholder_format: PlaceholderFormat) -> "MergeBuilder":
        """Set the placeholder format (e.g. ``QUESTION`` or ``DOLLAR``) for the statement.

        Returns:
            MergeBuilder: A new builder.
        """
        return self._set("placeholder_format", placeholder_format)

    def dialect(self, dialect: DialectType) -> "MergeBuilder":
        """Set the sqlglot dialect used to render sqlglot expression clauses."""
        return self._set("dialect", dialect)

    def run_with(self, runner: "Runner") -> "MergeBuilder":
        """Set the runner used by :meth:`execute`, :meth:`query` and :meth:`query_row`."""
        return self._set("runner", runner)

    # SQL methods

    def to_sql(self) -> "tuple[str, SQLArgs]":
        """Build the statement into a SQL string and bound args."""
        return self.data.to_sql()

    def to_sql_raw(self) -> "tuple[str, SQLArgs]":
        """Build the statement without rewriting ``?`` markers, for nesting."""
        return self.data.to_sql_raw()

    def prefix(self, sql: str, *args: Any) -> "MergeBuilder":
        """Add an expression to the beginning of the statement.

        Returns:
            MergeBuilder: A new builder.
        """
        return self.prefix_expr(Expression(sql, args))

    def prefix_expr(self, expression: "SQLPart") -> "MergeBuilder":
        """Add a renderable to the beginning of the statement."""
        return self._append("prefixes", expression)

    def table(self, table: str) -> "MergeBuilder":
        """Set the target table. The name is written as given, without quoting."""
        return self._set("table", table)

    def using(self, expression: "SQLPart") -> "MergeBuilder":
        """Set the USING source.

        Args:
            expression: An :class:`Expression`, a nested builder or a sqlglot expression.

        Returns:
            MergeBuilder: A new builder.
        """
        return self._set("using", expression)

    def on(self, pred: "Union[str, Mapping[str, Any], SQLPart]", *args: Any) -> "MergeBuilder":
        """Set the ON condition.

        Args:
            pred: SQL text with ``?`` markers, a renderable, or a mapping of
                column to value rendered as ANDed equalities.
            *args: Positional arguments for a SQL text predicate.

        Raises:
            SQLBuilderError: If ``pred`` is not a supported predicate type.

        Returns:
            MergeBuilder: A new builder.
        """
        return self._set("on", Predicate(pred, args))

    def when_matched(self, expression: "SQLPart") -> "MergeBuilder":
        """Set the action for rows matched by the ON condition."""
        return self._set("when_matched", expression)

    def when_not_matched(self, expression: "SQLPart") -> "MergeBuilder":
        """Set the action for source rows with no match in the target."""
        return self._set("when_not_matched", expression)

    def output(self, *columns: str) -> "MergeBuilder":
        """Add OUTPUT columns."""
        return self._append("output", *columns)

    def output_into(self, into: str, *columns: str) -> "MergeBuilder":
        """Set the OUTPUT ... INTO target and add OUTPUT columns."""
        return self._set("output_into", into).output(*columns)

    def suffix(self, sql: str, *args: Any) -> "MergeBuilder":
        """Add an expression to the end of the statement.

        Returns:
            MergeBuilder: A new builder.
        """
        return self.suffix_expr(Expression(sql, args))

    def suffix_expr(self, expression: "SQLPart") -> "MergeBuilder":
        """Add a renderable after the terminating semicolon."""
        return self._append("suffixes", expression)

    # Execution methods

    def execute(self) -> Any:
        """Execute the statement with the configured runner."""
        return self.data.execute()

    def query(self) -> Any:
        """Query the statement with the configured runner."""
        return self.data.query()

    def query_row(self) -> Row:
        """Fetch one row; errors are deferred to :meth:`Row.scan`."""
        return self.data.query_row()

    def scan(self) -> Any:
        """Fetch one row and return it, raising any deferred error."""
        return self.query_row().scan()
