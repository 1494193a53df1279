"""Statement factory seeding new builders with shared defaults.

This module provides the ``sql`` factory object and the ``merge`` shortcut:

```python
from sqlmerge import DOLLAR, StatementBuilder, expr

psql = StatementBuilder().placeholder_format(DOLLAR)
query, args = psql.merge("users").using(expr("staged")).on("staged.id = users.id").to_sql()
```
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from sqlglot.dialects.dialect import DialectType

from sqlmerge.builder import MergeBuilder, MergeData
from sqlmerge.config import StatementConfig

if TYPE_CHECKING:
    from sqlmerge.parameters import PlaceholderFormat
    from sqlmerge.typing import Runner

__all__ = (
    "StatementBuilder",
    "merge",
    "sql",
)


@dataclass(frozen=True)
class StatementBuilder:
    """Immutable factory for statement builders sharing one configuration."""

    config: StatementConfig = field(default_factory=StatementConfig)

    @classmethod
    def for_dialect(cls, dialect: DialectType, runner: "Optional[Runner]" = None) -> "StatementBuilder":
        """Create a factory whose placeholder format follows a sqlglot dialect.

        Raises:
            ImproperConfigurationError: If sqlglot does not know the dialect.

        Returns:
            StatementBuilder: The new factory.
        """
        return cls(StatementConfig.from_dialect(dialect, runner=runner))

    def placeholder_format(self, placeholder_format: "PlaceholderFormat") -> "StatementBuilder":
        return StatementBuilder(self.config.replace(placeholder_format=placeholder_format))

    def run_with(self, runner: "Runner") -> "StatementBuilder":
        return StatementBuilder(self.config.replace(runner=runner))

    def dialect(self, dialect: DialectType) -> "StatementBuilder":
        return StatementBuilder(self.config.replace(dialect=dialect))

    def merge(self, table: str) -> MergeBuilder:
        """Create a MERGE builder targeting ``table``.

        Args:
            table: The MERGE target, written as given.

        Returns:
            MergeBuilder: A new builder seeded with this factory's configuration.
        """
        data = MergeData(
            placeholder_format=self.config.placeholder_format,
            runner=self.config.runner,
            dialect=self.config.dialect,
            table=table,
        )
        return MergeBuilder(data)


sql = StatementBuilder()


def merge(table: str) -> MergeBuilder:
    """Create a MERGE builder targeting ``table`` with default configuration.

    Returns:
        MergeBuilder: A new builder.
    """
    return sql.merge(table)
