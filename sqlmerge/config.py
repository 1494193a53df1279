"""Statement configuration shared by builders created from one factory."""

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Optional

from sqlglot.dialects import TSQL, Oracle, Postgres
from sqlglot.dialects.dialect import Dialect, DialectType

from sqlmerge.exceptions import ImproperConfigurationError
from sqlmerge.parameters import PlaceholderFormat
from sqlmerge.utils.logging import get_logger

if TYPE_CHECKING:
    from sqlmerge.typing import Runner

__all__ = (
    "StatementConfig",
    "placeholder_format_for_dialect",
)

logger = get_logger("config")

_DIALECT_PLACEHOLDER_FORMATS: "tuple[tuple[type[Dialect], PlaceholderFormat], ...]" = (
    (Postgres, PlaceholderFormat.DOLLAR),
    (Oracle, PlaceholderFormat.COLON),
    (TSQL, PlaceholderFormat.AT_P),
)


def placeholder_format_for_dialect(dialect: DialectType) -> PlaceholderFormat:
    """Resolve the placeholder format a sqlglot dialect's drivers expect.

    Args:
        dialect: A sqlglot dialect name, class or instance. ``None`` selects the default dialect.

    Raises:
        ImproperConfigurationError: If sqlglot does not know the dialect.

    Returns:
        PlaceholderFormat: ``DOLLAR`` for PostgreSQL and its derivatives, ``COLON`` for Oracle,
        ``AT_P`` for SQL Server and ``QUESTION`` otherwise.
    """
    try:
        resolved = Dialect.get_or_raise(dialect)
    except ValueError as exc:
        msg = f"Unknown SQL dialect {dialect!r}"
        raise ImproperConfigurationError(msg) from exc

    for dialect_class, placeholder_format in _DIALECT_PLACEHOLDER_FORMATS:
        if isinstance(resolved, dialect_class):
            return placeholder_format
    return PlaceholderFormat.QUESTION


@dataclass(frozen=True)
class StatementConfig:
    """Defaults seeded into every builder created from a factory."""

    placeholder_format: PlaceholderFormat = PlaceholderFormat.QUESTION
    runner: "Optional[Runner]" = None
    dialect: DialectType = None

    @classmethod
    def from_dialect(cls, dialect: DialectType, runner: "Optional[Runner]" = None) -> "StatementConfig":
        """Build a configuration whose placeholder format follows ``dialect``.

        Returns:
            StatementConfig: The resolved configuration.
        """
        placeholder_format = placeholder_format_for_dialect(dialect)
        logger.debug("Resolved placeholder format %s for dialect %r", placeholder_format, dialect)
        return cls(placeholder_format=placeholder_format, runner=runner, dialect=dialect)

    def replace(self, **changes: Any) -> "StatementConfig":
        return replace(self, **changes)
