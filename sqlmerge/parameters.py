"""Placeholder formats for positional statement parameters.

Statements are assembled with database-agnostic ``?`` markers. A
:class:`PlaceholderFormat` rewrites those markers into the syntax the target
driver expects, numbering them across the whole statement.
"""

import re
from enum import Enum
from typing import TYPE_CHECKING, Final

from sqlmerge.exceptions import PlaceholderFormatError
from sqlmerge.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterator

__all__ = (
    "AT_P",
    "COLON",
    "DOLLAR",
    "QUESTION",
    "PlaceholderFormat",
    "iter_placeholder_positions",
)

logger = get_logger("parameters")

# Literals and comments are matched first so markers inside them are skipped.
# Standard literals only escape by doubling the quote; backslash escapes are
# recognised in E'...' strings alone.
_PLACEHOLDER_REGEX: Final = re.compile(
    r"""
    (?P<dquote>"(?:[^"]|"")*") |
    (?P<escape_string>(?<![\w$])[eE]'(?:[^'\\]|\\[\s\S]|'')*') |
    (?P<squote>'(?:[^']|'')*') |
    (?P<dollar_quoted_string>\$(?P<dollar_quote_tag>\w*)\$[\s\S]*?\$(?P=dollar_quote_tag)\$) |
    (?P<line_comment>--[^\r\n]*) |
    (?P<block_comment>/\*(?:[^*]|\*(?!/))*\*/) |
    (?P<unterminated>(?<![\w$])[eE]'|["']|/\*) |
    (?P<escaped_qmark>\?\?) |
    (?P<qmark>\?)
    """,
    re.VERBOSE,
)


class PlaceholderFormat(Enum):
    """Dialect placeholder syntax for positional parameters."""

    QUESTION = ""
    """``?`` markers, passed through untouched."""

    DOLLAR = "$"
    """``$1, $2, ...`` (PostgreSQL)."""

    COLON = ":"
    """``:1, :2, ...`` (Oracle)."""

    AT_P = "@p"
    """``@p1, @p2, ...`` (SQL Server)."""

    def __str__(self) -> str:
        """String representation for better error messages.

        Returns:
            Lowercase name of the format.
        """
        return self.name.lower()

    @property
    def prefix(self) -> str:
        return self.value

    def replace_placeholders(self, sql: str) -> str:
        """Rewrite every ``?`` marker in ``sql`` for this format.

        Markers are numbered from 1 in order of appearance. ``??`` is an
        escaped literal ``?``. Markers inside quoted literals and comments are
        left as they are.

        Args:
            sql: The fully assembled statement.

        Raises:
            PlaceholderFormatError: If a quoted literal or block comment is never closed.

        Returns:
            The statement using this format's placeholders.
        """
        if self is PlaceholderFormat.QUESTION:
            return sql

        position = 0

        def _substitute(match: "re.Match[str]") -> str:
            nonlocal position
            if match.group("qmark"):
                position += 1
                return f"{self.prefix}{position}"
            if match.group("escaped_qmark"):
                return "?"
            if match.group("unterminated"):
                token, offset = match.group(0), match.start()
                logger.debug("Unterminated %r at offset %d while formatting placeholders", token, offset)
                msg = f"Unterminated {token!r} at offset {offset}; cannot rewrite placeholders as {self}"
                raise PlaceholderFormatError(msg, sql)
            return match.group(0)

        return _PLACEHOLDER_REGEX.sub(_substitute, sql)


QUESTION: Final = PlaceholderFormat.QUESTION
DOLLAR: Final = PlaceholderFormat.DOLLAR
COLON: Final = PlaceholderFormat.COLON
AT_P: Final = PlaceholderFormat.AT_P


def iter_placeholder_positions(sql: str) -> "Iterator[int]":
    """Yield the offset of every unescaped ``?`` marker outside literals and comments.

    Args:
        sql: SQL text using ``?`` markers.

    Yields:
        Character offsets, left to right.
    """
    for match in _PLACEHOLDER_REGEX.finditer(sql):
        if match.group("qmark"):
            yield match.start()
