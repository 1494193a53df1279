"""Immutable SQL statement builders with positional parameter binding."""

from sqlmerge.builder._expression import ClauseList, Expression, Predicate, expr
from sqlmerge.builder._merge import MergeBuilder, MergeData

__all__ = (
    "ClauseList",
    "Expression",
    "MergeBuilder",
    "MergeData",
    "Predicate",
    "expr",
)
