from sqlmerge import exceptions
from sqlmerge._sql import StatementBuilder, merge, sql
from sqlmerge.builder import ClauseList, Expression, MergeBuilder, MergeData, Predicate, expr
from sqlmerge.config import StatementConfig, placeholder_format_for_dialect
from sqlmerge.parameters import AT_P, COLON, DOLLAR, QUESTION, PlaceholderFormat
from sqlmerge.runner import DBAPIRunner, Row, exec_with, query_row_with, query_with

__all__ = (
    "AT_P",
    "COLON",
    "DOLLAR",
    "QUESTION",
    "ClauseList",
    "DBAPIRunner",
    "Expression",
    "MergeBuilder",
    "MergeData",
    "PlaceholderFormat",
    "Predicate",
    "Row",
    "StatementBuilder",
    "StatementConfig",
    "exceptions",
    "exec_with",
    "expr",
    "merge",
    "placeholder_format_for_dialect",
    "query_row_with",
    "query_with",
    "sql",
)
