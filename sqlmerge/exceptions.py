from typing import Any, Optional

__all__ = (
    "ImproperConfigurationError",
    "MissingOnClauseError",
    "MissingTargetError",
    "MissingUsingClauseError",
    "ParameterError",
    "PlaceholderFormatError",
    "RunnerError",
    "RunnerLacksQueryRowCapabilityError",
    "RunnerNotSetError",
    "SQLBuilderError",
    "SQLMergeError",
)


class SQLMergeError(Exception):
    """Base exception class from which all sqlmerge exceptions inherit."""

    detail: str

    def __init__(self, *args: Any, detail: str = "") -> None:
        """Initialize ``SQLMergeError``.

        Args:
            *args: args are converted to :class:`str` before passing to :class:`Exception`
            detail: detail of the exception.
        """
        str_args = [str(arg) for arg in args if arg]
        if not detail:
            if str_args:
                detail, *str_args = str_args
            elif hasattr(self, "detail"):
                detail = self.detail
        self.detail = detail
        super().__init__(*str_args)

    def __repr__(self) -> str:
        if self.detail:
            return f"{self.__class__.__name__} - {self.detail}"
        return self.__class__.__name__

    def __str__(self) -> str:
        return " ".join((*self.args, self.detail)).strip()


class ImproperConfigurationError(SQLMergeError):
    """Improper Configuration error.

    Raised when a builder or statement configuration value cannot be resolved.
    """


# -- Statement building errors --
class SQLBuilderError(SQLMergeError):
    """Issues Building or Generating SQL statements."""

    def __init__(self, message: Optional[str] = None) -> None:
        if message is None:
            message = "Issues building SQL statement."
        super().__init__(message)


class MissingTargetError(SQLBuilderError):
    """The MERGE statement has no target table."""

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or "merge statements must specify a target table")


class MissingUsingClauseError(SQLBuilderError):
    """The MERGE statement has no USING source."""

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or "merge statements must specify a using statement")


class MissingOnClauseError(SQLBuilderError):
    """The MERGE statement has no ON condition."""

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or "merge statements must specify an on statement")


# -- Runner errors --
class RunnerError(SQLMergeError):
    """Base class for execution backend errors."""


class RunnerNotSetError(RunnerError):
    """No runner was configured on the statement."""

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or "cannot run; no runner set (run_with)")


class RunnerLacksQueryRowCapabilityError(RunnerError):
    """The configured runner cannot produce a single row."""

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or "cannot query row; runner has no query_row")


# -- Parameter errors --
class ParameterError(SQLMergeError):
    """Base class for parameter-related errors."""

    sql: Optional[str]

    def __init__(self, message: str, sql: Optional[str] = None) -> None:
        """Initialize with optional SQL context."""
        detail_message = message
        if sql:
            detail_message = f"{message}\nSQL: {sql}"
        super().__init__(detail=detail_message)
        self.sql = sql


class PlaceholderFormatError(ParameterError):
    """Raised when placeholders cannot be rewritten for the target dialect."""
