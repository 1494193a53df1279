from sqlmerge.exceptions import (
    ImproperConfigurationError,
    MissingOnClauseError,
    MissingTargetError,
    MissingUsingClauseError,
    ParameterError,
    PlaceholderFormatError,
    RunnerError,
    RunnerLacksQueryRowCapabilityError,
    RunnerNotSetError,
    SQLBuilderError,
    SQLMergeError,
)


def test_exception_hierarchy():
    """Test exception classes inherit correctly."""
    assert issubclass(MissingTargetError, SQLBuilderError)
    assert issubclass(MissingUsingClauseError, SQLBuilderError)
    assert issubclass(MissingOnClauseError, SQLBuilderError)
    assert issubclass(RunnerNotSetError, RunnerError)
    assert issubclass(RunnerLacksQueryRowCapabilityError, RunnerError)
    assert issubclass(PlaceholderFormatError, ParameterError)

    for exc_type in (SQLBuilderError, RunnerError, ParameterError, ImproperConfigurationError):
        assert issubclass(exc_type, SQLMergeError)


def test_default_messages():
    assert str(MissingTargetError()) == "merge statements must specify a target table"
    assert str(MissingUsingClauseError()) == "merge statements must specify a using statement"
    assert str(MissingOnClauseError()) == "merge statements must specify an on statement"
    assert str(SQLBuilderError()) == "Issues building SQL statement."
    assert repr(RunnerNotSetError()) == "RunnerNotSetError - cannot run; no runner set (run_with)"
    assert str(RunnerLacksQueryRowCapabilityError()) == "cannot query row; runner has no query_row"


def test_exception_detail():
    exc = SQLMergeError("Something failed")
    assert exc.detail == "Something failed"
    assert str(exc) == "Something failed"


def test_parameter_error_carries_sql():
    exc = PlaceholderFormatError("Unterminated", "SELECT '")
    assert exc.sql == "SELECT '"
    assert str(exc) == "Unterminated\nSQL: SELECT '"
