"""Tests for placeholder formats."""

import pytest

from sqlmerge import AT_P, COLON, DOLLAR, QUESTION, PlaceholderFormat
from sqlmerge.exceptions import PlaceholderFormatError
from sqlmerge.parameters import iter_placeholder_positions


@pytest.mark.parametrize(
    ("placeholder_format", "expected"),
    [
        (DOLLAR, "a = $1 AND b = $2"),
        (COLON, "a = :1 AND b = :2"),
        (AT_P, "a = @p1 AND b = @p2"),
        (QUESTION, "a = ? AND b = ?"),
    ],
)
def test_numbered_formats(placeholder_format: PlaceholderFormat, expected: str) -> None:
    assert placeholder_format.replace_placeholders("a = ? AND b = ?") == expected


def test_question_format_passes_through_untouched() -> None:
    sql = "data ?? 'k' AND b = '"
    assert QUESTION.replace_placeholders(sql) == sql


def test_escaped_question_mark() -> None:
    assert DOLLAR.replace_placeholders("data ?? 'k' AND id = ?") == "data ? 'k' AND id = $1"


def test_markers_in_literals_and_comments_are_kept() -> None:
    sql = "SELECT '?', \"?\", ? -- ?\n/* ? */ ?"
    assert DOLLAR.replace_placeholders(sql) == "SELECT '?', \"?\", $1 -- ?\n/* ? */ $2"


def test_dollar_quoted_string_is_kept() -> None:
    assert DOLLAR.replace_placeholders("SELECT $$?$$, $tag$ ? $tag$, ?") == "SELECT $$?$$, $tag$ ? $tag$, $1"


def test_doubled_single_quotes() -> None:
    assert COLON.replace_placeholders("SELECT 'it''s ?' = ?") == "SELECT 'it''s ?' = :1"


@pytest.mark.parametrize(
    ("sql", "expected"),
    [
        ("t.path = 'C:\\' AND t.id = ?", "t.path = 'C:\\' AND t.id = $1"),
        ("SELECT '\\', '?', ?", "SELECT '\\', '?', $1"),
        ("SELECT E'it\\'s ?' = ?", "SELECT E'it\\'s ?' = $1"),
        ("SELECT e'a\\\\', ?", "SELECT e'a\\\\', $1"),
        ('SELECT "odd""?" = ?', 'SELECT "odd""?" = $1'),
        ("SELECT name'?' = ?", "SELECT name'?' = $1"),
    ],
)
def test_backslashes_only_escape_inside_escape_strings(sql: str, expected: str) -> None:
    assert DOLLAR.replace_placeholders(sql) == expected


@pytest.mark.parametrize(
    "sql",
    ["SELECT 'abc = ?", 'SELECT "abc = ?', "SELECT ? /* never closed", "SELECT E'abc\\' = ?"],
)
def test_unterminated_literal_is_rejected(sql: str) -> None:
    with pytest.raises(PlaceholderFormatError, match="Unterminated") as exc_info:
        DOLLAR.replace_placeholders(sql)
    assert exc_info.value.sql == sql


def test_format_string_representation() -> None:
    assert str(DOLLAR) == "dollar"
    assert str(AT_P) == "at_p"
    assert DOLLAR.prefix == "$"


def test_iter_placeholder_positions() -> None:
    assert list(iter_placeholder_positions("a = ? AND b = '?' AND c ?? d AND e = ?")) == [4, 37]
