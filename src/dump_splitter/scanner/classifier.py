"""
Heuristic line classification for SQL dumps.

There is no SQL tokenizer here: each line is matched against a handful of
anchored, case-insensitive patterns covering the usual mysqldump shapes. The
scanner only depends on :class:`LineClassifier.classify`, so a real parser can
replace this module without touching the state machine.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

_IDENT = r"(?:`(?P<bq>[^`]+)`|\"(?P<dq>[^\"]+)\"|(?P<bare>[^\s(`\";]+))"

CREATE_TABLE_KEYWORD = re.compile(r"^\s*CREATE\s+TABLE\b", re.IGNORECASE)
CREATE_TABLE = re.compile(
    r"^\s*CREATE\s+TABLE\s+(?:IF\s+NOT\s+EXISTS\s+)?" + _IDENT, re.IGNORECASE
)
INSERT_INTO = re.compile(r"^\s*INSERT\s+INTO\s+" + _IDENT, re.IGNORECASE)
LOCK_TABLES = re.compile(r"^\s*LOCK\s+TABLES\s+" + _IDENT, re.IGNORECASE)
UNLOCK_TABLES = re.compile(r"^\s*UNLOCK\s+TABLES\b", re.IGNORECASE)
FOREIGN_KEY_PRAGMA = re.compile(r"^\s*SET\s+FOREIGN_KEY_CHECKS\s*=", re.IGNORECASE)
COMMENT_OR_BLANK = re.compile(r"^\s*(?:$|--|#|/\*.*\*/\s*;?\s*$)")
STATEMENT_TERMINATOR = re.compile(r";\s*$")

# CREATE TABLE keywords that are not a table name
_NOT_A_NAME = {"if"}


class LineKind(str, Enum):
    """Shape of a single dump line."""

    CREATE_TABLE = "create_table"
    UNATTRIBUTABLE_CREATE = "unattributable_create"
    INSERT = "insert"
    LOCK_TABLES = "lock_tables"
    UNLOCK_TABLES = "unlock_tables"
    FOREIGN_KEY_PRAGMA = "foreign_key_pragma"
    COMMENT_OR_BLANK = "comment_or_blank"
    CONTINUATION = "continuation"


@dataclass(frozen=True)
class ClassifiedLine:
    """A line with its kind, referenced table and terminator flag."""

    kind: LineKind
    text: str
    table: Optional[str] = None
    terminated: bool = False


def _identifier(match: "re.Match[str]") -> Optional[str]:
    return match.group("bq") or match.group("dq") or match.group("bare")


def is_terminated(line: str) -> bool:
    """True if the line ends a statement (``;`` plus optional whitespace)."""
    return STATEMENT_TERMINATOR.search(line) is not None


class LineClassifier:
    """Classify dump lines by prefix and shape.

    Example:
        >>> LineClassifier().classify("CREATE TABLE `users` (").table
        'users'
    """

    def classify(self, line: str) -> ClassifiedLine:
        terminated = is_terminated(line)

        if CREATE_TABLE_KEYWORD.match(line):
            name = self.extract_table_name(line)
            if name is None:
                return ClassifiedLine(
                    LineKind.UNATTRIBUTABLE_CREATE, line, terminated=terminated
                )
            return ClassifiedLine(LineKind.CREATE_TABLE, line, name, terminated)

        match = INSERT_INTO.match(line)
        if match:
            return ClassifiedLine(LineKind.INSERT, line, _identifier(match), terminated)

        match = LOCK_TABLES.match(line)
        if match:
            return ClassifiedLine(
                LineKind.LOCK_TABLES, line, _identifier(match), terminated
            )

        if UNLOCK_TABLES.match(line):
            return ClassifiedLine(LineKind.UNLOCK_TABLES, line, terminated=terminated)

        if FOREIGN_KEY_PRAGMA.match(line):
            return ClassifiedLine(
                LineKind.FOREIGN_KEY_PRAGMA, line, terminated=terminated
            )

        if COMMENT_OR_BLANK.match(line):
            return ClassifiedLine(
                LineKind.COMMENT_OR_BLANK, line, terminated=terminated
            )

        return ClassifiedLine(LineKind.CONTINUATION, line, terminated=terminated)

    def extract_table_name(self, line: str) -> Optional[str]:
        """Extract the table name from a CREATE TABLE line.

        A quoted identifier right after ``CREATE TABLE [IF NOT EXISTS]`` wins;
        otherwise the first token delimited by whitespace or ``(`` is used.
        Returns None when neither strategy yields a name.
        """
        match = CREATE_TABLE.match(line)
        if match is None:
            return None
        name = _identifier(match)
        if match.group("bare") and name.lower() in _NOT_A_NAME:
            # "CREATE TABLE IF" with nothing usable after it
            return None
        return name
