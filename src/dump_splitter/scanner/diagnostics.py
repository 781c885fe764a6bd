"""Recoverable scan problems.

Nothing here aborts a run. The scanner records a Diagnostic, logs it as a
warning and keeps going; callers decide from the summary whether the split
is trustworthy.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional


class DiagnosticKind(str, Enum):
    """Kinds of recoverable scan problems."""

    UNATTRIBUTABLE_STATEMENT = "unattributable_statement"
    UNTERMINATED_STATEMENT = "unterminated_statement"
    READ_INTERRUPTED = "read_interrupted"


@dataclass
class Diagnostic:
    """Single scan diagnostic.

    Attributes:
        kind: What went wrong
        line_number: 1-indexed input line where the problem was detected
        message: Human-readable description
        table: Table context at the time, if any
    """

    kind: DiagnosticKind
    line_number: int
    message: str
    table: Optional[str] = None


@dataclass
class DiagnosticSummary:
    """Aggregated diagnostic counts."""

    unattributable: int
    unterminated: int
    read_interrupted: bool

    @property
    def total(self) -> int:
        return self.unattributable + self.unterminated + int(self.read_interrupted)


class DiagnosticReporter:
    """Collect diagnostics in the order they were detected.

    Example:
        >>> reporter = DiagnosticReporter()
        >>> reporter.collect(DiagnosticKind.UNTERMINATED_STATEMENT, 42, "EOF", "users")
        >>> reporter.get_summary().unterminated
        1
    """

    def __init__(self) -> None:
        self.diagnostics: List[Diagnostic] = []

    def collect(
        self,
        kind: DiagnosticKind,
        line_number: int,
        message: str,
        table: Optional[str] = None,
    ) -> Diagnostic:
        diagnostic = Diagnostic(
            kind=kind, line_number=line_number, message=message, table=table
        )
        self.diagnostics.append(diagnostic)
        return diagnostic

    def of_kind(self, kind: DiagnosticKind) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.kind == kind]

    def get_summary(self) -> DiagnosticSummary:
        return DiagnosticSummary(
            unattributable=len(self.of_kind(DiagnosticKind.UNATTRIBUTABLE_STATEMENT)),
            unterminated=len(self.of_kind(DiagnosticKind.UNTERMINATED_STATEMENT)),
            read_interrupted=bool(self.of_kind(DiagnosticKind.READ_INTERRUPTED)),
        )
