"""Explicit scan state threaded through every line-processing step."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from dump_splitter.filtering.disposition import Disposition


class ScanState(str, Enum):
    """Where the scanner is relative to tables and statements."""

    IDLE = "idle"
    SUPPRESSED = "suppressed"
    HEADER_OPEN = "header_open"
    TABLE_OPEN = "table_open"
    INSERT_OPEN = "insert_open"
    INSERT_SUPPRESSED = "insert_suppressed"


STATEMENT_STATES = frozenset(
    {ScanState.HEADER_OPEN, ScanState.INSERT_OPEN, ScanState.INSERT_SUPPRESSED}
)


@dataclass
class ScanContext:
    """Mutable scan context.

    ``table`` and ``disposition`` are set once per CREATE TABLE header and stay
    fixed until the next one; ``statement_start`` is the line number where the
    currently open CREATE or INSERT body began; ``line_ending`` is the
    terminator of the line being processed.
    """

    state: ScanState = ScanState.IDLE
    table: Optional[str] = None
    disposition: Optional[Disposition] = None
    line_number: int = 0
    statement_start: Optional[int] = None
    line_ending: str = "\n"

    @property
    def in_statement(self) -> bool:
        return self.state in STATEMENT_STATES

    @property
    def has_segment(self) -> bool:
        """True while lines can still be routed to the current table's segment."""
        return self.table is not None and self.state not in (
            ScanState.IDLE,
            ScanState.SUPPRESSED,
        )

    def begin_statement(self, state: ScanState) -> None:
        self.state = state
        self.statement_start = self.line_number

    def end_statement(self) -> None:
        self.state = ScanState.TABLE_OPEN
        self.statement_start = None

    def reset(
        self,
        table: Optional[str],
        disposition: Optional[Disposition],
        state: ScanState,
    ) -> None:
        """Start a new table context, forgetting the previous one."""
        self.table = table
        self.disposition = disposition
        self.state = state
        self.statement_start = self.line_number if state in STATEMENT_STATES else None
