"""
Streaming dump scanner.

One forward pass over the dump, one classification per line, no lookahead.
Each CREATE TABLE header resolves the table's disposition exactly once and
(unless the table is skipped) opens its segment; every following line is
routed according to the explicit :class:`ScanContext`:

    header      -> HEADER_OPEN until a line ends with ';'
    INSERT      -> INSERT_OPEN (or INSERT_SUPPRESSED for create-only tables)
    LOCK/UNLOCK -> copied while the table's segment is open
    other       -> dropped outside statement bodies

Lines inside an open CREATE or INSERT body are body text whatever they look
like, so bodies are copied byte for byte. The only exceptions are a new
CREATE TABLE header or an INSERT for the current table, which always start a
new statement.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

from dump_splitter.exceptions import InputUnavailableError, OutputUnwritableError
from dump_splitter.filtering.disposition import Disposition, TableFilter
from dump_splitter.io.segment_writer import SegmentWriter
from dump_splitter.scanner.classifier import ClassifiedLine, LineClassifier, LineKind
from dump_splitter.scanner.diagnostics import (
    Diagnostic,
    DiagnosticKind,
    DiagnosticReporter,
    DiagnosticSummary,
)
from dump_splitter.scanner.state import ScanContext, ScanState
from dump_splitter.utils.logging import get_logger

logger = get_logger(__name__)


def split_line_ending(raw_line: str) -> Tuple[str, str]:
    r"""Split a raw input line into its text and its line terminator.

    ``"\r\n"`` lines keep the ``"\r"`` in their text, so every terminator the
    input uses is written back unchanged. A final line without a terminator is
    given ``"\n"``.

    Examples:
        >>> split_line_ending("INSERT ...;\r")
        ('INSERT ...;', '\r')
        >>> split_line_ending("UNLOCK TABLES;")
        ('UNLOCK TABLES;', '\n')
    """
    if raw_line.endswith("\n"):
        return raw_line[:-1], "\n"
    if raw_line.endswith("\r"):
        return raw_line[:-1], "\r"
    return raw_line, "\n"


@dataclass
class SegmentRecord:
    """A segment opened during the scan."""

    table: str
    path: Path
    disposition: Disposition


@dataclass
class SplitResult:
    """Outcome of a split run."""

    output_dir: Path
    segments: List[SegmentRecord] = field(default_factory=list)
    skipped_tables: List[str] = field(default_factory=list)
    lines_read: int = 0
    diagnostics: List[Diagnostic] = field(default_factory=list)
    summary: DiagnosticSummary = field(
        default_factory=lambda: DiagnosticSummary(0, 0, False)
    )
    interrupted: bool = False

    @property
    def produced_files(self) -> List[Path]:
        """Distinct segment files, in the order they were first opened."""
        seen = set()
        files = []
        for segment in self.segments:
            if segment.path not in seen:
                seen.add(segment.path)
                files.append(segment.path)
        return files

    @property
    def produced_count(self) -> int:
        return len(self.produced_files)

    @property
    def create_only_tables(self) -> List[str]:
        return [
            s.table for s in self.segments if s.disposition == Disposition.CREATE_ONLY
        ]


class DumpScanner:
    """Line-driven segment state machine.

    Args:
        writer: Segment writer receiving routed lines
        table_filter: Exclude / create-only pattern lists
        classifier: Line classifier; replaceable without touching the machine
    """

    def __init__(
        self,
        writer: SegmentWriter,
        table_filter: Optional[TableFilter] = None,
        classifier: Optional[LineClassifier] = None,
    ) -> None:
        self.writer = writer
        self.table_filter = table_filter or TableFilter()
        self.classifier = classifier or LineClassifier()
        self.reporter = DiagnosticReporter()
        self.segments: List[SegmentRecord] = []
        self.skipped_tables: List[str] = []

    def scan(
        self, lines: Iterable[str], context: Optional[ScanContext] = None
    ) -> ScanContext:
        """Process every line, then finish the scan.

        Lines may carry their line terminator; it is split off before routing
        and written back unchanged by the segment writer.
        """
        context = context or ScanContext()
        for raw_line in lines:
            self.process_line(context, raw_line)
        self.finish(context)
        return context

    def process_line(self, context: ScanContext, raw_line: str) -> None:
        """Advance the state machine by one input line."""
        context.line_number += 1
        text, context.line_ending = split_line_ending(raw_line)
        line = self.classifier.classify(text)

        if line.kind == LineKind.CREATE_TABLE:
            self._open_table(context, line)
            return

        if line.kind == LineKind.UNATTRIBUTABLE_CREATE:
            self._suppress_unattributable(context, line)
            return

        if (
            line.kind == LineKind.INSERT
            and context.has_segment
            and line.table == context.table
        ):
            self._start_insert(context, line)
            return

        state = context.state
        if state == ScanState.HEADER_OPEN:
            self.writer.append(line.text, context.line_ending)
            if line.terminated:
                self.writer.append("")
                context.end_statement()
        elif state == ScanState.INSERT_OPEN:
            self.writer.append(line.text, context.line_ending)
            if line.terminated:
                context.end_statement()
        elif state == ScanState.INSERT_SUPPRESSED:
            if line.terminated:
                context.end_statement()
        elif state == ScanState.TABLE_OPEN:
            if self._is_lock_for_current_table(context, line):
                self.writer.append(line.text, context.line_ending)
        # IDLE and SUPPRESSED: nothing to route to

    def finish(self, context: ScanContext) -> None:
        """End of input: report an open statement and release the segment."""
        if context.in_statement:
            self._report_unterminated(context, "input ended")
        self.writer.close()

    def _open_table(self, context: ScanContext, line: ClassifiedLine) -> None:
        if context.in_statement:
            self._report_unterminated(context, "next CREATE TABLE started")

        table = line.table
        disposition = self.table_filter.resolve(table)

        if disposition == Disposition.SKIP:
            self.writer.close()
            self.skipped_tables.append(table)
            context.reset(table, disposition, ScanState.SUPPRESSED)
            logger.info("split.table_skipped", table=table, line=context.line_number)
            return

        path = self.writer.open(table)
        self.segments.append(SegmentRecord(table, path, disposition))
        self.writer.append(line.text, context.line_ending)
        if line.terminated:
            self.writer.append("")
            context.reset(table, disposition, ScanState.TABLE_OPEN)
        else:
            context.reset(table, disposition, ScanState.HEADER_OPEN)
        logger.info(
            "split.table_opened",
            table=table,
            disposition=disposition.value,
            line=context.line_number,
        )

    def _suppress_unattributable(
        self, context: ScanContext, line: ClassifiedLine
    ) -> None:
        if context.in_statement:
            self._report_unterminated(context, "unattributable CREATE TABLE started")
        self.writer.close()
        previous_table = context.table
        context.reset(None, None, ScanState.SUPPRESSED)
        self.reporter.collect(
            DiagnosticKind.UNATTRIBUTABLE_STATEMENT,
            context.line_number,
            "CREATE TABLE statement without a recognizable table name; "
            "discarding it until the next table",
            table=previous_table,
        )
        logger.warning(
            "split.unattributable_statement",
            line=context.line_number,
            text=line.text[:120],
        )

    def _start_insert(self, context: ScanContext, line: ClassifiedLine) -> None:
        if context.in_statement:
            self._report_unterminated(context, "next INSERT started")
            if context.state == ScanState.HEADER_OPEN:
                self.writer.append("")

        if context.disposition == Disposition.CREATE_ONLY:
            if line.terminated:
                context.end_statement()
            else:
                context.begin_statement(ScanState.INSERT_SUPPRESSED)
            return

        self.writer.append(line.text, context.line_ending)
        if line.terminated:
            context.end_statement()
        else:
            context.begin_statement(ScanState.INSERT_OPEN)

    @staticmethod
    def _is_lock_for_current_table(
        context: ScanContext, line: ClassifiedLine
    ) -> bool:
        # Multi-table LOCK TABLES is matched on its first table only
        if line.kind == LineKind.LOCK_TABLES:
            return line.table == context.table
        return line.kind == LineKind.UNLOCK_TABLES

    def _report_unterminated(self, context: ScanContext, reason: str) -> None:
        self.reporter.collect(
            DiagnosticKind.UNTERMINATED_STATEMENT,
            context.line_number,
            f"statement opened at line {context.statement_start} was not "
            f"terminated ({reason}); content kept as-is",
            table=context.table,
        )
        logger.warning(
            "split.unterminated_statement",
            table=context.table,
            state=context.state.value,
            statement_start=context.statement_start,
            line=context.line_number,
            reason=reason,
        )


def split_dump(
    input_path: Union[str, Path],
    output_dir: Union[str, Path],
    table_filter: Optional[TableFilter] = None,
    encoding: str = "utf-8",
) -> SplitResult:
    """Split a dump into one ``<table>.sql`` segment per retained table.

    The input is opened before anything is created on disk, so an unreadable
    dump never leaves a partial output directory behind.

    Args:
        input_path: Dump file to read
        output_dir: Directory for the segments (created if missing)
        table_filter: Exclude / create-only patterns; defaults to skipping ``_*``
        encoding: Text encoding of the dump

    Returns:
        SplitResult with produced segments, skipped tables and diagnostics

    Raises:
        InputUnavailableError: If the dump cannot be opened
        OutputUnwritableError: If the output directory or a segment cannot be written
    """
    input_path = Path(input_path)
    output_dir = Path(output_dir)
    table_filter = table_filter or TableFilter()

    try:
        source = open(
            input_path, "r", encoding=encoding, errors="surrogateescape", newline=""
        )
    except (OSError, LookupError) as e:
        logger.error(
            "split.input_unavailable", input_file=str(input_path), error=str(e)
        )
        raise InputUnavailableError(
            f"Cannot open dump '{input_path}': {e}", path=input_path, original_error=e
        )

    with source:
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(
                "split.output_unwritable", output_dir=str(output_dir), error=str(e)
            )
            raise OutputUnwritableError(
                f"Cannot create output directory '{output_dir}': {e}",
                path=output_dir,
                original_error=e,
            )

        logger.info(
            "split.started",
            input_file=str(input_path),
            output_dir=str(output_dir),
            **table_filter.describe(),
        )

        result = SplitResult(output_dir=output_dir)
        context = ScanContext()
        with SegmentWriter(output_dir, encoding=encoding) as writer:
            scanner = DumpScanner(writer, table_filter)
            try:
                for raw_line in source:
                    scanner.process_line(context, raw_line)
            except (OSError, UnicodeDecodeError) as e:
                result.interrupted = True
                scanner.reporter.collect(
                    DiagnosticKind.READ_INTERRUPTED,
                    context.line_number,
                    f"reading stopped after line {context.line_number}: {e}; "
                    "the last segment may be incomplete",
                    table=context.table,
                )
                logger.warning(
                    "split.read_interrupted",
                    line=context.line_number,
                    table=context.table,
                    error=str(e),
                )
            scanner.finish(context)

    result.segments = scanner.segments
    result.skipped_tables = scanner.skipped_tables
    result.lines_read = context.line_number
    result.diagnostics = list(scanner.reporter.diagnostics)
    result.summary = scanner.reporter.get_summary()

    logger.info(
        "split.completed",
        produced_count=result.produced_count,
        skipped_count=len(result.skipped_tables),
        create_only_count=len(result.create_only_tables),
        lines_read=result.lines_read,
        diagnostics=len(result.diagnostics),
        interrupted=result.interrupted,
    )
    return result
