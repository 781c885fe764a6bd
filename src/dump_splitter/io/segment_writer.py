"""
Per-table output segments.

Exactly one segment file is open for writing at a time. Opening the next
table's segment closes the previous handle, so no explicit finalize step is
needed between tables; :meth:`SegmentWriter.close` (or leaving the ``with``
block) releases the last one.

Every segment starts with a fixed preamble::

    SET FOREIGN_KEY_CHECKS = 0;

    DROP TABLE IF EXISTS `<table>`;

"""

from pathlib import Path
from typing import List, Optional, TextIO, Union

from dump_splitter.exceptions import OutputUnwritableError
from dump_splitter.utils.logging import get_logger

logger = get_logger(__name__)

SEGMENT_SUFFIX = ".sql"

# Characters never written into a file name as-is
_UNSAFE_FILENAME_CHARS = frozenset('/\\:*?"<>|%')


def quote_identifier(name: str) -> str:
    """Backtick-quote a MySQL identifier, doubling embedded backticks.

    Example:
        >>> quote_identifier("users")
        '`users`'
    """
    escaped = name.replace("`", "``")
    return f"`{escaped}`"


def _percent_encode(char: str) -> str:
    return "".join(f"%{byte:02X}" for byte in char.encode("utf-8"))


def segment_filename(table: str) -> str:
    """Return the file name for a table's segment.

    Names that are already safe are used unchanged. Path separators, characters
    reserved on common filesystems, ``%`` itself, control characters and a
    leading ``.`` are percent-encoded as UTF-8 bytes, so distinct table names
    always map to distinct files and nothing escapes the output directory.

    Examples:
        >>> segment_filename("users")
        'users.sql'
        >>> segment_filename("../etc/passwd")
        '%2E.%2Fetc%2Fpasswd.sql'
    """
    encoded = []
    for index, char in enumerate(table):
        if (
            char in _UNSAFE_FILENAME_CHARS
            or ord(char) < 0x20
            or ord(char) == 0x7F
            or (index == 0 and char == ".")
        ):
            encoded.append(_percent_encode(char))
        else:
            encoded.append(char)
    return "".join(encoded) + SEGMENT_SUFFIX


def render_preamble(table: str) -> str:
    """Fixed header written at the top of every segment."""
    return (
        "SET FOREIGN_KEY_CHECKS = 0;\n"
        "\n"
        f"DROP TABLE IF EXISTS {quote_identifier(table)};\n"
        "\n"
    )


class SegmentWriter:
    """Owns the single active segment file.

    Args:
        output_dir: Directory receiving the segment files (must exist)
        encoding: Text encoding; undecodable input bytes round-trip through
            ``surrogateescape``
    """

    def __init__(self, output_dir: Union[str, Path], encoding: str = "utf-8") -> None:
        self.output_dir = Path(output_dir)
        self.encoding = encoding
        self.current_table: Optional[str] = None
        self.current_path: Optional[Path] = None
        self.opened_paths: List[Path] = []
        self._handle: Optional[TextIO] = None

    @property
    def is_open(self) -> bool:
        return self._handle is not None

    def open(self, table: str) -> Path:
        """Close any active segment and start a fresh one for ``table``.

        Existing content under the same name is truncated.

        Raises:
            OutputUnwritableError: If the file cannot be created or written
        """
        self.close()
        path = self.output_dir / segment_filename(table)
        try:
            self._handle = open(
                path, "w", encoding=self.encoding, errors="surrogateescape", newline=""
            )
            self._handle.write(render_preamble(table))
        except OSError as e:
            self.close()
            raise OutputUnwritableError(
                f"Cannot write segment for table '{table}': {e}",
                path=path,
                original_error=e,
            )

        self.current_table = table
        self.current_path = path
        self.opened_paths.append(path)
        logger.debug("segment.opened", table=table, path=str(path))
        return path

    def append(self, line: str, ending: str = "\n") -> None:
        """Write ``line`` plus its line terminator to the active segment."""
        if self._handle is None:
            raise RuntimeError("No segment is open")
        try:
            self._handle.write(line)
            self._handle.write(ending)
        except OSError as e:
            raise OutputUnwritableError(
                f"Cannot write to segment '{self.current_path}': {e}",
                path=self.current_path,
                original_error=e,
            )

    def close(self) -> None:
        """Flush and release the active handle, if any."""
        handle, self._handle = self._handle, None
        if handle is None:
            return
        try:
            handle.close()
        except OSError as e:
            raise OutputUnwritableError(
                f"Cannot flush segment '{self.current_path}': {e}",
                path=self.current_path,
                original_error=e,
            )
        finally:
            logger.debug("segment.closed", table=self.current_table)
            self.current_table = None
            self.current_path = None

    def __enter__(self) -> "SegmentWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.close()
            return
        # Already failing; release the handle without masking the original error
        try:
            self.close()
        except OutputUnwritableError:
            logger.warning("segment.close_failed_during_error", exc_info=True)
