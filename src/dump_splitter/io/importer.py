"""
Import produced segments with an external database client.

The import loop only knows the :class:`ImportRunner` protocol, so it can be
exercised with a fake runner and no database. Two subprocess-backed runners
are provided:

- :class:`MySQLClientRunner`: ``mysql -h<host> -P<port> -u<user> <database> < file``
- :class:`DdevRunner`: ``ddev mysql < file``

A failing file never stops the batch; outcomes are tallied into an
:class:`ImportSummary`.
"""

import os
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Union, runtime_checkable

from dump_splitter.config.settings import Settings
from dump_splitter.exceptions import ImportConfigurationError
from dump_splitter.io.segment_writer import SEGMENT_SUFFIX
from dump_splitter.utils.logging import get_logger

logger = get_logger(__name__)

# Keep error messages in summaries short; full stderr goes to the debug log
MAX_ERROR_CHARS = 500


@dataclass
class ImportOutcome:
    """Result of importing one segment file."""

    path: Path
    success: bool
    returncode: Optional[int] = None
    error: Optional[str] = None


@dataclass
class ImportSummary:
    """Aggregated import results, in import order."""

    outcomes: List[ImportOutcome] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def succeeded(self) -> int:
        return sum(1 for o in self.outcomes if o.success)

    @property
    def failed(self) -> int:
        return self.total - self.succeeded

    @property
    def failed_files(self) -> List[Path]:
        return [o.path for o in self.outcomes if not o.success]

    @property
    def ok(self) -> bool:
        return self.failed == 0


@runtime_checkable
class ImportRunner(Protocol):
    """Single-operation interface around one external import."""

    name: str

    def run(self, path: Path) -> ImportOutcome:
        """Import one file; never raises for per-file failures."""
        ...


class SubprocessRunner:
    """Feed a segment file to an external command on stdin."""

    name = "subprocess"

    def build_command(self) -> List[str]:
        raise NotImplementedError

    def environment(self) -> Dict[str, str]:
        """Extra environment variables for the child process."""
        return {}

    def describe(self) -> str:
        return " ".join(self.build_command())

    def run(self, path: Path) -> ImportOutcome:
        command = self.build_command()
        try:
            with open(path, "rb") as stdin:
                completed = subprocess.run(
                    command,
                    stdin=stdin,
                    capture_output=True,
                    env={**os.environ, **self.environment()},
                )
        except FileNotFoundError as e:
            missing = e.filename or command[0]
            return ImportOutcome(
                path=path, success=False, error=f"command not found: {missing}"
            )
        except OSError as e:
            return ImportOutcome(path=path, success=False, error=str(e))

        if completed.returncode != 0:
            stderr = completed.stderr.decode("utf-8", errors="replace").strip()
            logger.debug(
                "import.stderr", file=path.name, runner=self.name, stderr=stderr
            )
            return ImportOutcome(
                path=path,
                success=False,
                returncode=completed.returncode,
                error=(
                    stderr[:MAX_ERROR_CHARS] or f"exit status {completed.returncode}"
                ),
            )
        return ImportOutcome(path=path, success=True, returncode=0)


class MySQLClientRunner(SubprocessRunner):
    """Import through the ``mysql`` command-line client.

    The password is passed in ``MYSQL_PWD`` so it never shows up in the
    process list.
    """

    name = "mysql"

    def __init__(
        self,
        host: str,
        database: str,
        user: str,
        password: str = "",
        port: int = 3306,
        executable: str = "mysql",
    ) -> None:
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.database = database
        self.executable = executable

    def build_command(self) -> List[str]:
        return [
            self.executable,
            f"-h{self.host}",
            f"-P{self.port}",
            f"-u{self.user}",
            self.database,
        ]

    def environment(self) -> Dict[str, str]:
        if self.password:
            return {"MYSQL_PWD": self.password}
        return {}

    def describe(self) -> str:
        return f"{self.user}@{self.host}:{self.port}/{self.database}"


class DdevRunner(SubprocessRunner):
    """Import through ``ddev mysql`` in the current ddev project."""

    name = "ddev"

    def __init__(self, executable: str = "ddev") -> None:
        self.executable = executable

    def build_command(self) -> List[str]:
        return [self.executable, "mysql"]

    def describe(self) -> str:
        return "ddev mysql"


def build_runner(settings: Settings) -> SubprocessRunner:
    """Create the runner selected by settings.

    Raises:
        ImportConfigurationError: If MySQL mode lacks host, database or user
    """
    if settings.use_ddev:
        return DdevRunner(executable=settings.ddev_executable)

    missing = [
        flag
        for flag, value in (
            ("--host", settings.db_host),
            ("--database", settings.db_name),
            ("--user", settings.db_user),
        )
        if not value
    ]
    if missing:
        raise ImportConfigurationError(
            f"MySQL import requires {', '.join(missing)} (or use --ddev)"
        )
    return MySQLClientRunner(
        host=settings.db_host,
        port=settings.db_port,
        user=settings.db_user,
        password=settings.db_password,
        database=settings.db_name,
        executable=settings.mysql_executable,
    )


def list_segment_files(directory: Union[str, Path]) -> List[Path]:
    """Return the ``.sql`` files of a directory in listing (sorted) order.

    Raises:
        ImportConfigurationError: If the directory is missing or holds no segments
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise ImportConfigurationError(
            f"Directory '{directory}' not found; split a dump first", path=directory
        )
    files = sorted(
        p for p in directory.iterdir() if p.is_file() and p.suffix == SEGMENT_SUFFIX
    )
    if not files:
        raise ImportConfigurationError(
            f"No {SEGMENT_SUFFIX} files found in '{directory}'", path=directory
        )
    return files


def import_directory(
    directory: Union[str, Path], runner: ImportRunner
) -> ImportSummary:
    """Import every segment of ``directory`` one by one, continuing on error.

    Args:
        directory: Directory produced by a completed split
        runner: Runner performing each import

    Returns:
        ImportSummary with one outcome per file
    """
    files = list_segment_files(directory)
    summary = ImportSummary()

    logger.info(
        "import.started",
        directory=str(directory),
        runner=runner.name,
        file_count=len(files),
    )
    for path in files:
        outcome = runner.run(path)
        summary.outcomes.append(outcome)
        if outcome.success:
            logger.info("import.file_succeeded", file=path.name)
        else:
            logger.warning(
                "import.file_failed",
                file=path.name,
                returncode=outcome.returncode,
                error=outcome.error,
            )

    logger.info(
        "import.completed",
        succeeded=summary.succeeded,
        failed=summary.failed,
        total=summary.total,
    )
    return summary
