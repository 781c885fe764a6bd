"""
Import command: load previously split files into a database.

Usage:
    python -m dump_splitter.cli import --host localhost --database mydb --user root
    python -m dump_splitter.cli import --ddev
"""

import argparse
from typing import List, Optional

from dump_splitter.cli.console import BaseConsole, get_console
from dump_splitter.cli.options import (
    add_database_arguments,
    add_output_arguments,
    add_output_mode_arguments,
    apply_overrides,
)
from dump_splitter.config import Settings, load_settings
from dump_splitter.exceptions import DumpSplitterError
from dump_splitter.io.importer import (
    build_runner,
    import_directory,
    list_segment_files,
)
from dump_splitter.utils.logging import get_logger, reconfigure_for_console

logger = get_logger(__name__)


def run_import(settings: Settings, console: BaseConsole) -> int:
    """Import every segment in ``settings.output_dir``.

    Connection settings are validated and the directory is listed before the
    first import is attempted.

    Returns:
        0 if every file imported, 1 otherwise

    Raises:
        ImportConfigurationError: Missing connection settings or nothing to import
    """
    runner = build_runner(settings)
    files = list_segment_files(settings.output_dir)

    console.print("Importing split SQL files into database...")
    console.print_tree(f"Files to import ({len(files)}):", [p.name for p in files])
    console.print(f"Using {runner.describe()}")

    summary = import_directory(settings.output_dir, runner)

    for outcome in summary.outcomes:
        if outcome.success:
            console.print(
                f"✓ Successfully imported: {outcome.path.name}", style="green"
            )
        else:
            console.print(
                f"✗ Failed to import: {outcome.path.name} ({outcome.error})",
                style="red",
            )

    console.print("")
    console.print("Import summary:", style="bold")
    console.print(f"Successfully imported: {summary.succeeded} files")
    if summary.failed:
        console.print(f"Failed imports: {summary.failed} files", style="red")
    return 0 if summary.ok else 1


def main(argv: Optional[List[str]] = None) -> int:
    """
    Import command entry point.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    parser = argparse.ArgumentParser(
        prog="dump-splitter import",
        description="Import existing split files without re-splitting",
    )
    add_output_arguments(parser)
    add_database_arguments(parser)
    add_output_mode_arguments(parser)
    args = parser.parse_args(argv)

    reconfigure_for_console(debug=args.debug, verbose=args.verbose, quiet=args.quiet)
    console = get_console(no_rich=args.no_rich)

    try:
        settings = apply_overrides(load_settings(), args)
        return run_import(settings, console)
    except DumpSplitterError as e:
        logger.error("import.aborted", **e.to_dict())
        console.print(f"Error: {e}", style="bold red")
        return 1
