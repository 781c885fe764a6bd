"""
Split command: break a dump into one file per table.

Usage:
    # Split only
    python -m dump_splitter.cli split database_dump.sql

    # Exclude some tables, keep only the structure of others
    python -m dump_splitter.cli split database_dump.sql --exclude "_temp,backup_*" \\
        --create-only "cache_*,sessions"

    # Split, then import with the mysql client
    python -m dump_splitter.cli split database_dump.sql --import \\
        --host localhost --database mydb --user root
"""

import argparse
from typing import List, Optional

from dump_splitter.cli.console import BaseConsole, get_console
from dump_splitter.cli.importing import run_import
from dump_splitter.cli.options import (
    add_database_arguments,
    add_output_arguments,
    add_output_mode_arguments,
    apply_overrides,
)
from dump_splitter.config import build_table_filter, load_settings
from dump_splitter.config.settings import split_pattern_list
from dump_splitter.exceptions import DumpSplitterError
from dump_splitter.filtering.disposition import Disposition, TableFilter
from dump_splitter.io.importer import build_runner
from dump_splitter.scanner.engine import SplitResult, split_dump
from dump_splitter.utils.logging import get_logger, reconfigure_for_console

logger = get_logger(__name__)

_DISPOSITION_LABELS = {
    Disposition.FULL: "structure + data",
    Disposition.CREATE_ONLY: "create-only",
}


def _pattern_arg(value: Optional[str]) -> Optional[List[str]]:
    if value is None:
        return None
    return split_pattern_list(value)


def _print_filter(console: BaseConsole, table_filter: TableFilter) -> None:
    console.print("Table filtering:")
    console.print(
        "  Excluding entirely: " + (", ".join(table_filter.exclude) or "(none)")
    )
    console.print(
        "  Create-only tables: " + (", ".join(table_filter.create_only) or "(none)")
    )
    console.print("")


def _print_result(console: BaseConsole, result: SplitResult) -> None:
    for table in result.skipped_tables:
        console.print(f"Skipping excluded table: {table}", style="yellow")

    dispositions = {s.path: s.disposition for s in result.segments}
    console.print_tree(
        f"Files created in {result.output_dir}/:",
        [
            f"{path.name} ({_DISPOSITION_LABELS[dispositions[path]]})"
            for path in result.produced_files
        ],
    )
    console.print(f"Total files: {result.produced_count}", style="bold")

    for diagnostic in result.diagnostics:
        console.print(
            f"Warning: line {diagnostic.line_number}: {diagnostic.message}",
            style="yellow",
        )
    summary = result.summary
    if summary.total:
        console.print(
            f"Warnings: {summary.unattributable} unattributable, "
            f"{summary.unterminated} unterminated"
            + (", read interrupted" if summary.read_interrupted else ""),
            style="yellow",
        )


def _print_import_hints(console: BaseConsole, output_dir: str) -> None:
    console.print("")
    console.print("To import a specific table:")
    console.print(f"  mysql -u username -p database_name < {output_dir}/table_name.sql")
    console.print("Or with ddev:")
    console.print(f"  ddev mysql < {output_dir}/table_name.sql")
    console.print("To import all split files:")
    console.print("  dump-splitter import --ddev")


def main(argv: Optional[List[str]] = None) -> int:
    """
    Split command entry point.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    parser = argparse.ArgumentParser(
        prog="dump-splitter split",
        description=(
            "Split a large SQL file into individual table files with "
            "CREATE and INSERT statements"
        ),
    )
    parser.add_argument("input", help="SQL dump to split")
    add_output_arguments(parser)
    parser.add_argument(
        "--exclude",
        default=None,
        help="Comma-separated table names/patterns to exclude entirely (default: _*)",
    )
    parser.add_argument(
        "--create-only",
        default=None,
        help="Comma-separated table names/patterns exported without data",
    )
    parser.add_argument(
        "--rules", default=None, help="YAML file with exclude/create_only lists"
    )
    parser.add_argument(
        "--encoding", default=None, help="Text encoding of the dump (utf-8)"
    )
    parser.add_argument(
        "--import",
        dest="import_files",
        action="store_true",
        default=False,
        help="Import the split files into the database after splitting",
    )
    add_database_arguments(parser)
    add_output_mode_arguments(parser)
    args = parser.parse_args(argv)

    reconfigure_for_console(debug=args.debug, verbose=args.verbose, quiet=args.quiet)
    console = get_console(no_rich=args.no_rich)

    try:
        settings = apply_overrides(load_settings(), args)
        table_filter = build_table_filter(
            settings,
            exclude=_pattern_arg(args.exclude),
            create_only=_pattern_arg(args.create_only),
            rules_file=args.rules,
        )
        if args.import_files:
            # Fail on missing connection settings before spending time splitting
            build_runner(settings)

        console.print(f"Splitting SQL file: {args.input}")
        console.print(f"Output directory: {settings.output_dir}")
        _print_filter(console, table_filter)

        with console.status("Splitting..."):
            result = split_dump(
                args.input,
                settings.output_dir,
                table_filter=table_filter,
                encoding=settings.input_encoding,
            )

        console.print("SQL file splitting completed!", style="green")
        _print_result(console, result)

        if result.interrupted:
            console.print(
                "Reading the dump failed part-way; the last file may be incomplete.",
                style="bold red",
            )
            return 1

        if args.import_files:
            console.print("")
            return run_import(settings, console)

        _print_import_hints(console, settings.output_dir)
        return 0
    except DumpSplitterError as e:
        logger.error("split.aborted", **e.to_dict())
        console.print(f"Error: {e}", style="bold red")
        return 1
