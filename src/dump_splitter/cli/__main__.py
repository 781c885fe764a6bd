"""
Unified CLI entry point for dump-splitter.

Usage:
    python -m dump_splitter.cli <command> [options]

Available commands:
    split   - Split a dump into one .sql file per table (optionally import)
    import  - Import existing split files without re-splitting

Examples:
    # Split a large SQL file into individual table files
    python -m dump_splitter.cli split database_dump.sql

    # Split and import using ddev
    python -m dump_splitter.cli split database_dump.sql --import --ddev

    # Import existing split files using MySQL credentials
    python -m dump_splitter.cli import --host localhost --database mydb --user root
"""

import argparse
import sys
from typing import List, Optional


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point with subcommand routing.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    parser = argparse.ArgumentParser(
        prog="dump-splitter",
        description="SQL dump splitter and importer",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Split, skipping tables that start with '_' (default)
  dump-splitter split database_dump.sql

  # Split with create-only tables and exclusions
  dump-splitter split database_dump.sql --exclude "_temp" --create-only "cache_*,temp_*"

  # Split and import using MySQL credentials
  dump-splitter split database_dump.sql --import \\
      --host localhost --database mydb --user root

  # Import existing split files using ddev
  dump-splitter import --ddev

Patterns support shell wildcards (* and ?). Each output file contains
SET FOREIGN_KEY_CHECKS = 0, DROP TABLE IF EXISTS, the CREATE TABLE statement
and its INSERT statements (unless the table is create-only).
        """,
    )

    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
        required=True,
        help="Command to execute",
    )
    subparsers.add_parser(
        "split",
        help="Split a dump into one .sql file per table",
        add_help=False,  # Let the delegated module handle help
    )
    subparsers.add_parser(
        "import",
        help="Import existing split files without re-splitting",
        add_help=False,  # Let the delegated module handle help
    )

    args, remaining_args = parser.parse_known_args(argv)

    if args.command == "split":
        from dump_splitter.cli.split import main as split_main

        return split_main(remaining_args)

    elif args.command == "import":
        from dump_splitter.cli.importing import main as import_main

        return import_main(remaining_args)

    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
