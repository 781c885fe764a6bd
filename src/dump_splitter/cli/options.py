"""Argument groups and settings overrides shared by the CLI commands."""

import argparse
from typing import Any, Dict

from dump_splitter.config.settings import Settings

# argparse dest -> Settings field
SETTINGS_OVERRIDES = {
    "output_dir": "output_dir",
    "encoding": "input_encoding",
    "host": "db_host",
    "port": "db_port",
    "database": "db_name",
    "user": "db_user",
    "password": "db_password",
    "ddev": "use_ddev",
}


def add_output_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--output-dir",
        "-o",
        default=None,
        help="Directory holding one .sql file per table (default: split-sql)",
    )


def add_database_arguments(parser: argparse.ArgumentParser) -> None:
    group = parser.add_argument_group(
        "database options", "Connection used when importing the split files"
    )
    group.add_argument("--host", default=None, help="Database host")
    group.add_argument("--port", type=int, default=None, help="Database port (3306)")
    group.add_argument("--database", default=None, help="Database name")
    group.add_argument("--user", default=None, help="Database user")
    group.add_argument(
        "--password",
        default=None,
        help="Database password (prefer DSPLIT_DB_PASSWORD in the environment)",
    )
    group.add_argument(
        "--ddev",
        action="store_true",
        default=None,
        help="Import with `ddev mysql` instead of the mysql client",
    )


def add_output_mode_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--no-rich",
        action="store_true",
        default=False,
        help="Plain text output (automatic when stdout is not a terminal)",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", default=False, help="Show INFO logs"
    )
    parser.add_argument(
        "--quiet", "-q", action="store_true", default=False, help="Only show errors"
    )
    parser.add_argument(
        "--debug", action="store_true", default=False, help="Show DEBUG logs"
    )


def apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    """Return a copy of settings with every explicitly given CLI flag applied."""
    update: Dict[str, Any] = {}
    for dest, field_name in SETTINGS_OVERRIDES.items():
        value = getattr(args, dest, None)
        if value is not None:
            update[field_name] = value
    if not update:
        return settings
    return settings.model_copy(update=update)
