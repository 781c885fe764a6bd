"""
Configuration management for dump-splitter.

Environment-based configuration using Pydantic BaseSettings. Values are read
from ``DSPLIT_``-prefixed environment variables and an optional ``.env`` file;
command-line flags are layered on top by the CLI.

Pattern lists accept either a JSON list or the comma-separated form used on
the command line, e.g. ``DSPLIT_EXCLUDE_PATTERNS="_*,backup_*"``.
"""

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Annotated, List, Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from dump_splitter.exceptions import ConfigurationError
from dump_splitter.filtering.disposition import DEFAULT_EXCLUDE_PATTERNS

DEFAULT_ENV_FILE = Path(".env")
ENV_FILE_OVERRIDE = os.getenv("DSPLIT_ENV_FILE")
SETTINGS_ENV_FILE = (
    Path(ENV_FILE_OVERRIDE).expanduser() if ENV_FILE_OVERRIDE else DEFAULT_ENV_FILE
)


def split_pattern_list(value: object) -> object:
    """Split a comma-separated pattern string, dropping empty entries.

    Example:
        >>> split_pattern_list("_temp, backup_*,,old_data")
        ['_temp', 'backup_*', 'old_data']
    """
    if isinstance(value, str):
        stripped = value.strip()
        if stripped.startswith("["):
            return json.loads(stripped)
        return [item.strip() for item in stripped.split(",") if item.strip()]
    return value


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    Environment variables are loaded with the DSPLIT_ prefix, for example
    DSPLIT_OUTPUT_DIR overrides output_dir. LOG_LEVEL is read without prefix
    so it can be shared with the logging setup.
    """

    LOG_LEVEL: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Logging level (uppercase)",
    )

    # Splitting
    output_dir: str = Field(
        default="split-sql", description="Directory receiving one .sql file per table"
    )
    exclude_patterns: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS),
        description="Glob patterns of tables to skip entirely",
    )
    create_only_patterns: Annotated[List[str], NoDecode] = Field(
        default_factory=list,
        description="Glob patterns of tables exported without INSERT data",
    )
    rules_file: Optional[str] = Field(
        default=None, description="YAML file with exclude/create_only pattern lists"
    )
    input_encoding: str = Field(
        default="utf-8", description="Text encoding of the dump and segment files"
    )

    # Import connection
    db_host: str = Field(default="", description="Database host")
    db_port: int = Field(default=3306, description="Database port")
    db_name: str = Field(default="", description="Database name")
    db_user: str = Field(default="", description="Database user")
    db_password: str = Field(default="", description="Database password")
    use_ddev: bool = Field(default=False, description="Import through `ddev mysql`")
    mysql_executable: str = Field(default="mysql", description="MySQL client binary")
    ddev_executable: str = Field(default="ddev", description="ddev binary")

    @field_validator("exclude_patterns", "create_only_patterns", mode="before")
    @classmethod
    def _split_comma_lists(cls, value: object) -> object:
        return split_pattern_list(value)

    @field_validator("LOG_LEVEL")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        return value.upper()

    model_config = SettingsConfigDict(
        env_prefix="DSPLIT_",
        env_file=str(SETTINGS_ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings instance with loaded configuration
    """
    return Settings()


def load_settings() -> Settings:
    """
    Get cached settings for a command run.

    Raises:
        ConfigurationError: If an environment or .env value fails validation
    """
    try:
        return get_settings()
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid settings ({e.error_count()} error(s)): {e}", original_error=e
        )
