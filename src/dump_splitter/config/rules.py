"""
Filter rules file support.

A rules file keeps long pattern lists out of the command line:

    exclude:
      - "_*"
      - "backup_*"
    create_only:
      - "cache_*"
      - "sessions"

Either key may be omitted; an omitted key leaves the lower-precedence value
(environment or default) in place. Precedence, highest first:
command-line flags, rules file, settings.
"""

from pathlib import Path
from typing import List, Optional, Sequence, Union

import structlog
import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from dump_splitter.config.settings import Settings, split_pattern_list
from dump_splitter.exceptions import ConfigurationError
from dump_splitter.filtering.disposition import TableFilter

logger = structlog.get_logger(__name__)


class FilterRules(BaseModel):
    """Schema for the YAML rules file."""

    model_config = ConfigDict(extra="forbid")

    exclude: Optional[List[str]] = Field(
        None, description="Patterns of tables to skip entirely"
    )
    create_only: Optional[List[str]] = Field(
        None, description="Patterns of tables exported without data"
    )

    @field_validator("exclude", "create_only", mode="before")
    @classmethod
    def _accept_comma_string(cls, value: object) -> object:
        return split_pattern_list(value)


def load_rules(path: Union[str, Path]) -> FilterRules:
    """Load and validate a filter rules file.

    Raises:
        ConfigurationError: If the file is missing, not YAML, or fails validation
    """
    rules_path = Path(path)
    if not rules_path.exists():
        logger.error("configuration.rules_not_found", rules_file=str(rules_path))
        raise ConfigurationError(
            f"Filter rules file not found: {rules_path}", path=rules_path
        )

    try:
        with open(rules_path, "r", encoding="utf-8") as f:
            raw_rules = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.error(
            "configuration.rules_parse_error", rules_file=str(rules_path), error=str(e)
        )
        raise ConfigurationError(
            f"Invalid YAML in rules file: {e}", path=rules_path, original_error=e
        )

    try:
        rules = FilterRules(**(raw_rules or {}))
    except (TypeError, ValidationError) as e:
        logger.error(
            "configuration.rules_invalid", rules_file=str(rules_path), error=str(e)
        )
        raise ConfigurationError(
            f"Rules file validation failed: {e}", path=rules_path, original_error=e
        )

    logger.info(
        "configuration.rules_loaded",
        rules_file=str(rules_path),
        exclude=rules.exclude,
        create_only=rules.create_only,
    )
    return rules


def build_table_filter(
    settings: Settings,
    exclude: Optional[Sequence[str]] = None,
    create_only: Optional[Sequence[str]] = None,
    rules_file: Optional[Union[str, Path]] = None,
) -> TableFilter:
    """Combine settings, an optional rules file and CLI overrides.

    Args:
        settings: Loaded settings (lowest precedence)
        exclude: Exclude patterns given on the command line
        create_only: Create-only patterns given on the command line
        rules_file: Rules file path; falls back to settings.rules_file

    Returns:
        TableFilter with the effective ordered pattern lists
    """
    exclude_patterns = list(settings.exclude_patterns)
    create_only_patterns = list(settings.create_only_patterns)

    rules_path = rules_file or settings.rules_file
    if rules_path:
        rules = load_rules(rules_path)
        if rules.exclude is not None:
            exclude_patterns = list(rules.exclude)
        if rules.create_only is not None:
            create_only_patterns = list(rules.create_only)

    if exclude is not None:
        exclude_patterns = list(exclude)
    if create_only is not None:
        create_only_patterns = list(create_only)

    return TableFilter(exclude=exclude_patterns, create_only=create_only_patterns)
