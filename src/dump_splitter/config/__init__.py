"""Configuration management for dump-splitter.

Usage:
    >>> from dump_splitter.config import get_settings
    >>> settings = get_settings()
    >>> settings.output_dir
    'split-sql'
"""

from dump_splitter.config.rules import FilterRules, build_table_filter, load_rules
from dump_splitter.config.settings import Settings, get_settings, load_settings

__all__ = [
    "FilterRules",
    "Settings",
    "build_table_filter",
    "get_settings",
    "load_settings",
    "load_rules",
]
