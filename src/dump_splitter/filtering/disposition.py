"""Per-table disposition resolution.

A table is resolved exactly once, when its CREATE TABLE header is seen:

1. any exclude pattern matches -> ``SKIP`` (checked first, short-circuits)
2. any create-only pattern matches -> ``CREATE_ONLY``
3. otherwise -> ``FULL``
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Sequence

from dump_splitter.filtering.patterns import matches

DEFAULT_EXCLUDE_PATTERNS = ["_*"]


class Disposition(str, Enum):
    """Retention policy for one table."""

    FULL = "full"
    CREATE_ONLY = "create_only"
    SKIP = "skip"


def resolve(
    name: str,
    exclude_patterns: Sequence[str],
    create_only_patterns: Sequence[str],
) -> Disposition:
    """Map a table name to its disposition using ordered pattern lists.

    Args:
        name: Table name exactly as extracted from the dump
        exclude_patterns: Patterns whose tables are skipped entirely
        create_only_patterns: Patterns whose tables keep structure only

    Returns:
        The resolved Disposition

    Example:
        >>> resolve("cache_x", ["cache_*"], ["cache_*"])
        <Disposition.SKIP: 'skip'>
    """
    for pattern in exclude_patterns:
        if matches(name, pattern):
            return Disposition.SKIP
    for pattern in create_only_patterns:
        if matches(name, pattern):
            return Disposition.CREATE_ONLY
    return Disposition.FULL


@dataclass
class TableFilter:
    """Ordered exclude and create-only pattern lists."""

    exclude: List[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS))
    create_only: List[str] = field(default_factory=list)

    def resolve(self, name: str) -> Disposition:
        return resolve(name, self.exclude, self.create_only)

    def describe(self) -> dict:
        """Return the pattern lists for logging and console output."""
        return {"exclude": list(self.exclude), "create_only": list(self.create_only)}
