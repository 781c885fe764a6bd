"""Table filtering: glob patterns and per-table dispositions."""

from dump_splitter.filtering.disposition import Disposition, TableFilter, resolve
from dump_splitter.filtering.patterns import matches

__all__ = ["Disposition", "TableFilter", "matches", "resolve"]
