"""Fatal error kinds for splitting and importing.

Recoverable scan problems are not exceptions; they are collected as
diagnostics by :mod:`dump_splitter.scanner.diagnostics`.
"""

from enum import Enum
from pathlib import Path
from typing import Dict, Optional, Union


class FailedStage(str, Enum):
    """Stage at which a run was aborted."""

    INPUT = "input"
    OUTPUT = "output"
    CONFIG = "config"
    IMPORT_CONFIG = "import_config"


class DumpSplitterError(Exception):
    """Base error with stage context for structured logging."""

    stage: FailedStage = FailedStage.INPUT

    def __init__(
        self,
        message: str,
        path: Optional[Union[str, Path]] = None,
        original_error: Optional[Exception] = None,
    ):
        self.path = str(path) if path is not None else None
        self.original_error = original_error
        super().__init__(message)

    def to_dict(self) -> Dict[str, Optional[str]]:
        """Convert to structured dict for logging."""
        return {
            "error_type": type(self).__name__,
            "failed_stage": self.stage.value,
            "path": self.path,
            "message": str(self),
            "original_error_type": (
                type(self.original_error).__name__ if self.original_error else None
            ),
            "original_error_message": (
                str(self.original_error) if self.original_error else None
            ),
        }


class InputUnavailableError(DumpSplitterError):
    """The dump cannot be opened. Raised before any output is created."""

    stage = FailedStage.INPUT


class OutputUnwritableError(DumpSplitterError):
    """The output directory or a segment file cannot be created or written."""

    stage = FailedStage.OUTPUT


class ImportConfigurationError(DumpSplitterError):
    """Import cannot start: missing connection settings or nothing to import."""

    stage = FailedStage.IMPORT_CONFIG


class ConfigurationError(DumpSplitterError):
    """Settings or the filter rules file are invalid."""

    stage = FailedStage.CONFIG
