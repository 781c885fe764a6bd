"""Dump scanning: line classification, scan state and the segment state machine."""

from dump_splitter.scanner.classifier import ClassifiedLine, LineClassifier, LineKind
from dump_splitter.scanner.diagnostics import Diagnostic, DiagnosticKind
from dump_splitter.scanner.engine import (
    DumpScanner,
    SegmentRecord,
    SplitResult,
    split_dump,
)
from dump_splitter.scanner.state import ScanContext, ScanState

__all__ = [
    "ClassifiedLine",
    "Diagnostic",
    "DiagnosticKind",
    "DumpScanner",
    "LineClassifier",
    "LineKind",
    "ScanContext",
    "ScanState",
    "SegmentRecord",
    "SplitResult",
    "split_dump",
]
