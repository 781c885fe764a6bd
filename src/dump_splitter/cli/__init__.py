"""Command-line interface for dump-splitter."""
