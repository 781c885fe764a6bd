"""
Console abstraction for CLI output.

Rich rendering (tree of produced files, colored summaries) on a terminal,
plain ``print`` output for pipes, CI and ``--no-rich``. User-facing reports
go through the console on stdout; structured logs go to stderr.
"""

from __future__ import annotations

import sys
from abc import ABC, abstractmethod
from contextlib import nullcontext
from typing import Any, ContextManager, Iterable, Optional, TextIO

from rich.console import Console
from rich.markup import escape
from rich.tree import Tree


class BaseConsole(ABC):
    """Abstract base class for console implementations."""

    @abstractmethod
    def print(self, message: str = "", style: Optional[str] = None) -> None:
        """Print one message; ``style`` is a Rich style name, ignored in plain mode."""
        ...

    @abstractmethod
    def print_tree(self, label: str, items: Iterable[str]) -> None:
        """Print a label followed by one entry per item."""
        ...

    @abstractmethod
    def status(self, message: str) -> ContextManager[Any]:
        """Context manager shown while a long operation runs."""
        ...


class RichConsole(BaseConsole):
    """Rich console implementation with colored output and a live status."""

    def __init__(self, file: Optional[TextIO] = None) -> None:
        self._console = Console(file=file, highlight=False)

    def print(self, message: str = "", style: Optional[str] = None) -> None:
        self._console.print(escape(message), style=style)

    def print_tree(self, label: str, items: Iterable[str]) -> None:
        tree = Tree(escape(label))
        for item in items:
            tree.add(escape(item))
        self._console.print(tree)

    def status(self, message: str) -> ContextManager[Any]:
        return self._console.status(escape(message))


class PlainConsole(BaseConsole):
    """Plain text console for non-TTY and CI environments."""

    def __init__(self, file: Optional[TextIO] = None) -> None:
        self._file = file

    def print(self, message: str = "", style: Optional[str] = None) -> None:
        print(message, file=self._file or sys.stdout)

    def print_tree(self, label: str, items: Iterable[str]) -> None:
        self.print(label)
        for item in items:
            self.print(f"  {item}")

    def status(self, message: str) -> ContextManager[Any]:
        self.print(message)
        return nullcontext()


def get_console(no_rich: bool = False) -> BaseConsole:
    """Pick the console implementation.

    Selection logic:
    1. ``--no-rich`` -> PlainConsole
    2. stdout is not a TTY (pipes, CI) -> PlainConsole
    3. otherwise -> RichConsole
    """
    if no_rich or not sys.stdout.isatty():
        return PlainConsole()
    return RichConsole()


__all__ = ["BaseConsole", "RichConsole", "PlainConsole", "get_console"]
