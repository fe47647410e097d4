"""Diagnostic sink for constraint messages, backed by a rich Console."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from rich.console import Console

DiagnosticKind = Literal["error", "correction"]


@dataclass(frozen=True)
class Diagnostic:
    kind: DiagnosticKind
    message: str


class DiagnosticSink:
    """
    Prints constraint messages and remembers what was printed.

    `print_error(verbose, message)` is the only entry point constraint
    functions use; the verbose flag decides whether anything is shown.
    """

    def __init__(self, console: Console | None = None):
        self.console = console or Console(stderr=True)
        self.emitted: list[Diagnostic] = []

    def print_error(self, verbose: bool, message: str) -> None:
        if not verbose:
            return
        self.emitted.append(Diagnostic(kind="error", message=message))
        self.console.print(message, style="red", markup=False, highlight=False)

    def announce(self, flag: str, value: object) -> None:
        """Report an auto-correct substitution; always shown."""
        message = f"{flag}:{value}"
        self.emitted.append(Diagnostic(kind="correction", message=message))
        self.console.print(message, style="bold yellow", markup=False, highlight=False)

    def messages(self, kind: DiagnosticKind | None = None) -> list[str]:
        return [d.message for d in self.emitted if kind is None or d.kind == kind]
