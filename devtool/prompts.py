"""Interactive questions asked during project scaffolding."""

from __future__ import annotations

import sys
from typing import Callable, TextIO


class Prompter:
    """Ask questions on a terminal; both ends are injectable for tests."""

    def __init__(self, input_func: Callable[[str], str] = input, *, error_stream: TextIO | None = None) -> None:
        self._input = input_func
        self._errors = error_stream

    def ask(self, question: str) -> str:
        return self._input(question).strip()

    def confirm(self, question: str) -> bool:
        """Ask a ``(Y/n, ENTER=Y)`` question until it gets a usable answer."""
        while True:
            choice = self.ask(f"{question} (Y/n, ENTER=Y): ").lower()
            if choice in ("", "y"):
                return True
            if choice == "n":
                return False
            self.error(f"Invalid choice ('{choice}'). Type 'Y' or 'n'.")

    def error(self, message: str) -> None:
        print(message, file=self._errors or sys.stderr)
