"""
Operator — the human at the terminal.

Workflows never print or prompt directly; they talk to an Operator. The
CLI supplies a click-backed one, tests a scripted one.
"""

from __future__ import annotations

from typing import Callable, Protocol

Validator = Callable[[str], str]


class Operator(Protocol):
    def say(self, message: str) -> None:
        """Print an informational line."""

    def step(self, name: str) -> None:
        """Announce that a pipeline step is starting."""

    def show(self, title: str, text: str) -> None:
        """Print a block of text verbatim under a heading."""

    def ask(
        self,
        question: str,
        default: str = "",
        hidden: bool = False,
        validate: Validator | None = None,
    ) -> str:
        """Prompt for a value.

        ``validate`` returns the normalized value or raises ValueError;
        implementations re-prompt until it passes.
        """

    def confirm(self, question: str, default: bool = False) -> bool:
        """Ask a yes/no question."""
