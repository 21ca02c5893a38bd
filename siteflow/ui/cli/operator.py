"""
Click-backed Operator — prompts and progress on the terminal.
"""

from __future__ import annotations

import click

from siteflow.core.operator import Validator


class ClickOperator:
    """Talks to the operator through click.

    Invalid answers are reported and asked again; the workflow only ever
    sees validated values.
    """

    def __init__(self, quiet: bool = False):
        self._quiet = quiet

    def say(self, message: str) -> None:
        click.echo(message)

    def step(self, name: str) -> None:
        if not self._quiet:
            click.secho(f"▶ {name}", fg="cyan", bold=True)

    def show(self, title: str, text: str) -> None:
        click.echo()
        click.secho(f"📋 {title}", fg="white", bold=True)
        for line in text.splitlines():
            click.echo(f"   {line}")
        click.echo()

    def ask(
        self,
        question: str,
        default: str = "",
        hidden: bool = False,
        validate: Validator | None = None,
    ) -> str:
        while True:
            value = click.prompt(
                question,
                default=default or None,
                hide_input=hidden,
                show_default=not hidden,
            )
            if validate is None:
                return value
            try:
                return validate(value)
            except ValueError as e:
                click.secho(f"❌ {e}", fg="red")

    def confirm(self, question: str, default: bool = False) -> bool:
        return click.confirm(question, default=default)
