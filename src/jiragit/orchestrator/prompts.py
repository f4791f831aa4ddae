"""Interactive prompt steps.

Each step is plain data; ``Prompter.ask`` renders one step on the terminal and
returns the answer, or ``None`` when the user cancels (Ctrl-C, EOF or an empty
answer where one is required).
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

import click


@dataclass(frozen=True, slots=True)
class Choice:
    """A candidate answer of a select or autocomplete step."""

    title: str
    value: Any
    description: str | None = None


@dataclass(frozen=True, slots=True)
class SelectStep:
    name: str
    message: str
    choices: Sequence[Choice] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class AutocompleteStep:
    name: str
    message: str
    choices: Sequence[Choice] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class TextStep:
    name: str
    message: str
    initial: str | None = None


@dataclass(frozen=True, slots=True)
class ConfirmStep:
    name: str
    message: str
    default: bool = True


PromptStep = SelectStep | AutocompleteStep | TextStep | ConfirmStep


def filter_choices(query: str, choices: Sequence[Choice]) -> list[Choice]:
    """Keep choices whose title or description contains ``query``.

    Matching is a plain, case-sensitive substring test. An empty query keeps
    every choice.
    """

    return [
        choice
        for choice in choices
        if query in choice.title or (choice.description is not None and query in choice.description)
    ]


class Prompter:
    """Renders prompt steps with click."""

    def ask(self, step: PromptStep) -> Any | None:
        if isinstance(step, SelectStep):
            return self._select(step.message, step.choices)
        if isinstance(step, AutocompleteStep):
            return self._autocomplete(step.message, step.choices)
        if isinstance(step, TextStep):
            return self._text(step.message, step.initial)
        if isinstance(step, ConfirmStep):
            return self._confirm(step.message, step.default)
        raise TypeError(f"Unsupported prompt step: {type(step).__name__}")

    def ask_all(self, steps: Sequence[PromptStep]) -> dict[str, Any | None]:
        """Ask ``steps`` in order, stopping after the first cancelled one."""

        answers: dict[str, Any | None] = {}
        for step in steps:
            answer = self.ask(step)
            answers[step.name] = answer
            if answer is None:
                break
        return answers

    @staticmethod
    def _read(message: str, *, default: str | None = None) -> str | None:
        try:
            value: str = click.prompt(
                message,
                default=default if default is not None else "",
                show_default=bool(default),
            )
        except click.Abort:
            click.echo()
            return None
        return value

    def _text(self, message: str, initial: str | None) -> str | None:
        value = self._read(message, default=initial)
        if value is None or not value.strip():
            return None
        return value.strip()

    def _confirm(self, message: str, default: bool) -> bool | None:
        try:
            return click.confirm(message, default=default)
        except click.Abort:
            click.echo()
            return None

    def _select(self, message: str, choices: Sequence[Choice]) -> Any | None:
        click.echo(message)
        if not choices:
            click.echo("  No matching choices")
            return None

        for index, choice in enumerate(choices, start=1):
            line = f"  {index}) {choice.title}"
            if choice.description:
                line = f"{line} - {choice.description}"
            click.echo(line)

        while True:
            raw = self._read("Choice")
            if raw is None or not raw.strip():
                return None
            try:
                index = int(raw)
            except ValueError:
                index = 0
            if 1 <= index <= len(choices):
                return choices[index - 1].value
            click.echo(f"Enter a number between 1 and {len(choices)}", err=True)

    def _autocomplete(self, message: str, choices: Sequence[Choice]) -> Any | None:
        if not choices:
            return self._select(message, choices)

        while True:
            query = self._read(f"{message} (type to filter, Enter for all)")
            if query is None:
                return None
            matches = filter_choices(query, choices)
            if matches:
                return self._select(message, matches)
            click.echo(f"No choices match {query!r}", err=True)
