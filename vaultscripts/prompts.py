"""Interactive requests.

Every request returns the value the user gave or CANCELLED. Cancelling
(Ctrl-C or EOF at a prompt) is an ordinary outcome; callers check for it
with `is CANCELLED` and stop without treating it as an error.
"""

from __future__ import annotations

from typing import Protocol, Sequence, TypeVar

import click
from rich.console import Console

from .errors import GrammarError
from .grammar import (
    SOURCELESS_KEY,
    is_valid_formal_id,
    is_valid_open_title,
    is_valid_source_key,
    is_valid_source_trail,
)
from .vault.repository import EntryRepository

T = TypeVar("T")


class Cancelled:
    """Marker for a dismissed prompt."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "CANCELLED"

    def __bool__(self) -> bool:
        return False


CANCELLED = Cancelled()


class Prompter(Protocol):
    """Source of user input."""

    def confirm(self, message: str, default: bool = False) -> bool | Cancelled: ...

    def text(self, message: str, default: str = "") -> str | Cancelled: ...

    def choose(self, message: str, choices: Sequence[tuple[str, T]]) -> T | Cancelled: ...

    def notice(self, message: str) -> None: ...


class ConsolePrompter:
    """Prompter reading from the terminal through click."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console(stderr=True)

    def confirm(self, message: str, default: bool = False) -> bool | Cancelled:
        try:
            return click.confirm(message, default=default, err=True)
        except click.Abort:
            return CANCELLED

    def text(self, message: str, default: str = "") -> str | Cancelled:
        try:
            value = click.prompt(message, default=default, show_default=bool(default), err=True)
        except click.Abort:
            return CANCELLED
        return value.strip()

    def choose(self, message: str, choices: Sequence[tuple[str, T]]) -> T | Cancelled:
        labels = [label for label, _ in choices]
        for i, label in enumerate(labels, start=1):
            self.console.print(f"  [bold]{i}[/bold]. {label}")
        try:
            index = click.prompt(
                message, type=click.IntRange(1, len(labels)), err=True
            )
        except click.Abort:
            return CANCELLED
        return choices[index - 1][1]

    def notice(self, message: str) -> None:
        self.console.print(message)


def request_confirmation(prompter: Prompter, message: str = "Proceed?") -> bool | Cancelled:
    return prompter.confirm(message, default=False)


def request_source_key(
    prompter: Prompter,
    repository: EntryRepository,
    allow_sourceless: bool = False,
) -> str | Cancelled:
    """Ask for a new or existing source key until a valid one is given."""
    known = set(repository.fetch_source_keys())
    if allow_sourceless:
        known.add(SOURCELESS_KEY)
    else:
        known.discard(SOURCELESS_KEY)
    if known:
        prompter.notice("Known source keys: " + ", ".join(sorted(known)))

    while True:
        value = prompter.text("Source key")
        if value is CANCELLED:
            return CANCELLED
        if value == SOURCELESS_KEY and not allow_sourceless:
            prompter.notice("The sourceless key is not allowed here.")
        elif is_valid_source_key(value):
            return value
        else:
            prompter.notice(f"'{value}' is not a valid source key.")


def request_source_trail(prompter: Prompter) -> str | Cancelled:
    """Ask for a source trail; an empty trail is allowed.

    Raises:
        GrammarError: the trail is not empty and does not parse.
    """
    value = prompter.text("Source trail", default="")
    if value is CANCELLED:
        return CANCELLED
    if value and not is_valid_source_trail(value):
        raise GrammarError("Invalid source trail.")
    return value


def request_open_title(prompter: Prompter, label: str = "Open title") -> str | Cancelled:
    """Ask for an open title.

    Raises:
        GrammarError: the title is reserved or does not parse.
    """
    value = prompter.text(label)
    if value is CANCELLED:
        return CANCELLED
    if not is_valid_open_title(value):
        raise GrammarError("Invalid open title.")
    return value


def request_formal_id(prompter: Prompter, repository: EntryRepository) -> str | Cancelled:
    """Ask for a formal ID not used by any entry yet."""
    used = set(repository.fetch_formal_ids())
    if used:
        prompter.notice("Formal IDs in use: " + ", ".join(sorted(used)))
    while True:
        value = prompter.text("Formal ID")
        if value is CANCELLED:
            return CANCELLED
        value = value.upper()
        if not is_valid_formal_id(value):
            prompter.notice("A formal ID is 2 to 4 letters.")
        elif value in used:
            prompter.notice(f"'{value}' is already in use.")
        else:
            return value
