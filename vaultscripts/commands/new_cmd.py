"""New command - create entries and request formal IDs."""

from __future__ import annotations

import logging
from pathlib import Path

import click
from rich.console import Console

from ..config import Config
from ..errors import CreationError
from ..models import EntryKind
from ..prompts import CANCELLED, ConsolePrompter, Prompter, request_formal_id
from ..templates import EntryCreator
from ..vault.host import FileSystemHost
from ..vault.repository import EntryRepository

logger = logging.getLogger(__name__)


def run_new(
    vault_path: Path,
    kind: EntryKind | None = None,
    *,
    config: Config | None = None,
    prompter: Prompter | None = None,
) -> int:
    """
    Create a new entry interactively.

    Returns:
        Exit code (0 = created or cancelled, 1 = creation error)
    """
    config = config or Config()
    console = Console(stderr=True)
    prompter = prompter or ConsolePrompter(console)

    host = FileSystemHost(vault_path)
    repository = EntryRepository(host)
    creator = EntryCreator(host, repository, prompter)

    try:
        result = creator.create(kind)
    except CreationError as e:
        console.print(f"Creation Error: {e}", style="bold red", highlight=False)
        return 1

    if result is CANCELLED:
        console.print("Entry creation cancelled")
        return 0

    if config.audit:
        result.log_to_audit(vault_path, "create", {"path": result.path})
    console.print(f"Created [bold]{result.title}[/bold]", highlight=False)
    click.echo(result.path)
    return 0


def run_formal_id(vault_path: Path, *, prompter: Prompter | None = None) -> int:
    """Ask for an unused formal ID and print it."""
    console = Console(stderr=True)
    prompter = prompter or ConsolePrompter(console)
    repository = EntryRepository(FileSystemHost(vault_path))

    formal_id = request_formal_id(prompter, repository)
    if formal_id is CANCELLED:
        console.print("Formal ID request cancelled")
        return 0
    click.echo(formal_id)
    return 0
