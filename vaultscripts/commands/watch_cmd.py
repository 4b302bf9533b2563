"""Watch command - re-validate entries as they change."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from rich.console import Console

from ..vault.host import FileSystemHost
from ..vault.repository import EntryRepository
from ..watcher import EntryEventHandler, run_watch_loop


def run_watch(vault_path: Path, *, initial: bool = False) -> None:
    """
    Watch the entries folder and report the validation state of each change.

    This is a blocking command that runs until interrupted (Ctrl+C).
    """
    console = Console(stderr=True)
    repository = EntryRepository(FileSystemHost(vault_path))

    console.print(f"[bold]Watching[/bold] {vault_path}")
    console.print("[dim]Press Ctrl+C to stop watching[/dim]")
    console.print()

    event_count = 0

    def on_event(formatted: str) -> None:
        nonlocal event_count
        event_count += 1
        timestamp = datetime.now().strftime("%H:%M:%S")
        console.print(f"[dim]{timestamp}[/dim] {formatted}")

    if initial:
        handler = EntryEventHandler(vault_path, repository, on_event)
        for path in repository.entry_paths():
            handler.check(path)

    try:
        run_watch_loop(vault_path, repository, on_event)
    except KeyboardInterrupt:
        pass
    console.print()
    console.print(f"[bold]Stopped.[/bold] Reported {event_count} changes.")
