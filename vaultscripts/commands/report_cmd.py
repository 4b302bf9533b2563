"""Report and audit commands - read-only views of the vault."""

from __future__ import annotations

import json
from pathlib import Path

from rich.console import Console

from ..audit_log import format_audit_entry, read_audit_log
from ..vault.host import FileSystemHost
from ..vault.repository import EntryRepository
from ..views import ENTRY_VIEWS, build_view, render_view


def run_report(
    vault_path: Path,
    view_name: str,
    *,
    limit: int | None = None,
    entry: str | None = None,
    output_json: bool = False,
) -> int:
    """
    Print one view.

    Returns:
        Exit code (0 = printed, 1 = the view could not run)
    """
    console = Console()
    err_console = Console(stderr=True)

    if view_name in ENTRY_VIEWS and not entry:
        err_console.print(f"View '{view_name}' needs --entry TITLE", style="bold red")
        return 1

    repository = EntryRepository(FileSystemHost(vault_path))
    view = build_view(repository, view_name, limit=limit, entry=entry)

    if output_json:
        print(json.dumps(view.to_dict(), indent=2, ensure_ascii=False))
    else:
        render_view(view, console)
    return 1 if view.message else 0


def run_audit_log(vault_path: Path, *, last_n: int | None = None) -> int:
    """Print the rename audit trail, oldest first."""
    console = Console()
    entries = read_audit_log(vault_path, last_n=last_n)
    if not entries:
        console.print("[dim]No audit entries found.[/dim]")
        return 0
    for entry in entries:
        console.print(format_audit_entry(entry), highlight=False)
    return 0
