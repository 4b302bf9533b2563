"""Renumber command - update formal auto-titles."""

from __future__ import annotations

import logging
import time
from pathlib import Path

from rich.console import Console

from ..config import Config
from ..errors import BacklinkTimeoutError, RenameExecutionError, RenumberPreconditionError
from ..executor import SafeRenameExecutor
from ..prompts import ConsolePrompter, Prompter, request_confirmation
from ..renumber import plan_formal_auto_titles
from ..vault.host import FileSystemHost
from ..vault.repository import EntryRepository

logger = logging.getLogger(__name__)

FAILED_NOTICE = "Formal auto-title update failed (see log)"


def run_renumber(
    vault_path: Path,
    *,
    config: Config | None = None,
    yes: bool = False,
    dry_run: bool = False,
    prompter: Prompter | None = None,
) -> int:
    """
    Bring every (type, code class) of auto-titled formal entries into
    dense 0..n-1 order.

    Returns:
        Exit code (0 = renamed, nothing to do, or aborted; 1 = failed)
    """
    config = config or Config()
    console = Console(stderr=True)
    prompter = prompter or ConsolePrompter(console)

    host = FileSystemHost(vault_path)
    repository = EntryRepository(host)

    try:
        plan = plan_formal_auto_titles(repository)
    except RenumberPreconditionError as e:
        logger.error(e.describe())
        console.print(FAILED_NOTICE, style="bold red")
        return 1

    if not plan:
        console.print("No renames are required")
        return 0

    console.print(plan.summary(), highlight=False)
    if dry_run:
        console.print("[dim]Dry run - no changes made[/dim]")
        return 0

    if not yes and request_confirmation(prompter, f"Apply {len(plan)} renames?") is not True:
        console.print("Update aborted")
        return 0

    executor = SafeRenameExecutor(
        host,
        repository,
        backlink_timeout=config.backlink_timeout,
        audit_vault=vault_path if config.audit else None,
    )
    started = time.monotonic()
    try:
        with console.status("Please wait..."):
            result = executor.execute(plan)
            # Keep the indicator up long enough to be read
            remaining = config.loader_min_seconds - (time.monotonic() - started)
            if remaining > 0:
                time.sleep(remaining)
    except (RenameExecutionError, BacklinkTimeoutError) as e:
        logger.error("%s", e)
        if e.completed:
            logger.error(
                "Renames applied before the failure:\n%s",
                "\n".join(f"  {step}" for step in e.completed),
            )
        console.print(FAILED_NOTICE, style="bold red")
        return 1

    console.print(f"Updated {result.renamed} formal auto-titles", style="bold green")
    return 0
