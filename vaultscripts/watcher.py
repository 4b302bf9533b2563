"""
File system watcher that re-validates entries as they change.

This module provides:
- Watchdog-based file monitoring of the entries folder
- Debounced re-validation (editors save in bursts)
- Content hashing so touches without changes are ignored
"""

import hashlib
import logging
import time
from pathlib import Path
from typing import Callable

from watchdog.events import (
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from .models import ENTRIES_DIR
from .schemas import validate_entry
from .vault.repository import EntryRepository

logger = logging.getLogger(__name__)


def compute_file_hash(path: Path) -> str | None:
    try:
        return hashlib.sha256(path.read_bytes()).hexdigest()
    except OSError:
        return None


class PendingCheck:
    """A path waiting for the debounce window to pass."""

    def __init__(self, path: Path, timestamp: float, deleted: bool = False):
        self.path = path
        self.timestamp = timestamp
        self.deleted = deleted


class EntryEventHandler(FileSystemEventHandler):
    """
    Re-validates entries when their files change.

    Key behaviors:
    - Only markdown notes placed directly in entries/ are tracked
    - Rapid modifications of one file are reported once
    - Unchanged content (same hash) is not re-reported
    """

    DEBOUNCE_SECONDS = 1.0

    def __init__(
        self,
        vault_path: Path,
        repository: EntryRepository,
        on_event: Callable[[str], None] | None = None,
    ):
        super().__init__()
        self.vault_path = Path(vault_path).resolve()
        self.repository = repository
        self.on_event = on_event

        self.pending: dict[str, PendingCheck] = {}
        self.file_hashes: dict[str, str] = {}  # vault-relative path -> hash

    def _relative(self, path: str) -> str | None:
        """Vault-relative path of a tracked entry, or None."""
        try:
            rel = Path(path).resolve().relative_to(self.vault_path)
        except ValueError:
            return None
        if rel.suffix.lower() != ".md" or len(rel.parts) != 2 or rel.parts[0] != ENTRIES_DIR:
            return None
        if rel.name.startswith("."):
            return None
        return rel.as_posix()

    def _emit(self, message: str) -> None:
        logger.info(message)
        if self.on_event:
            self.on_event(message)

    def check(self, rel: str) -> None:
        """Validate one entry and report the outcome."""
        raw = self.repository.get(rel)
        if raw is None:
            return
        if raw.kind is None:
            self._emit(f"[yellow]?[/yellow] {raw.title}: first tag is not an entry kind")
            return
        outcome = validate_entry(raw, self.repository)
        if outcome.ok:
            self._emit(f"[green]✓[/green] {raw.title}")
        else:
            self._emit(f"[red]✗[/red] {raw.title}: {outcome.error.message}")

    def flush_pending(self) -> None:
        """Check every pending path that has passed the debounce window."""
        now = time.time()
        ready = []

        for rel, pending in list(self.pending.items()):
            if now - pending.timestamp >= self.DEBOUNCE_SECONDS:
                ready.append((rel, pending))
                del self.pending[rel]

        for rel, pending in ready:
            if pending.deleted:
                self.file_hashes.pop(rel, None)
                self._emit(f"[dim]-[/dim] {Path(rel).stem} removed")
                continue

            new_hash = compute_file_hash(pending.path)
            if new_hash is None or new_hash == self.file_hashes.get(rel):
                continue
            self.file_hashes[rel] = new_hash
            self.check(rel)

    def _schedule(self, path: str, deleted: bool = False) -> None:
        rel = self._relative(path)
        if rel is None:
            return
        self.pending[rel] = PendingCheck(Path(path), time.time(), deleted=deleted)

    def on_created(self, event: FileCreatedEvent) -> None:
        if not event.is_directory:
            self._schedule(event.src_path)

    def on_modified(self, event: FileModifiedEvent) -> None:
        if not event.is_directory:
            self._schedule(event.src_path)

    def on_deleted(self, event: FileDeletedEvent) -> None:
        if not event.is_directory:
            self._schedule(event.src_path, deleted=True)

    def on_moved(self, event: FileMovedEvent) -> None:
        if event.is_directory:
            return
        src = self._relative(event.src_path)
        if src is not None:
            self.pending.pop(src, None)
            self.file_hashes.pop(src, None)
        self._schedule(event.dest_path)


def watch_vault(
    vault_path: Path,
    repository: EntryRepository,
    on_event: Callable[[str], None] | None = None,
) -> tuple[Observer, EntryEventHandler]:
    """
    Start watching the entries folder of a vault.

    Returns:
        Tuple of (observer, handler) - caller should call observer.stop() to stop watching
    """
    handler = EntryEventHandler(vault_path=vault_path, repository=repository, on_event=on_event)

    entries = Path(vault_path) / ENTRIES_DIR
    entries.mkdir(parents=True, exist_ok=True)

    observer = Observer()
    observer.schedule(handler, str(entries), recursive=False)
    observer.start()

    return observer, handler


def run_watch_loop(
    vault_path: Path,
    repository: EntryRepository,
    on_event: Callable[[str], None] | None = None,
) -> None:
    """
    Run the watch loop until interrupted.

    This is a blocking function that watches for changes and flushes
    pending checks periodically.
    """
    observer, handler = watch_vault(vault_path, repository, on_event)

    try:
        while True:
            time.sleep(0.5)
            handler.flush_pending()
    except KeyboardInterrupt:
        observer.stop()

    observer.join()
