"""Tests for the entry watcher's event handling (no observer thread)."""

from pathlib import Path

from watchdog.events import FileDeletedEvent, FileModifiedEvent, FileMovedEvent

from conftest import informal
from vaultscripts.watcher import EntryEventHandler


def _handler(vault: Path, repository) -> tuple[EntryEventHandler, list[str]]:
    events: list[str] = []
    handler = EntryEventHandler(vault, repository, on_event=events.append)
    handler.DEBOUNCE_SECONDS = 0
    return handler, events


def test_only_entries_are_tracked(vault: Path, repository) -> None:
    handler, _ = _handler(vault, repository)
    handler.on_modified(FileModifiedEvent(str(vault / "entries" / "Rings.md")))
    handler.on_modified(FileModifiedEvent(str(vault / "Outside.md")))
    handler.on_modified(FileModifiedEvent(str(vault / "entries" / "nested" / "Deep.md")))
    handler.on_modified(FileModifiedEvent(str(vault / "entries" / "image.png")))
    assert list(handler.pending) == ["entries/Rings.md"]


def test_modified_entry_is_validated_once(vault: Path, write_entry, repository) -> None:
    path = write_entry("Rings", informal())
    handler, events = _handler(vault, repository)

    handler.on_modified(FileModifiedEvent(str(path)))
    handler.flush_pending()
    handler.on_modified(FileModifiedEvent(str(path)))
    handler.flush_pending()

    assert len(events) == 1
    assert "✓" in events[0] and "Rings" in events[0]


def test_invalid_entry_reports_error(vault: Path, write_entry, repository) -> None:
    path = write_entry("Rings", informal(aliases=[""]))
    handler, events = _handler(vault, repository)
    handler.on_modified(FileModifiedEvent(str(path)))
    handler.flush_pending()
    assert events == ["[red]✗[/red] Rings: `aliases` has an empty string."]


def test_deleted_and_moved_entries(vault: Path, write_entry, repository) -> None:
    old = write_entry("Rings", informal())
    handler, events = _handler(vault, repository)

    new = old.with_name("Ring Theory.md")
    old.rename(new)
    handler.on_moved(FileMovedEvent(str(old), str(new)))
    handler.on_deleted(FileDeletedEvent(str(vault / "entries" / "Fields.md")))
    handler.flush_pending()

    assert "[green]✓[/green] Ring Theory" in events
    assert "[dim]-[/dim] Fields removed" in events
