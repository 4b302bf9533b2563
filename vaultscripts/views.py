"""Read-only reports over the entries.

Unresolved views list, per kind, the entries whose frontmatter does not
validate and the valid ones that still need work (not done, not proved,
or underdeveloped). Entry views list the entries related to one entry.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

from rich.console import Console
from rich.table import Table

from .models import EntryKind, FormalType, Link, RawEntry
from .schemas import validate_entry
from .vault.repository import EntryRepository
from .vault.values import iso_sort_key


@dataclass
class ViewResult:
    """Rows of a report: invalid entries first, then pending ones."""

    name: str
    subject: str
    empty_message: str
    pending_columns: list[str] = field(default_factory=list)
    pending: list[list[str]] = field(default_factory=list)
    invalid: list[list[str]] = field(default_factory=list)
    message: str | None = None  # set instead of rows when the view cannot run

    @property
    def is_empty(self) -> bool:
        return not self.pending and not self.invalid

    def to_dict(self) -> dict[str, Any]:
        return {
            "view": self.name,
            "message": self.message,
            "invalid": [dict(zip([self.subject, "Error"], row)) for row in self.invalid],
            "pending": [dict(zip(self.pending_columns, row)) for row in self.pending],
        }


def _display(value: Any) -> str:
    if value is None or value == "":
        return ""
    if isinstance(value, Link):
        return value.display or value.name
    if isinstance(value, list):
        return ", ".join(_display(v) for v in value)
    if isinstance(value, bool):
        return "yes" if value else "no"
    return str(value)


def _label(entry: RawEntry) -> str:
    """Title of an entry, followed by its first alias when it has one."""
    aliases = entry.frontmatter.get("aliases")
    if isinstance(aliases, list) and aliases and isinstance(aliases[0], str) and aliases[0]:
        return f"{entry.title} ({aliases[0]})"
    return entry.title


def _tagged(repository: EntryRepository, kind: EntryKind) -> list[RawEntry]:
    return [e for e in repository.list_entries() if kind.tag in e.tags]


def _underdeveloped(entry) -> bool:
    return entry.status is not None and entry.status.is_underdeveloped


@dataclass(frozen=True)
class UnresolvedView:
    kind: EntryKind
    subject: str
    empty_message: str
    pending_columns: list[str]
    is_pending: Callable[[Any], bool]
    row: Callable[[Any], list[str]]
    select: Callable[[RawEntry], bool] = lambda entry: True


UNRESOLVED_VIEWS: dict[str, UnresolvedView] = {
    "inquiries": UnresolvedView(
        kind=EntryKind.INQUIRY,
        subject="Inquiry",
        empty_message="No unresolved inquiries found.",
        pending_columns=["Inquiry", "Source Key", "Source Link"],
        is_pending=lambda e: not e.done,
        row=lambda e: [e.title, e.source_key, _display(e.source_link)],
    ),
    "practice": UnresolvedView(
        kind=EntryKind.PRACTICE,
        subject="Practice",
        empty_message="No unresolved practice entries found.",
        pending_columns=["Practice", "Source Key", "Source Link", "One-or-many"],
        is_pending=lambda e: not e.done,
        row=lambda e: [e.title, e.source_key, _display(e.source_link), e.one_or_many],
    ),
    "informals": UnresolvedView(
        kind=EntryKind.INFORMAL,
        subject="Informal",
        empty_message="No unresolved informals found.",
        pending_columns=["Informal", "Formal ID", "Status"],
        is_pending=_underdeveloped,
        row=lambda e: [e.title, e.formal_id, e.status.value],
    ),
    "unprovable-formals": UnresolvedView(
        kind=EntryKind.FORMAL,
        subject="Formal",
        empty_message="No unresolved unprovable formals found.",
        pending_columns=["Formal", "Type", "Status"],
        is_pending=_underdeveloped,
        row=lambda e: [e.title, e.formal_type.value, e.status.value],
        select=lambda raw: raw.frontmatter.get("type") == FormalType.DEFINITION.value,
    ),
    "provable-formals": UnresolvedView(
        kind=EntryKind.FORMAL,
        subject="Formal",
        empty_message="No unresolved provable formals found.",
        pending_columns=["Formal", "Type", "Status", "Proved"],
        is_pending=lambda e: not e.proved,
        row=lambda e: [e.title, e.formal_type.value, e.status.value, _display(e.proved)],
        select=lambda raw: raw.frontmatter.get("type")
        in {t.value for t in FormalType if t.is_provable},
    ),
    "thoughts": UnresolvedView(
        kind=EntryKind.THOUGHT,
        subject="Thought",
        empty_message="No unresolved thoughts found.",
        pending_columns=["Thought", "Status"],
        is_pending=_underdeveloped,
        row=lambda e: [e.title, e.status.value],
    ),
}


def unresolved_view(repository: EntryRepository, name: str) -> ViewResult:
    """Entries of one kind that are invalid or still pending."""
    view = UNRESOLVED_VIEWS[name]
    result = ViewResult(
        name=name,
        subject=view.subject,
        empty_message=view.empty_message,
        pending_columns=view.pending_columns,
    )
    for raw in _tagged(repository, view.kind):
        if not view.select(raw):
            continue
        outcome = validate_entry(raw, repository, view.kind)
        if not outcome.ok:
            result.invalid.append([raw.title, outcome.error.message])
        elif view.is_pending(outcome.entry):
            row = view.row(outcome.entry)
            row[0] = _label(raw)
            result.pending.append(row)
    return result


def logs_view(repository: EntryRepository, limit: int | None = None) -> ViewResult:
    """Valid logs, most recent first, and the logs that fail validation."""
    result = ViewResult(
        name="logs",
        subject="Log",
        empty_message="No logs found.",
        pending_columns=["Log", "Date"],
    )
    dated = []
    for raw in _tagged(repository, EntryKind.LOG):
        outcome = validate_entry(raw, repository, EntryKind.LOG)
        if not outcome.ok:
            result.invalid.append([raw.title, outcome.error.message])
        else:
            dated.append((outcome.entry.date.iso, _label(raw)))
    dated.sort(key=lambda item: iso_sort_key(item[0]), reverse=True)
    if limit is not None:
        dated = dated[:limit]
    result.pending = [[label, iso] for iso, label in dated]
    return result


def source_contents_view(repository: EntryRepository, title: str) -> ViewResult:
    """Entries of the same kind sharing the source key of `title`."""
    result = ViewResult(
        name="source-contents",
        subject="Entry",
        empty_message="",
        pending_columns=["Entry", "Parents", "Source Link", "Done"],
    )
    current = repository.get_by_title(title)
    if current is None:
        result.message = f"No entry titled '{title}'."
        return result
    kind = current.kind
    if kind not in (EntryKind.INQUIRY, EntryKind.PRACTICE):
        result.message = "Entry must be an `#inquiry` or `#practice`."
        return result
    source_key = current.frontmatter.get("source-key")
    if source_key is None:
        result.message = "`source-key` is missing."
        return result
    if not isinstance(source_key, str):
        result.message = "`source-key` is not a string."
        return result

    result.empty_message = f"No {kind.value} entries found under `{source_key}`."
    for raw in _tagged(repository, kind):
        fm = raw.frontmatter
        if fm.get("source-key") != source_key:
            continue
        result.pending.append(
            [
                raw.title,
                _display(fm.get("parents")),
                _display(fm.get("source-link")),
                _display(fm.get("done")),
            ]
        )
    return result


def descendants_view(repository: EntryRepository, title: str) -> ViewResult:
    """Informal entries listing `title` among their parents."""
    result = ViewResult(
        name="descendants",
        subject="Informal",
        empty_message="No descendant informal entries found.",
        pending_columns=["Informal", "Parents", "Status"],
    )
    current = repository.get_by_title(title)
    if current is None:
        result.message = f"No entry titled '{title}'."
        return result
    if current.kind is not EntryKind.INFORMAL:
        result.message = "Entry must be `#informal`."
        return result

    for raw in _tagged(repository, EntryKind.INFORMAL):
        parents = raw.frontmatter.get("parents")
        if not isinstance(parents, list):
            continue
        if any(isinstance(p, Link) and p.path == current.path for p in parents):
            status = raw.tags[1] if len(raw.tags) > 1 else ""
            result.pending.append([_label(raw), _display(parents), _display(status)])
    return result


VIEW_NAMES = (*UNRESOLVED_VIEWS, "logs", "source-contents", "descendants")
ENTRY_VIEWS = ("source-contents", "descendants")


def build_view(
    repository: EntryRepository,
    name: str,
    *,
    limit: int | None = None,
    entry: str | None = None,
) -> ViewResult:
    if name in UNRESOLVED_VIEWS:
        return unresolved_view(repository, name)
    if name == "logs":
        return logs_view(repository, limit)
    if entry is None:
        raise ValueError(f"View '{name}' needs an entry title")
    if name == "source-contents":
        return source_contents_view(repository, entry)
    if name == "descendants":
        return descendants_view(repository, entry)
    raise ValueError(f"Unknown view: {name}")


def render_view(view: ViewResult, console: Console) -> None:
    """Print a view as rich tables."""
    if view.message:
        console.print(f"[yellow]{view.message}[/yellow]")
        return
    if view.is_empty:
        console.print(f"[dim]{view.empty_message}[/dim]")
        return

    if view.invalid:
        table = Table(title=f"Invalid ({len(view.invalid)})", title_style="bold red")
        table.add_column(view.subject, style="cyan")
        table.add_column("Error")
        for row in view.invalid:
            table.add_row(*row)
        console.print(table)

    if view.pending:
        table = Table(title=f"Pending ({len(view.pending)})", title_style="bold")
        for i, column in enumerate(view.pending_columns):
            table.add_column(column, style="cyan" if i == 0 else None)
        for row in view.pending:
            table.add_row(*row)
        console.print(table)
