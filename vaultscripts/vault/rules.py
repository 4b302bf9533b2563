"""Lint rules for entry validation."""

from collections import defaultdict
from dataclasses import dataclass
from typing import Literal

from ..grammar import (
    is_formal_auto_title,
    is_reserved_title,
    is_valid_log_title,
    is_valid_open_title,
    is_valid_path_title,
    is_valid_formal_id,
    parse_source_key_prefix,
    SOURCELESS_KEY,
)
from ..models import EntryKind, RawEntry
from ..renumber import scan_formal_entries
from ..schemas import validate_entry
from .repository import EntryRepository


RULE_EXPLANATIONS = {
    "schema": "Frontmatter must match the schema of the entry's kind (first tag).",
    "unknown-kind": "Notes in entries/ must start their tags with an entry kind tag.",
    "reserved-title": "Default titles such as 'Untitled 2' must be replaced.",
    "title-format": "The title must follow the title grammar of the entry's kind.",
    "auto-title": "Auto-titles are only for provable formal entries without aliases.",
    "duplicate-formal-id": "A formal ID identifies exactly one informal entry.",
}


@dataclass
class LintResult:
    """A single lint finding."""

    level: Literal["error", "warning", "info"]
    rule: str
    file: str
    message: str
    code: str | None = None

    def __str__(self) -> str:
        name = self.file.rsplit("/", 1)[-1]
        return f"{self.level.upper()}: [{self.rule}] {name} - {self.message}"


def _title_is_valid(kind: EntryKind, entry: RawEntry) -> bool:
    title = entry.title
    if kind in (EntryKind.INQUIRY, EntryKind.PRACTICE):
        return is_valid_path_title(title) or is_valid_open_title(title)
    if kind is EntryKind.FORMAL:
        return is_formal_auto_title(title) or is_valid_open_title(title)
    if kind is EntryKind.LOG:
        return is_valid_log_title(title)
    return is_valid_open_title(title)


class LintRules:
    """Collection of lint rules over every entry."""

    def __init__(self, repository: EntryRepository):
        self.repository = repository
        self.entries = list(repository.list_entries())

    def run_all(self, allowed_rules: set[str] | None = None) -> list[LintResult]:
        """Run all lint checks and return findings."""
        checks = {
            "schema": self.check_schema,
            "unknown-kind": self.check_unknown_kind,
            "reserved-title": self.check_reserved_titles,
            "title-format": self.check_title_format,
            "auto-title": self.check_auto_titles,
            "duplicate-formal-id": self.check_duplicate_formal_ids,
        }
        results = []
        for rule_id, check in checks.items():
            if allowed_rules is None or rule_id in allowed_rules:
                results.extend(check())
        return results

    def check_schema(self) -> list[LintResult]:
        results = []
        for entry in self.entries:
            if entry.kind is None:
                continue
            outcome = validate_entry(entry, self.repository)
            if not outcome.ok:
                results.append(
                    LintResult(
                        level="error",
                        rule="schema",
                        file=entry.path,
                        message=outcome.error.message,
                        code=outcome.error.code,
                    )
                )
        return results

    def check_unknown_kind(self) -> list[LintResult]:
        return [
            LintResult(
                level="warning",
                rule="unknown-kind",
                file=entry.path,
                message="First tag is not an entry kind",
            )
            for entry in self.entries
            if entry.kind is None
        ]

    def check_reserved_titles(self) -> list[LintResult]:
        return [
            LintResult(
                level="error",
                rule="reserved-title",
                file=entry.path,
                message=f"'{entry.title}' is a reserved default title",
            )
            for entry in self.entries
            if is_reserved_title(entry.title)
        ]

    def check_title_format(self) -> list[LintResult]:
        results = []
        for entry in self.entries:
            kind = entry.kind
            if kind is None or is_reserved_title(entry.title):
                continue
            if not _title_is_valid(kind, entry):
                results.append(
                    LintResult(
                        level="warning",
                        rule="title-format",
                        file=entry.path,
                        message=f"Title does not follow the {kind.value} title format",
                    )
                )
            elif kind is EntryKind.INQUIRY and parse_source_key_prefix(entry.title) == SOURCELESS_KEY:
                results.append(
                    LintResult(
                        level="warning",
                        rule="title-format",
                        file=entry.path,
                        message="Inquiries cannot use the sourceless key",
                    )
                )
        return results

    def check_auto_titles(self) -> list[LintResult]:
        scan = scan_formal_entries(self.repository)
        by_title = {entry.title: entry.path for entry in self.entries}
        return [
            LintResult(
                level="error",
                rule="auto-title",
                file=by_title.get(title, title),
                message=message,
            )
            for title, message in scan.issues.items()
        ]

    def check_duplicate_formal_ids(self) -> list[LintResult]:
        owners: dict[str, list[str]] = defaultdict(list)
        for entry in self.entries:
            formal_id = entry.frontmatter.get("formal-id")
            if is_valid_formal_id(formal_id):
                owners[formal_id].append(entry.path)

        results = []
        for formal_id, paths in sorted(owners.items()):
            if len(paths) < 2:
                continue
            for path in paths:
                results.append(
                    LintResult(
                        level="error",
                        rule="duplicate-formal-id",
                        file=path,
                        message=f"Formal ID '{formal_id}' is used by {len(paths)} entries",
                    )
                )
        return results


def get_rule_ids() -> list[str]:
    return sorted(RULE_EXPLANATIONS)
