"""Formal auto-title renumbering.

Auto-titled formal entries are named "{Type} {code class}-{count}". Within
each (type, code class) the counts must be exactly 0..n-1. This module scans
the vault, refuses to act if any auto-titled entry is inconsistent, and
otherwise computes the smallest list of renames that closes gaps and
resolves duplicates.
"""

import logging
from dataclasses import dataclass, field

from .errors import RenumberPreconditionError
from .grammar import format_formal_auto_title, is_formal_auto_title, parse_formal_auto_title
from .models import EntryKind, FormalType
from .planning import Rename, RenamePlan
from .vault.repository import EntryRepository, entry_path

logger = logging.getLogger(__name__)

ISSUE_NOT_FORMAL = "Auto-titled non-formal type."
ISSUE_NOT_PROVABLE = "Auto-titled non-provable type."
ISSUE_ALIASED = "Auto-titled with alias."


@dataclass(frozen=True)
class Candidate:
    """A provable formal entry taking part in renumbering."""

    title: str
    path: str
    formal_type: FormalType
    code_class: str
    is_auto_titled: bool

    @property
    def is_correctly_slotted(self) -> bool:
        """Auto-titled with exactly its own type and code class."""
        if not self.is_auto_titled:
            return False
        parsed = parse_formal_auto_title(self.title)
        return parsed is not None and parsed[:2] == (self.formal_type, self.code_class)

    @property
    def count(self) -> int:
        parsed = parse_formal_auto_title(self.title)
        return parsed[2] if parsed else -1


@dataclass
class ScanResult:
    candidates: list[Candidate] = field(default_factory=list)
    issues: dict[str, str] = field(default_factory=dict)
    scanned: int = 0


def _is_formal(tags: list) -> bool:
    return EntryKind.FORMAL.tag in tags


def _formal_type(value) -> FormalType | None:
    try:
        return FormalType(value)
    except ValueError:
        return None


def scan_formal_entries(repository: EntryRepository) -> ScanResult:
    """Collect renumbering candidates and the issues that block renumbering.

    Each auto-titled entry reports at most one issue, checked in this order:
    not tagged formal, unprovable type, non-empty alias. Non-auto-titled
    entries join only when they are formal with a provable type.
    """
    result = ScanResult()
    for raw in repository.list_entries():
        fm = raw.frontmatter
        is_formal = _is_formal(raw.tags)
        is_auto = is_formal_auto_title(raw.title)
        formal_type = _formal_type(fm.get("type"))
        if is_formal:
            result.scanned += 1

        if is_auto:
            aliases = fm.get("aliases")
            if not is_formal:
                result.issues[raw.title] = ISSUE_NOT_FORMAL
                continue
            if formal_type is None or not formal_type.is_provable:
                result.issues[raw.title] = ISSUE_NOT_PROVABLE
                continue
            if isinstance(aliases, list) and any(isinstance(a, str) for a in aliases):
                result.issues[raw.title] = ISSUE_ALIASED
                continue
        elif not is_formal or formal_type is None or not formal_type.is_provable:
            continue

        result.candidates.append(
            Candidate(
                title=raw.title,
                path=raw.path,
                formal_type=formal_type,
                code_class=repository.code_class_from_parents(fm.get("parents")),
                is_auto_titled=is_auto,
            )
        )
    return result


def compute_rename_plan(candidates: list[Candidate]) -> list[Rename]:
    """Renames that make every (type, code class) group dense.

    Correctly slotted entries keep their title when it already holds the
    count being filled. Gaps are filled first from entries that need a
    title (in title order), then by moving the remaining slotted entries.
    Renames come out grouped by class, in ascending count order.
    """
    groups: dict[tuple[FormalType, str], tuple[list[Candidate], list[Candidate]]] = {}
    for candidate in candidates:
        key = (candidate.formal_type, candidate.code_class)
        slotted, unslotted = groups.setdefault(key, ([], []))
        if candidate.is_correctly_slotted:
            slotted.append(candidate)
        else:
            unslotted.append(candidate)

    renames: list[Rename] = []
    for (formal_type, code_class), (slotted, unslotted) in sorted(
        groups.items(), key=lambda item: (item[0][0].value, item[0][1])
    ):
        # Highest count first; the end of the list holds the lowest count
        slotted = sorted(slotted, key=lambda c: (c.count, c.path), reverse=True)
        unslotted = sorted(unslotted, key=lambda c: (c.title, c.path), reverse=True)
        total = len(slotted) + len(unslotted)
        for count in range(total):
            if slotted and slotted[-1].count == count:
                slotted.pop()
                continue
            moved = unslotted.pop() if unslotted else slotted.pop()
            title = format_formal_auto_title(formal_type, code_class, count)
            renames.append(Rename(old_path=moved.path, new_path=entry_path(title)))
    return renames


def plan_formal_auto_titles(repository: EntryRepository) -> RenamePlan:
    """Scan the vault and compute the auto-title rename plan.

    Raises:
        RenumberPreconditionError: any auto-titled entry is inconsistent.
            No plan is produced in that case.
    """
    scan = scan_formal_entries(repository)
    if scan.issues:
        raise RenumberPreconditionError(scan.issues)
    renames = compute_rename_plan(scan.candidates)
    logger.info("Planned %d renames over %d formal entries", len(renames), scan.scanned)
    return RenamePlan(renames=renames, scanned=scan.scanned)
