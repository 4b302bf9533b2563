"""Tests for formal auto-title scanning and rename planning."""

import random

import pytest

from conftest import formal, informal
from vaultscripts.errors import RenumberPreconditionError
from vaultscripts.executor import SafeRenameExecutor
from vaultscripts.models import FormalType
from vaultscripts.planning import Rename
from vaultscripts.renumber import (
    ISSUE_ALIASED,
    ISSUE_NOT_FORMAL,
    ISSUE_NOT_PROVABLE,
    Candidate,
    compute_rename_plan,
    plan_formal_auto_titles,
    scan_formal_entries,
)


def _theorem(title: str, path: str | None = None, *, auto: bool = True, code_class: str = "AB") -> Candidate:
    return Candidate(
        title=title,
        path=path or f"entries/{title}.md",
        formal_type=FormalType.THEOREM,
        code_class=code_class,
        is_auto_titled=auto,
    )


def test_candidate_slotting() -> None:
    assert _theorem("Theorem AB-2").is_correctly_slotted
    assert _theorem("Theorem AB-2").count == 2
    assert not _theorem("Theorem CD-2").is_correctly_slotted
    assert not _theorem("Pythagoras", auto=False).is_correctly_slotted
    lemma_titled = Candidate("Lemma AB-0", "entries/Lemma AB-0.md", FormalType.THEOREM, "AB", True)
    assert not lemma_titled.is_correctly_slotted


def test_fills_gap_and_resolves_duplicate() -> None:
    """AB-0, AB-2, AB-2 and one untitled theorem end up as AB-0..AB-3."""
    candidates = [
        _theorem("Theorem AB-0"),
        _theorem("Theorem AB-2"),
        _theorem("Theorem AB-2", "entries/copy/Theorem AB-2.md"),
        _theorem("Pythagoras", auto=False),
    ]
    renames = compute_rename_plan(candidates)

    assert renames == [
        Rename("entries/Pythagoras.md", "entries/Theorem AB-1.md"),
        Rename("entries/copy/Theorem AB-2.md", "entries/Theorem AB-3.md"),
    ]
    assert "entries/Theorem AB-0.md" not in {r.old_path for r in renames}


def test_dense_group_needs_no_renames() -> None:
    assert compute_rename_plan([_theorem("Theorem AB-1"), _theorem("Theorem AB-0")]) == []


def test_counts_compare_numerically() -> None:
    candidates = [_theorem("Theorem AB-10"), _theorem("Theorem AB-2")]
    assert compute_rename_plan(candidates) == [
        Rename("entries/Theorem AB-2.md", "entries/Theorem AB-0.md"),
        Rename("entries/Theorem AB-10.md", "entries/Theorem AB-1.md"),
    ]


def test_unslotted_entries_fill_in_title_order() -> None:
    candidates = [
        _theorem("Zorn", auto=False),
        _theorem("Abel", auto=False),
        _theorem("Theorem CD-0"),
    ]
    assert compute_rename_plan(candidates) == [
        Rename("entries/Abel.md", "entries/Theorem AB-0.md"),
        Rename("entries/Theorem CD-0.md", "entries/Theorem AB-1.md"),
        Rename("entries/Zorn.md", "entries/Theorem AB-2.md"),
    ]


def test_groups_are_independent() -> None:
    candidates = [
        _theorem("Theorem AB-1"),
        _theorem("Theorem $-0", code_class="$"),
        Candidate("Lemma AB-3", "entries/Lemma AB-3.md", FormalType.LEMMA, "AB", True),
    ]
    assert compute_rename_plan(candidates) == [
        Rename("entries/Lemma AB-3.md", "entries/Lemma AB-0.md"),
        Rename("entries/Theorem AB-1.md", "entries/Theorem AB-0.md"),
    ]


def test_scan_collects_issues(write_entry, repository) -> None:
    write_entry("Definition AB-0", formal("definition"))
    write_entry("Theorem $-0", {"tags": ["#thought", "🌱"], "aliases": [], "parents": []})
    write_entry("Lemma $-0", formal("lemma", aliases=["Zorn's Lemma"]))
    write_entry("Proposition $-0", formal("proposition"))

    scan = scan_formal_entries(repository)
    assert scan.issues == {
        "Definition AB-0": ISSUE_NOT_PROVABLE,
        "Lemma $-0": ISSUE_ALIASED,
        "Theorem $-0": ISSUE_NOT_FORMAL,
    }
    assert [c.title for c in scan.candidates] == ["Proposition $-0"]
    assert scan.scanned == 3


def test_scan_skips_unprovable_non_auto_entries(write_entry, repository) -> None:
    write_entry("Group", formal("definition"))
    write_entry("Pythagoras", formal("theorem"))
    write_entry("Group Theory", informal())

    scan = scan_formal_entries(repository)
    assert scan.issues == {}
    assert [(c.title, c.is_auto_titled) for c in scan.candidates] == [("Pythagoras", False)]


def test_precondition_blocks_plan(write_entry, repository) -> None:
    write_entry("Definition AB-0", formal("definition"))
    write_entry("Pythagoras", formal("theorem"))

    with pytest.raises(RenumberPreconditionError) as excinfo:
        plan_formal_auto_titles(repository)
    assert excinfo.value.issues == {"Definition AB-0": "Auto-titled non-provable type."}
    assert "Definition AB-0: Auto-titled non-provable type." in excinfo.value.describe()


def test_code_class_comes_from_parents(write_entry, repository) -> None:
    """An entry whose parents gained a formal ID moves into that class."""
    write_entry("Abelian Groups", informal(**{"formal-id": "AB"}))
    write_entry("Theorem $-0", formal("theorem", parents=["[[Abelian Groups]]"]))

    plan = plan_formal_auto_titles(repository)
    assert plan.renames == [Rename("entries/Theorem $-0.md", "entries/Theorem AB-0.md")]
    assert plan.scanned == 1
    assert "Theorem $-0.md -> entries/Theorem AB-0.md" in plan.summary()


def test_plan_is_idempotent_after_execution(write_entry, host, repository) -> None:
    write_entry("Theorem $-1", formal())
    write_entry("Theorem $-3", formal())
    write_entry("Zorn Lemma", formal("lemma"))
    write_entry("Group Theory", informal(), "See [[Theorem $-3]] and [[Zorn Lemma]].")

    plan = plan_formal_auto_titles(repository)
    assert len(plan) == 3

    executor = SafeRenameExecutor(host, repository, backlink_timeout=1.0, rng=random.Random(7))
    executor.execute(plan)

    titles = sorted(e.title for e in repository.list_entries())
    assert titles == ["Group Theory", "Lemma $-0", "Theorem $-0", "Theorem $-1"]
    body = host.read_text("entries/Group Theory.md")
    assert "[[Theorem $-1]]" in body
    assert "[[Lemma $-0]]" in body
    assert not plan_formal_auto_titles(repository)
