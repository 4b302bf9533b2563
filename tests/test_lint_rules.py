"""Tests for lint rules over the entries folder."""

from conftest import formal, informal, inquiry
from vaultscripts.vault.rules import LintRules, get_rule_ids


def _rules(results) -> list[tuple[str, str]]:
    return [(r.rule, r.file.rsplit("/", 1)[-1]) for r in results]


def test_clean_vault_has_no_findings(write_entry, repository) -> None:
    write_entry("Group Theory", informal(**{"formal-id": "GT"}))
    write_entry("Theorem GT-0", formal(parents=["[[Group Theory]]"]))
    write_entry("{smith_2001} ch1", inquiry("smith_2001"))
    assert LintRules(repository).run_all() == []


def test_schema_errors_carry_codes(write_entry, repository) -> None:
    write_entry("Why Groups", inquiry(done="maybe"))
    results = LintRules(repository).check_schema()
    assert len(results) == 1
    assert results[0].level == "error"
    assert results[0].code == "done.base"
    assert str(results[0]) == "ERROR: [schema] Why Groups.md - `done` is not a boolean."


def test_unknown_kind_and_reserved_title(write_entry, repository) -> None:
    write_entry("Scratch", {"tags": ["#todo"]})
    write_entry("Untitled 2", {"tags": ["#thought", "🌰"], "aliases": [], "parents": []})

    results = LintRules(repository).run_all(allowed_rules={"unknown-kind", "reserved-title", "title-format"})
    assert _rules(results) == [("unknown-kind", "Scratch.md"), ("reserved-title", "Untitled 2.md")]


def test_title_format(write_entry, repository) -> None:
    write_entry("Plain Log", {"tags": ["#log"], "aliases": [], "date": "2024-01-01"})
    write_entry("{$} ex1", inquiry("$"))
    write_entry("{$} ex2", inquiry("$", tags=["#practice"], **{"one-or-many": "one"}))

    results = LintRules(repository).check_title_format()
    assert [(r.file, r.message) for r in results] == [
        ("entries/Plain Log.md", "Title does not follow the log title format"),
        ("entries/{$} ex1.md", "Inquiries cannot use the sourceless key"),
    ]


def test_auto_title_issues(write_entry, repository) -> None:
    write_entry("Definition $-0", formal("definition"))
    results = LintRules(repository).check_auto_titles()
    assert _rules(results) == [("auto-title", "Definition $-0.md")]
    assert results[0].message == "Auto-titled non-provable type."


def test_duplicate_formal_ids(write_entry, repository) -> None:
    write_entry("Group Theory", informal(**{"formal-id": "GT"}))
    write_entry("Groups Again", informal(**{"formal-id": "GT"}))
    write_entry("Rings", informal(**{"formal-id": "RG"}))

    results = LintRules(repository).check_duplicate_formal_ids()
    assert sorted(_rules(results)) == [
        ("duplicate-formal-id", "Group Theory.md"),
        ("duplicate-formal-id", "Groups Again.md"),
    ]


def test_rule_ids() -> None:
    assert "schema" in get_rule_ids()
    assert get_rule_ids() == sorted(get_rule_ids())
