"""Tests for the command line interface."""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from conftest import formal, informal, inquiry
from vaultscripts.cli import cli
from vaultscripts.config import CONFIG_FILENAME


@pytest.fixture
def run(vault: Path):
    (vault / CONFIG_FILENAME).write_text("loader_min_seconds = 0\n", encoding="utf-8")
    runner = CliRunner()

    def invoke(*args: str, input: str | None = None):
        return runner.invoke(cli, ["--vault", str(vault), *args], input=input)

    return invoke


def _json_output(output: str) -> dict:
    data, _ = json.JSONDecoder().raw_decode(output[output.index("{"):])
    return data


def test_lint_clean_vault(run, write_entry) -> None:
    write_entry("Group Theory", informal())
    result = run("lint")
    assert result.exit_code == 0


def test_lint_reports_errors(run, write_entry) -> None:
    write_entry("Why Groups", inquiry(done="maybe"))
    result = run("lint", "--json")
    assert result.exit_code == 1
    data = _json_output(result.output)
    assert data["summary"]["errors"] == 1
    assert data["errors"][0]["code"] == "done.base"


def test_lint_explain(run) -> None:
    result = run("lint", "--explain", "auto-title")
    assert result.exit_code == 0
    assert "provable" in result.output


def test_renumber_applies_renames(run, vault: Path, write_entry) -> None:
    write_entry("Theorem $-2", formal())
    result = run("renumber", "--yes")
    assert result.exit_code == 0, result.output
    assert "Updated 1 formal auto-titles" in result.output
    assert (vault / "entries" / "Theorem $-0.md").exists()

    audit = run("audit")
    assert "rename" in audit.output
    assert "(phase 2)" in audit.output


def test_renumber_declined(run, vault: Path, write_entry) -> None:
    write_entry("Theorem $-2", formal())
    result = run("renumber", input="n\n")
    assert result.exit_code == 0
    assert "Update aborted" in result.output
    assert (vault / "entries" / "Theorem $-2.md").exists()


def test_renumber_dry_run(run, vault: Path, write_entry) -> None:
    write_entry("Theorem $-2", formal())
    result = run("renumber", "--dry-run")
    assert result.exit_code == 0
    assert "entries/Theorem $-2.md -> entries/Theorem $-0.md" in result.output
    assert (vault / "entries" / "Theorem $-2.md").exists()


def test_renumber_nothing_to_do(run, write_entry) -> None:
    write_entry("Theorem $-0", formal())
    result = run("renumber", "--yes")
    assert result.exit_code == 0
    assert "No renames are required" in result.output


def test_renumber_blocked_by_issues(run, vault: Path, write_entry) -> None:
    write_entry("Definition $-0", formal("definition"))
    write_entry("Theorem $-2", formal())
    result = run("renumber", "--yes")
    assert result.exit_code == 1
    assert "Formal auto-title update failed (see log)" in result.output
    assert (vault / "entries" / "Theorem $-2.md").exists()


def test_new_thought(run, vault: Path) -> None:
    result = run("new", "thought", input="Deep Thought\n")
    assert result.exit_code == 0, result.output
    assert (vault / "entries" / "Deep Thought.md").exists()
    assert "create" in run("audit").output


def test_new_cancelled(run, vault: Path) -> None:
    result = run("new", "thought", input="")
    assert result.exit_code == 0
    assert "Entry creation cancelled" in result.output
    assert list((vault / "entries").iterdir()) == []


def test_new_invalid_title(run) -> None:
    result = run("new", "thought", input="Untitled\n")
    assert result.exit_code == 1
    assert "Invalid open title." in result.output


def test_formal_id(run, write_entry) -> None:
    write_entry("Group Theory", informal(**{"formal-id": "GT"}))
    result = run("formal-id", input="gt\nab\n")
    assert result.exit_code == 0
    assert "AB" in result.output.splitlines()


def test_report(run, write_entry) -> None:
    write_entry("Why Groups", inquiry())
    result = run("report", "inquiries", "--json")
    assert result.exit_code == 0
    assert _json_output(result.output)["pending"][0]["Inquiry"] == "Why Groups"

    assert run("report", "descendants").exit_code == 1


def test_invalid_config(vault: Path) -> None:
    (vault / CONFIG_FILENAME).write_text("backlink_timeout = -1\n", encoding="utf-8")
    result = CliRunner().invoke(cli, ["--vault", str(vault), "lint"])
    assert result.exit_code != 0
    assert "Invalid configuration" in result.output


def test_vault_not_found(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    result = CliRunner().invoke(cli, ["lint"])
    assert result.exit_code != 0
    assert "Vault not found" in result.output
