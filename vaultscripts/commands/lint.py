"""Lint command implementation."""

import json
from collections import defaultdict
from pathlib import Path

from rich.console import Console
from rich.table import Table

from ..models import EntryKind
from ..vault.host import FileSystemHost
from ..vault.repository import EntryRepository
from ..vault.rules import RULE_EXPLANATIONS, LintResult, LintRules, get_rule_ids


def run_lint(
    vault_path: Path,
    fail_on: str = "error",
    output_json: bool = False,
    rule_filter: str | None = None,
) -> int:
    """Run lint checks on the entries of a vault.

    Args:
        vault_path: Path to the vault directory
        fail_on: Exit with error if this level or higher found ("error" or "warning")
        output_json: Output results as JSON instead of human-readable
        rule_filter: Only run this rule

    Returns:
        Exit code (0 = success, 1 = failures found)
    """
    console = Console(stderr=True)

    allowed_rules = None
    if rule_filter:
        if rule_filter not in RULE_EXPLANATIONS:
            console.print(f"Unknown rule: {rule_filter}", style="bold red")
            console.print(f"Available: {', '.join(get_rule_ids())}", style="dim")
            return 1
        allowed_rules = {rule_filter}

    console.print(f"Loading entries from {vault_path}...", style="dim")
    repository = EntryRepository(FileSystemHost(vault_path))
    rules = LintRules(repository)
    results = rules.run_all(allowed_rules=allowed_rules)

    # Sort by level (errors first)
    level_order = {"error": 0, "warning": 1, "info": 2}
    results.sort(key=lambda r: (level_order.get(r.level, 99), r.file, r.rule))

    counts = {"error": 0, "warning": 0, "info": 0}
    for r in results:
        counts[r.level] = counts.get(r.level, 0) + 1

    kinds = defaultdict(int)
    for entry in rules.entries:
        kinds[entry.kind.value if entry.kind else "unknown"] += 1

    if output_json:
        _output_json(results, counts, kinds)
    else:
        _print_human_output(console, results, counts, kinds)

    if fail_on == "warning":
        if counts["error"] > 0 or counts["warning"] > 0:
            return 1
    else:  # fail_on == "error"
        if counts["error"] > 0:
            return 1

    return 0


def run_explain(rule_id: str) -> int:
    console = Console()
    explanation = RULE_EXPLANATIONS.get(rule_id)
    if explanation is None:
        console.print(f"Unknown rule: {rule_id}", style="bold red")
        return 1
    console.print(f"[bold]{rule_id}[/bold]: {explanation}")
    return 0


def _result_to_dict(result: LintResult) -> dict:
    """Convert LintResult to JSON-serializable dict."""
    return {
        "level": result.level,
        "rule": result.rule,
        "file": result.file,
        "message": result.message,
        "code": result.code,
    }


def _output_json(results: list[LintResult], counts: dict[str, int], kinds: dict[str, int]) -> None:
    output = {
        "errors": [_result_to_dict(r) for r in results if r.level == "error"],
        "warnings": [_result_to_dict(r) for r in results if r.level == "warning"],
        "info": [_result_to_dict(r) for r in results if r.level == "info"],
        "summary": {
            "entries": dict(kinds),
            "total_entries": sum(kinds.values()),
            "errors": counts["error"],
            "warnings": counts["warning"],
            "info": counts["info"],
        },
    }
    print(json.dumps(output, indent=2, ensure_ascii=False))


def _print_human_output(
    console: Console,
    results: list[LintResult],
    counts: dict[str, int],
    kinds: dict[str, int],
) -> None:
    """Print lint findings grouped by rule, then an entry summary."""
    by_rule = defaultdict(list)
    for r in results:
        by_rule[r.rule].append(r)

    for rule_id, rule_results in sorted(by_rule.items()):
        console.print(f"\nRule: {rule_id}", style="bold")
        for r in rule_results:
            if r.level == "error":
                prefix_style = "bold red"
                prefix = "ERROR"
            elif r.level == "warning":
                prefix_style = "yellow"
                prefix = "WARN"
            else:
                prefix_style = "dim"
                prefix = "INFO"
            file_ref = r.file.rsplit("/", 1)[-1]
            console.print(f"  {prefix}: {file_ref} - {r.message}", style=prefix_style, highlight=False)

    console.print()

    table = Table(title="Entry Summary", show_header=False)
    table.add_column("Kind", style="cyan")
    table.add_column("Count", justify="right")
    for kind in EntryKind:
        table.add_row(kind.value.capitalize(), str(kinds.get(kind.value, 0)))
    if kinds.get("unknown"):
        table.add_row("Unknown", str(kinds["unknown"]))
    table.add_row("Total entries", str(sum(kinds.values())))
    console.print(table)

    console.print()
    if counts["error"] > 0:
        console.print(f"❌ {counts['error']} error(s)", style="bold red")
    if counts["warning"] > 0:
        console.print(f"⚠️  {counts['warning']} warning(s)", style="yellow")
    if counts["info"] > 0:
        console.print(f"ℹ️  {counts['info']} info(s)", style="dim")

    if counts["error"] == 0 and counts["warning"] == 0:
        console.print("✅ No errors or warnings", style="bold green")
