"""CLI entrypoint for vaultscripts."""

import logging
import sys
from pathlib import Path

import click

from . import __version__
from .config import LOG_LEVELS, load_config
from .models import ENTRIES_DIR, EntryKind
from .views import VIEW_NAMES

logger = logging.getLogger(__name__)


def _auto_detect_vault(start: Path) -> Path | None:
    """Find the vault (a folder holding entries/) by walking up from `start`."""
    cur = start.resolve()
    for p in (cur, *cur.parents):
        if (p / ENTRIES_DIR).is_dir():
            return p
    return None


@click.group()
@click.version_option(__version__, prog_name="vaultscripts")
@click.option(
    "--vault",
    "-v",
    type=click.Path(exists=False, file_okay=False, dir_okay=True, path_type=Path),
    default=None,
    help="Path to the vault (defaults to the nearest folder holding entries/)",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Logging level (defaults to log_level in .vaultscripts.toml, else WARNING)",
)
@click.pass_context
def cli(ctx: click.Context, vault: Path | None, log_level: str | None) -> None:
    """vaultscripts - naming and metadata tooling for vault entries.

    Create entries, validate their frontmatter and keep formal auto-titles
    densely numbered.
    """
    ctx.ensure_object(dict)
    if vault is None:
        detected = _auto_detect_vault(Path.cwd())
        if detected is None:
            raise click.ClickException(
                f"Vault not found. Pass --vault /path/to/vault or run from inside a vault with an {ENTRIES_DIR}/ folder."
            )
        vault = detected

    if not vault.exists() or not vault.is_dir():
        raise click.BadParameter(f"Directory '{vault}' does not exist.", param_hint="--vault / -v")

    try:
        config = load_config(vault)
    except ValueError as e:
        raise click.ClickException(f"Invalid configuration: {e}") from e

    logging.basicConfig(
        level=(log_level or config.log_level).upper(),
        format="%(levelname)s %(name)s: %(message)s",
        force=True,
    )

    ctx.obj["vault"] = vault.resolve()
    ctx.obj["config"] = config


@cli.command()
@click.option("--yes", "-y", is_flag=True, help="Apply the renames without asking")
@click.option("--dry-run", is_flag=True, help="Show the renames without applying them")
@click.pass_context
def renumber(ctx: click.Context, yes: bool, dry_run: bool) -> None:
    """Update formal auto-titles.

    Every auto-titled theorem, lemma and proposition is named
    "{Type} {code class}-{count}". This command renames entries so that the
    counts of each type and code class run 0, 1, 2, ... without gaps or
    duplicates. Nothing is renamed while any auto-titled entry is
    inconsistent.

    Examples:

        vaultscripts renumber --dry-run

        vaultscripts renumber --yes
    """
    from .commands.renumber_cmd import run_renumber

    exit_code = run_renumber(ctx.obj["vault"], config=ctx.obj["config"], yes=yes, dry_run=dry_run)
    sys.exit(exit_code)


@cli.command()
@click.argument(
    "kind",
    required=False,
    type=click.Choice([k.value for k in EntryKind], case_sensitive=False),
)
@click.pass_context
def new(ctx: click.Context, kind: str | None) -> None:
    """Create an entry of KIND (asked for when omitted).

    Examples:

        vaultscripts new

        vaultscripts new formal
    """
    from .commands.new_cmd import run_new

    exit_code = run_new(
        ctx.obj["vault"],
        EntryKind(kind.lower()) if kind else None,
        config=ctx.obj["config"],
    )
    sys.exit(exit_code)


@cli.command("formal-id")
@click.pass_context
def formal_id(ctx: click.Context) -> None:
    """Request a formal ID that no entry uses yet and print it."""
    from .commands.new_cmd import run_formal_id

    sys.exit(run_formal_id(ctx.obj["vault"]))


@cli.command()
@click.option(
    "--fail-on",
    type=click.Choice(["error", "warning"]),
    default="error",
    help="Exit with error if this level or higher found",
)
@click.option(
    "--json",
    "output_json",
    is_flag=True,
    help="Output results as JSON",
)
@click.option(
    "--rule",
    "rule_filter",
    type=str,
    default=None,
    metavar="RULE_ID",
    help="Only run this rule (e.g., --rule schema)",
)
@click.option(
    "--explain",
    "explain_rule",
    type=str,
    default=None,
    metavar="RULE_ID",
    help="Explain a rule and exit",
)
@click.pass_context
def lint(
    ctx: click.Context,
    fail_on: str,
    output_json: bool,
    rule_filter: str | None,
    explain_rule: str | None,
) -> None:
    """Validate every entry's frontmatter and title."""
    from .commands.lint import run_explain, run_lint

    if explain_rule:
        sys.exit(run_explain(explain_rule))

    exit_code = run_lint(ctx.obj["vault"], fail_on, output_json, rule_filter)
    sys.exit(exit_code)


@cli.command()
@click.argument("view", type=click.Choice(VIEW_NAMES))
@click.option("--limit", type=click.IntRange(min=1), default=None, help="Show at most N rows (logs)")
@click.option("--entry", "entry_title", type=str, default=None, help="Entry title for per-entry views")
@click.option("--json", "output_json", is_flag=True, help="Output the view as JSON")
@click.pass_context
def report(
    ctx: click.Context,
    view: str,
    limit: int | None,
    entry_title: str | None,
    output_json: bool,
) -> None:
    """Show a read-only VIEW of the entries.

    Unresolved views list invalid entries and entries still needing work.
    The source-contents and descendants views take --entry TITLE.

    Examples:

        vaultscripts report inquiries

        vaultscripts report logs --limit 15

        vaultscripts report descendants --entry "Group Theory"
    """
    from .commands.report_cmd import run_report

    exit_code = run_report(
        ctx.obj["vault"],
        view,
        limit=limit,
        entry=entry_title,
        output_json=output_json,
    )
    sys.exit(exit_code)


@cli.command()
@click.option("--initial", is_flag=True, help="Validate every entry once before watching")
@click.pass_context
def watch(ctx: click.Context, initial: bool) -> None:
    """Re-validate entries as they change on disk.

    Runs until interrupted (Ctrl+C).
    """
    from .commands.watch_cmd import run_watch

    run_watch(ctx.obj["vault"], initial=initial)


@cli.command()
@click.option("--last", "last_n", type=int, default=None, help="Show only the last N entries")
@click.pass_context
def audit(ctx: click.Context, last_n: int | None) -> None:
    """Show the audit trail of renames and created entries."""
    from .commands.report_cmd import run_audit_log

    sys.exit(run_audit_log(ctx.obj["vault"], last_n=last_n))


def main() -> None:
    """Main entrypoint."""
    cli()


if __name__ == "__main__":
    main()
