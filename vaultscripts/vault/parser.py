"""Markdown parsing utilities for wiki-links."""

import re

from ..models import ENTRIES_DIR

# Match [[target]], [[target|display]], [[target#section]], [[target#section|display]]
WIKILINK_PATTERN = re.compile(r"\[\[([^\]|#]+)(?:#[^\]|]+)?(?:\|[^\]]+)?\]\]")

# Same shape, with every part captured, for parsing and rewriting
WIKILINK_PARTS_PATTERN = re.compile(r"\[\[([^\]|#]+)(#[^\]|]+)?(\|[^\]]+)?\]\]")


def extract_links(content: str) -> list[str]:
    """Extract all wiki-link targets from content.

    Returns normalized (lowercase) link targets, deduplicated.
    """
    matches = WIKILINK_PATTERN.findall(content)
    # Normalize to lowercase and deduplicate while preserving order
    seen = set()
    result = []
    for match in matches:
        normalized = match.lower().strip()
        if normalized not in seen:
            seen.add(normalized)
            result.append(normalized)
    return result


def target_to_path(target: str) -> str:
    """Resolve a link target to a vault-relative markdown path.

    Bare names resolve into the entries folder; targets with a folder are
    taken as vault-relative paths.
    """
    target = target.strip()
    if not target.lower().endswith(".md"):
        target = f"{target}.md"
    if "/" not in target:
        target = f"{ENTRIES_DIR}/{target}"
    return target


def parse_wikilink(value: str) -> tuple[str, str | None, str | None] | None:
    """Parse a string that is exactly one wiki-link.

    Returns (target, subpath, display) or None.
    """
    match = WIKILINK_PARTS_PATTERN.fullmatch(value.strip())
    if match is None:
        return None
    target, subpath, display = match.groups()
    return (
        target.strip(),
        subpath[1:] if subpath else None,
        display[1:] if display else None,
    )


def links_to(content: str, path: str) -> bool:
    """Check whether `content` holds a wiki-link resolving to `path`."""
    wanted = path.lower()
    return any(target_to_path(t).lower() == wanted for t in extract_links(content))


def rewrite_links(content: str, old_path: str, new_path: str) -> str:
    """Point every wiki-link that resolves to `old_path` at `new_path`.

    Section and display parts are kept; a link written with a folder keeps
    its folder form.
    """
    old = old_path.lower()

    def replace(match: re.Match) -> str:
        target, subpath, display = match.groups()
        if target_to_path(target).lower() != old:
            return match.group(0)
        if "/" in target.strip():
            new_target = new_path.removesuffix(".md")
        else:
            new_target = new_path.rsplit("/", 1)[-1].removesuffix(".md")
        return f"[[{new_target}{subpath or ''}{display or ''}]]"

    return WIKILINK_PARTS_PATTERN.sub(replace, content)
