"""Read-only view of the entries folder."""

from typing import Any, Iterator

from ..grammar import NULL_CODE_CLASS, is_valid_formal_id, is_valid_source_key
from ..models import ENTRIES_DIR, Link, RawEntry
from .host import HostContext
from .values import decode_frontmatter


class EntryRepository:
    """Entries under `entries/` and their decoded frontmatter.

    Nothing is cached: every call reads the host's current state.
    """

    def __init__(self, host: HostContext):
        self.host = host

    def entry_paths(self) -> list[str]:
        """Paths of the notes placed directly in the entries folder."""
        prefix = f"{ENTRIES_DIR}/"
        return [
            path
            for path in self.host.list_files()
            if path.startswith(prefix) and "/" not in path[len(prefix):]
        ]

    def list_entries(self) -> Iterator[RawEntry]:
        """Yield every entry, sorted by path."""
        for path in sorted(self.entry_paths()):
            yield self._load(path)

    def _load(self, path: str) -> RawEntry:
        title = path.rsplit("/", 1)[-1].removesuffix(".md")
        raw = self.host.get_frontmatter(path)
        return RawEntry(path=path, title=title, frontmatter=decode_frontmatter(raw))

    def resolve(self, path: str) -> dict[str, Any] | None:
        """Decoded frontmatter of the note at `path`, or None if missing."""
        raw = self.host.get_frontmatter(path)
        if raw is None:
            return None
        return decode_frontmatter(raw)

    def resolve_link(self, link: Link) -> dict[str, Any] | None:
        return self.resolve(link.path)

    def get(self, path: str) -> RawEntry | None:
        if not self.host.exists(path):
            return None
        return self._load(path)

    def get_by_title(self, title: str) -> RawEntry | None:
        return self.get(entry_path(title))

    def backlinks(self, path: str) -> set[str]:
        return self.host.backlinks_of(path)

    def find_by_formal_id(self, formal_id: str) -> RawEntry | None:
        for entry in self.list_entries():
            if entry.frontmatter.get("formal-id") == formal_id:
                return entry
        return None

    def find_by_source_key(self, source_key: str) -> list[RawEntry]:
        return [e for e in self.list_entries() if e.frontmatter.get("source-key") == source_key]

    def fetch_formal_ids(self) -> list[str]:
        """Valid formal IDs in use, sorted and deduplicated."""
        ids = {e.frontmatter.get("formal-id") for e in self.list_entries()}
        return sorted(i for i in ids if is_valid_formal_id(i))

    def fetch_source_keys(self) -> list[str]:
        """Valid source keys in use, sorted and deduplicated."""
        keys = {e.frontmatter.get("source-key") for e in self.list_entries()}
        return sorted(k for k in keys if is_valid_source_key(k))

    def title_prefixes(self, length: int) -> set[str]:
        return {path.rsplit("/", 1)[-1][:length] for path in self.entry_paths()}

    def is_unique_title(self, title: str) -> bool:
        return not self.host.exists(entry_path(title))

    def code_class_from_parents(self, parents: Any) -> str:
        """Sorted, dot-joined formal IDs of the linked parents, or "$".

        Parents that are not links, do not exist, or hold no valid formal ID
        are ignored.
        """
        if not isinstance(parents, list):
            return NULL_CODE_CLASS
        resolved: set[str] = set()
        for value in parents:
            if not isinstance(value, Link):
                continue
            metadata = self.resolve_link(value)
            if not metadata:
                continue
            formal_id = metadata.get("formal-id")
            if is_valid_formal_id(formal_id):
                resolved.add(formal_id)
        return ".".join(sorted(resolved)) if resolved else NULL_CODE_CLASS


def entry_path(title: str) -> str:
    return f"{ENTRIES_DIR}/{title}.md"
