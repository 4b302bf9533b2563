"""Host capabilities used by the entry tooling.

Components never reach for files directly; they receive a HostContext that
lists notes, reads frontmatter, renames notes (rewriting links to them) and
reports backlinks and modifications. FileSystemHost implements it over a
vault directory on disk.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, Callable, Protocol

import frontmatter
import yaml

from ..errors import HostRenameError
from .parser import links_to, rewrite_links

logger = logging.getLogger(__name__)

ModifyCallback = Callable[[str], None]
Unsubscribe = Callable[[], None]


class HostContext(Protocol):
    """Capability bundle the repository, executor and commands depend on.

    All paths are vault-relative and use forward slashes.
    """

    def list_files(self) -> list[str]: ...

    def exists(self, path: str) -> bool: ...

    def get_frontmatter(self, path: str) -> dict[str, Any] | None: ...

    def rename(self, old_path: str, new_path: str) -> None: ...

    def backlinks_of(self, path: str) -> set[str]: ...

    def subscribe_modify(self, callback: ModifyCallback) -> Unsubscribe: ...

    def create_note(self, path: str, metadata: dict[str, Any], content: str = "") -> None: ...

    def delete(self, path: str) -> None: ...


class FileSystemHost:
    """HostContext over a vault directory.

    Renaming a note rewrites the wiki-links pointing at it in every other
    note; each rewritten note is reported to modify subscribers.
    """

    def __init__(self, vault_path: Path):
        self.vault_path = Path(vault_path)
        self._subscribers: list[ModifyCallback] = []
        self._lock = threading.Lock()

    def _abs(self, path: str) -> Path:
        return self.vault_path / path

    def _rel(self, path: Path) -> str:
        return path.relative_to(self.vault_path).as_posix()

    def list_files(self) -> list[str]:
        """All markdown notes in the vault, sorted by path."""
        result = []
        for md_file in self.vault_path.rglob("*.md"):
            rel = md_file.relative_to(self.vault_path)
            # Skip hidden files and directories
            if any(part.startswith(".") for part in rel.parts):
                continue
            result.append(rel.as_posix())
        return sorted(result)

    def exists(self, path: str) -> bool:
        return self._abs(path).is_file()

    def get_frontmatter(self, path: str) -> dict[str, Any] | None:
        file_path = self._abs(path)
        if not file_path.is_file():
            return None
        try:
            post = frontmatter.load(file_path)
        except (yaml.YAMLError, UnicodeDecodeError, OSError) as e:
            logger.warning("Unreadable frontmatter in %s: %s", path, e)
            return {}
        return dict(post.metadata)

    def read_text(self, path: str) -> str:
        return self._abs(path).read_text(encoding="utf-8")

    def backlinks_of(self, path: str) -> set[str]:
        """Notes holding a wiki-link that resolves to `path`."""
        result = set()
        for rel in self.list_files():
            try:
                text = self.read_text(rel)
            except (UnicodeDecodeError, OSError) as e:
                logger.warning("Skipping unreadable note %s: %s", rel, e)
                continue
            if links_to(text, path):
                result.add(rel)
        return result

    def rename(self, old_path: str, new_path: str) -> None:
        source = self._abs(old_path)
        target = self._abs(new_path)
        if not source.is_file():
            raise HostRenameError(old_path, new_path, "source does not exist")
        if target.exists():
            raise HostRenameError(old_path, new_path, "target already exists")

        referrers = self.backlinks_of(old_path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            source.rename(target)
        except OSError as e:
            raise HostRenameError(old_path, new_path, str(e)) from e
        logger.debug("Renamed %s -> %s", old_path, new_path)

        for rel in sorted(referrers):
            rel = new_path if rel == old_path else rel
            text = self.read_text(rel)
            updated = rewrite_links(text, old_path, new_path)
            if updated != text:
                self._abs(rel).write_text(updated, encoding="utf-8")
                self.notify_modified(rel)

    def subscribe_modify(self, callback: ModifyCallback) -> Unsubscribe:
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def notify_modified(self, path: str) -> None:
        """Report a modified note to every subscriber."""
        with self._lock:
            subscribers = list(self._subscribers)
        for callback in subscribers:
            callback(path)

    def create_note(self, path: str, metadata: dict[str, Any], content: str = "") -> None:
        file_path = self._abs(path)
        if file_path.exists():
            raise FileExistsError(f"'{path}' already exists")
        file_path.parent.mkdir(parents=True, exist_ok=True)
        post = frontmatter.Post(content, **metadata)
        text = frontmatter.dumps(post, allow_unicode=True, sort_keys=False)
        file_path.write_text(text + "\n", encoding="utf-8")

    def delete(self, path: str) -> None:
        self._abs(path).unlink()
