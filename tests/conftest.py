"""Pytest configuration and fixtures."""

from pathlib import Path
from typing import Any, Callable

import pytest
import yaml

from vaultscripts.prompts import CANCELLED
from vaultscripts.vault.host import FileSystemHost
from vaultscripts.vault.repository import EntryRepository


def _write(vault: Path, title: str, frontmatter: dict[str, Any] | None, body: str = "") -> Path:
    """Write `entries/{title}.md` with the given frontmatter (None for no block)."""
    path = vault / "entries" / f"{title}.md"
    path.parent.mkdir(parents=True, exist_ok=True)
    parts = []
    if frontmatter is not None:
        parts.append("---")
        parts.append(yaml.safe_dump(frontmatter, allow_unicode=True, sort_keys=False).rstrip())
        parts.append("---")
    parts.append(body)
    path.write_text("\n".join(parts) + "\n", encoding="utf-8")
    return path


class ScriptedPrompter:
    """Prompter answering from a list; an exhausted script cancels."""

    def __init__(self, answers: list[Any]):
        self.answers = list(answers)
        self.notices: list[str] = []
        self.asked: list[str] = []

    def _next(self, message: str) -> Any:
        self.asked.append(message)
        if not self.answers:
            return CANCELLED
        return self.answers.pop(0)

    def confirm(self, message: str, default: bool = False):
        return self._next(message)

    def text(self, message: str, default: str = ""):
        return self._next(message)

    def choose(self, message: str, choices):
        answer = self._next(message)
        if answer is CANCELLED:
            return CANCELLED
        for label, value in choices:
            if label == answer:
                return value
        raise AssertionError(f"{answer!r} is not one of {[label for label, _ in choices]}")

    def notice(self, message: str) -> None:
        self.notices.append(message)


@pytest.fixture
def vault(tmp_path: Path) -> Path:
    """An empty vault with an entries folder."""
    path = tmp_path / "vault"
    (path / "entries").mkdir(parents=True)
    return path


@pytest.fixture
def write_entry(vault: Path) -> Callable[..., Path]:
    def write(title: str, frontmatter: dict[str, Any] | None, body: str = "") -> Path:
        return _write(vault, title, frontmatter, body)

    return write


@pytest.fixture
def host(vault: Path) -> FileSystemHost:
    return FileSystemHost(vault)


@pytest.fixture
def repository(host: FileSystemHost) -> EntryRepository:
    return EntryRepository(host)


@pytest.fixture
def scripted() -> Callable[[list[Any]], ScriptedPrompter]:
    return ScriptedPrompter


def informal(status: str = "🌱", **extra: Any) -> dict[str, Any]:
    return {"tags": ["#informal", status], "aliases": [], "parents": [], **extra}


def formal(formal_type: str = "theorem", parents: list[str] | None = None, **extra: Any) -> dict[str, Any]:
    fm: dict[str, Any] = {
        "tags": ["#formal", "🌱"],
        "aliases": [],
        "parents": parents or [],
        "type": formal_type,
    }
    if formal_type != "definition":
        fm["proved"] = False
    fm.update(extra)
    return fm


def inquiry(source_key: str = "", **extra: Any) -> dict[str, Any]:
    return {
        "tags": ["#inquiry"],
        "parents": [],
        "source-key": source_key,
        "source-link": "",
        "done": False,
        **extra,
    }
