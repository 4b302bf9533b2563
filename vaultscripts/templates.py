"""Create entry action.

Each kind asks for the parts of its title and the few frontmatter values
the user has to decide, writes the note with the kind's initial
frontmatter, and validates the result. A note that fails validation is
deleted again so no half-initialized entry is left behind.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable

from .errors import CreationError, GrammarError
from .grammar import (
    NULL_CODE_CLASS,
    format_formal_auto_title,
    format_log_title,
    format_path_title,
    is_formal_auto_title,
    is_valid_path_title,
    parse_source_key_prefix,
    to_filename,
)
from .models import EntryKind, FormalType, Status
from .planning import CreationResult
from .prompts import (
    CANCELLED,
    Cancelled,
    Prompter,
    request_formal_id,
    request_open_title,
    request_source_key,
    request_source_trail,
)
from .schemas import validate_entry
from .vault.host import HostContext
from .vault.repository import EntryRepository, entry_path

logger = logging.getLogger(__name__)


class EntryCreator:
    """Runs the creation flow of each entry kind against one host."""

    def __init__(
        self,
        host: HostContext,
        repository: EntryRepository,
        prompter: Prompter,
        clock: Callable[[], datetime] | None = None,
    ):
        self.host = host
        self.repository = repository
        self.prompter = prompter
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def create(self, kind: EntryKind | None = None) -> CreationResult | Cancelled:
        """Create an entry of `kind`, asking for the kind when not given.

        Raises:
            CreationError: the title is invalid or taken, or the written
                entry does not validate.
        """
        if kind is None:
            kind = self.prompter.choose(
                "Entry type", [(k.value.capitalize(), k) for k in EntryKind]
            )
            if kind is CANCELLED:
                return CANCELLED

        flow = {
            EntryKind.INQUIRY: self._inquiry,
            EntryKind.PRACTICE: self._practice,
            EntryKind.INFORMAL: self._informal,
            EntryKind.FORMAL: self._formal,
            EntryKind.THOUGHT: self._thought,
            EntryKind.LOG: self._log,
        }[kind]
        try:
            gathered = flow()
        except GrammarError as e:
            raise CreationError(str(e)) from e
        if gathered is CANCELLED:
            return CANCELLED

        title, metadata = gathered
        return self._write(kind, title, metadata)

    # -- title requests ---------------------------------------------------

    def _source_title(self, allow_sourceless: bool) -> str | Cancelled:
        """A path title for a citable source, otherwise an open title."""
        citable = self.prompter.choose(
            "Citable or noncitable source?", [("Citable", True), ("Noncitable", False)]
        )
        if citable is CANCELLED:
            return CANCELLED
        if not citable:
            title = request_open_title(self.prompter)
            return title if title is CANCELLED else to_filename(title)

        source_key = request_source_key(self.prompter, self.repository, allow_sourceless)
        if source_key is CANCELLED:
            return CANCELLED
        trail = request_source_trail(self.prompter)
        if trail is CANCELLED:
            return CANCELLED
        title = format_path_title(source_key, trail)
        if not is_valid_path_title(title):
            raise GrammarError("Invalid path title.")
        return title

    # -- kinds --------------------------------------------------------------

    def _inquiry(self):
        title = self._source_title(allow_sourceless=False)
        if title is CANCELLED:
            return CANCELLED
        return title, {
            "tags": [EntryKind.INQUIRY.tag],
            "parents": [],
            "source-key": parse_source_key_prefix(title),
            "source-link": "",
            "done": False,
        }

    def _practice(self):
        title = self._source_title(allow_sourceless=True)
        if title is CANCELLED:
            return CANCELLED
        one_or_many = self.prompter.choose(
            "One or many questions from source?",
            [("One Question", "one"), ("Many Questions", "many")],
        )
        if one_or_many is CANCELLED:
            return CANCELLED
        return title, {
            "tags": [EntryKind.PRACTICE.tag],
            "parents": [],
            "source-key": parse_source_key_prefix(title),
            "source-link": "",
            "one-or-many": one_or_many,
            "done": False,
        }

    def _informal(self):
        title = request_open_title(self.prompter)
        if title is CANCELLED:
            return CANCELLED
        wants_id = self.prompter.confirm("Assign a formal ID?", default=False)
        if wants_id is CANCELLED:
            return CANCELLED
        formal_id = request_formal_id(self.prompter, self.repository) if wants_id else ""
        if formal_id is CANCELLED:
            return CANCELLED
        metadata: dict[str, Any] = {
            "tags": [EntryKind.INFORMAL.tag, Status.SEED.value],
            "aliases": [],
            "parents": [],
        }
        if formal_id:
            metadata["formal-id"] = formal_id
        return to_filename(title), metadata

    def _formal(self):
        formal_type = self.prompter.choose(
            "Formal type", [(t.value.capitalize(), t) for t in FormalType]
        )
        if formal_type is CANCELLED:
            return CANCELLED

        generated = False
        if formal_type.is_provable:
            generated = self.prompter.confirm("Generated title?", default=True)
            if generated is CANCELLED:
                return CANCELLED

        if generated:
            title = self.next_auto_title(formal_type)
        else:
            title = request_open_title(self.prompter, f"{formal_type.value.capitalize()} title")
            if title is CANCELLED:
                return CANCELLED
            if is_formal_auto_title(title):
                raise GrammarError("Auto-titles are generated, not typed.")
            title = to_filename(title)

        metadata: dict[str, Any] = {
            "tags": [EntryKind.FORMAL.tag, Status.SEED.value],
            "aliases": [],
            "parents": [],
            "type": formal_type.value,
        }
        if formal_type.is_provable:
            metadata["proved"] = False
        return title, metadata

    def _thought(self):
        title = request_open_title(self.prompter, "Unique title")
        if title is CANCELLED:
            return CANCELLED
        return to_filename(title), {
            "tags": [EntryKind.THOUGHT.tag, Status.SEED.value],
            "aliases": [],
            "parents": [],
        }

    def _log(self):
        title = request_open_title(self.prompter, "Log title")
        if title is CANCELLED:
            return CANCELLED
        now = self.clock().astimezone(timezone.utc).replace(microsecond=0)
        return format_log_title(to_filename(title), now), {
            "tags": [EntryKind.LOG.tag],
            "aliases": [],
            "date": now.isoformat(),
        }

    # -- helpers ------------------------------------------------------------

    def next_auto_title(self, formal_type: FormalType) -> str:
        """The lowest free auto-title in the parentless code class.

        A new entry has no parents yet; renumbering moves it once parents
        with formal IDs are added.
        """
        count = 0
        while True:
            title = format_formal_auto_title(formal_type, NULL_CODE_CLASS, count)
            if self.repository.is_unique_title(title):
                return title
            count += 1

    def _write(self, kind: EntryKind, title: str, metadata: dict[str, Any]) -> CreationResult:
        if not self.repository.is_unique_title(title):
            raise CreationError("Title is not unique.")

        path = entry_path(title)
        self.host.create_note(path, metadata)
        logger.info("Created %s entry %s", kind.value, path)

        raw = self.repository.get(path)
        outcome = validate_entry(raw, self.repository, kind) if raw else None
        if outcome is None or not outcome.ok:
            reason = outcome.error.message if outcome else "entry was not written"
            logger.error("New entry %s failed validation: %s", path, reason)
            self.host.delete(path)
            raise CreationError(f"New entry failed validation: {reason}")
        return CreationResult(path=path, title=title)
