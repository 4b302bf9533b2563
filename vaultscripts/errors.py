"""Exceptions raised by vaultscripts.

Schema field errors are reported as data (see schemas.FieldError); the
exceptions here cover failures that stop a command.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .planning import Rename


class VaultScriptsError(Exception):
    """Base class for all vaultscripts errors."""


class GrammarError(VaultScriptsError, ValueError):
    """A title, source key or formal ID was rejected by its grammar."""


class CreationError(VaultScriptsError):
    """An entry could not be created."""


class RenumberPreconditionError(VaultScriptsError):
    """Some entries are inconsistent; auto-titles cannot be renumbered.

    `issues` maps entry titles to a message, in scan order.
    """

    def __init__(self, issues: dict[str, str]):
        self.issues = dict(issues)
        super().__init__(f"{len(self.issues)} entries block the auto-title update")

    def describe(self) -> str:
        lines = ["Resolve the issues below before updating auto-titles:"]
        lines.extend(f"  - {title}: {message}" for title, message in self.issues.items())
        return "\n".join(lines)


class HostRenameError(VaultScriptsError, OSError):
    """The host refused to rename a note."""

    def __init__(self, old_path: str, new_path: str, reason: str):
        self.old_path = old_path
        self.new_path = new_path
        self.reason = reason
        super().__init__(f"Cannot rename '{old_path}' to '{new_path}': {reason}")


class BacklinkTimeoutError(VaultScriptsError, TimeoutError):
    """Backlinking notes were not updated in time after a rename.

    The rename of `path` itself was applied; `completed` lists every rename
    applied so far, that one included, once the executor has filled it in.
    """

    def __init__(self, path: str, pending: set[str], timeout: float, completed: list[Rename] | None = None):
        self.path = path
        self.pending = set(pending)
        self.timeout = timeout
        self.completed = list(completed or [])
        super().__init__(
            f"Timed out after {timeout:g}s waiting for backlinks of '{path}' "
            f"to update: {', '.join(sorted(self.pending))}"
        )


class RenameExecutionError(VaultScriptsError):
    """A rename plan stopped part way.

    Renames already applied are not rolled back; `completed` lists them in
    the order they were applied so they can be reconciled by hand.
    """

    def __init__(self, message: str, completed: list[Rename], cause: Exception | None = None):
        self.completed = list(completed)
        self.cause = cause
        super().__init__(message)
