"""Two-phase rename execution.

Renaming straight to the final paths can collide when one rename's target
is another's source. Every note is therefore first moved to a temporary
name built from a random prefix, then moved to its final path. Renames run
one at a time; after each one the executor waits until the host reports
that every note linking to the renamed file has been rewritten.
"""

from __future__ import annotations

import logging
import random
import string
import threading
from pathlib import Path

from .audit_log import log_operation
from .errors import BacklinkTimeoutError, HostRenameError, RenameExecutionError
from .planning import Rename, RenamePlan, RenameResult
from .vault.host import HostContext
from .vault.repository import EntryRepository, entry_path

logger = logging.getLogger(__name__)

PREFIX_LENGTH = 10
DEFAULT_BACKLINK_TIMEOUT = 30.0


class BacklinkWaiter:
    """Resolves once a modify notification arrived for every expected path.

    Instances are registered as modify callbacks; notifications for other
    paths are ignored.
    """

    def __init__(self, expected: set[str]):
        self.pending = set(expected)
        self._lock = threading.Lock()
        self._done = threading.Event()
        if not self.pending:
            self._done.set()

    def __call__(self, path: str) -> None:
        with self._lock:
            self.pending.discard(path)
            if not self.pending:
                self._done.set()

    def wait(self, timeout: float | None) -> bool:
        return self._done.wait(timeout)


class SafeRenameExecutor:
    """Applies a RenamePlan through the host.

    There is no rollback: when a rename fails part way the renames already
    applied stay in place and are listed on the raised error (and in the
    audit log when `audit_vault` is set).
    """

    def __init__(
        self,
        host: HostContext,
        repository: EntryRepository,
        *,
        backlink_timeout: float = DEFAULT_BACKLINK_TIMEOUT,
        rng: random.Random | None = None,
        audit_vault: Path | None = None,
    ):
        self.host = host
        self.repository = repository
        self.backlink_timeout = backlink_timeout
        self.rng = rng or random.Random()
        self.audit_vault = audit_vault

    def generate_unique_prefix(self) -> str:
        """Random uppercase prefix that starts no existing entry title."""
        taken = self.repository.title_prefixes(PREFIX_LENGTH)
        while True:
            prefix = "".join(self.rng.choice(string.ascii_uppercase) for _ in range(PREFIX_LENGTH))
            if prefix not in taken:
                return prefix

    def execute(self, plan: RenamePlan) -> RenameResult:
        """Run both phases of `plan` in order.

        Raises:
            RenameExecutionError: the host rejected a rename.
            BacklinkTimeoutError: backlinks of a renamed note were not
                rewritten within `backlink_timeout` seconds. Its `completed`
                lists the renames applied, the timed-out one last.
        """
        if not plan.renames:
            return RenameResult()

        prefix = self.generate_unique_prefix()
        staged = [
            Rename(r.old_path, entry_path(f"{prefix}{i}")) for i, r in enumerate(plan.renames)
        ]
        final = [Rename(s.new_path, r.new_path) for s, r in zip(staged, plan.renames)]
        logger.debug("Staging %d renames under prefix %s", len(staged), prefix)

        completed: list[Rename] = []
        for phase, steps in ((1, staged), (2, final)):
            for step in steps:
                try:
                    self.rename(step)
                except HostRenameError as e:
                    logger.error("Rename failed after %d steps: %s", len(completed), e)
                    raise RenameExecutionError(str(e), completed, e) from e
                except BacklinkTimeoutError as e:
                    # The note was moved; only its backlinks are in doubt
                    completed.append(step)
                    self._audit(step, phase)
                    e.completed = list(completed)
                    raise
                completed.append(step)
                self._audit(step, phase)

        return RenameResult(renamed=len(plan.renames), prefix=prefix, completed=completed)

    def rename(self, step: Rename) -> None:
        """Rename one note and wait for its backlinks to be rewritten."""
        backlinks = set(self.repository.backlinks(step.old_path)) - {step.old_path}
        if not backlinks:
            self.host.rename(step.old_path, step.new_path)
            logger.info("Renamed %s", step)
            return

        waiter = BacklinkWaiter(backlinks)
        unsubscribe = self.host.subscribe_modify(waiter)
        try:
            self.host.rename(step.old_path, step.new_path)
            logger.info("Renamed %s", step)
            logger.debug("Waiting for %d backlinks of %s", len(backlinks), step.old_path)
            if not waiter.wait(self.backlink_timeout):
                raise BacklinkTimeoutError(step.old_path, waiter.pending, self.backlink_timeout)
        finally:
            unsubscribe()

    def _audit(self, step: Rename, phase: int) -> None:
        if self.audit_vault is None:
            return
        try:
            log_operation(
                self.audit_vault,
                "rename",
                {"old_path": step.old_path, "new_path": step.new_path, "phase": phase},
            )
        except OSError as e:
            logger.warning("Could not write audit entry for %s: %s", step, e)
