"""
Plan and result value objects for write commands.

Write commands are split into a diagnostic phase that computes a plan
(nothing is touched) and an action phase that executes it. Plans print a
summary for confirmation and dry runs; results report what was done.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .audit_log import log_operation


@dataclass(frozen=True)
class Rename:
    """Move one note from `old_path` to `new_path` (vault-relative)."""
    old_path: str
    new_path: str

    def __str__(self) -> str:
        return f"{self.old_path} -> {self.new_path}"


@dataclass
class BasePlan(ABC):
    """Base class for operation plans (diagnostic output)."""

    @abstractmethod
    def summary(self) -> str:
        """Human-readable summary of what would be done."""
        ...


@dataclass
class BaseResult:
    """Base class for operation results (action output)."""

    def log_to_audit(self, vault_path: Path, operation: str, metadata: dict[str, Any] | None = None) -> None:
        """Log this result to the audit trail."""
        log_operation(vault_path, operation, metadata or {})


# Formal auto-title renumbering
@dataclass
class RenamePlan(BasePlan):
    """Renames that bring every (type, code class) into dense 0..n-1 order."""
    renames: list[Rename] = field(default_factory=list)
    scanned: int = 0

    def __bool__(self) -> bool:
        return bool(self.renames)

    def __len__(self) -> int:
        return len(self.renames)

    def summary(self) -> str:
        lines = [
            "Formal Auto-Title Plan",
            f"  Formal entries scanned: {self.scanned}",
            f"  Renames: {len(self.renames)}",
        ]
        for rename in self.renames:
            lines.append(f"    {rename}")
        return "\n".join(lines)


@dataclass
class RenameResult(BaseResult):
    """Result of executing a rename plan."""
    renamed: int = 0
    prefix: str = ""
    completed: list[Rename] = field(default_factory=list)


# Entry creation
@dataclass
class CreationResult(BaseResult):
    """Result of the create entry action."""
    path: str | None = None
    title: str | None = None
