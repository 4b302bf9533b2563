"""
Audit log of the renames applied to a vault.

Renames are never rolled back automatically. Every rename the executor
completes is appended here so that an interrupted run can be reconciled
by hand.

This module provides:
- Structured logging of state-changing operations (JSON Lines)
- Reading and formatting the trail for the `audit` command
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

AUDIT_DIR = ".vaultscripts"


@dataclass
class AuditEntry:
    """A single audit log entry."""
    timestamp: str
    operation: str
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "timestamp": self.timestamp,
            "operation": self.operation,
            "metadata": self.metadata,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AuditEntry":
        """Create from dictionary."""
        return cls(
            timestamp=data["timestamp"],
            operation=data["operation"],
            metadata=data.get("metadata", {}),
        )


def get_audit_log_path(vault_path: Path) -> Path:
    """Get the path to the audit log file."""
    return Path(vault_path) / AUDIT_DIR / "audit.log"


def ensure_audit_dir(vault_path: Path) -> Path:
    """Ensure the .vaultscripts directory exists and return audit log path."""
    log_path = get_audit_log_path(vault_path)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    return log_path


def log_operation(
    vault_path: Path,
    operation: str,
    metadata: dict[str, Any] | None = None,
) -> AuditEntry:
    """
    Log an operation to the audit log.

    Args:
        vault_path: Path to the vault directory
        operation: Name of the operation (e.g., "rename", "create")
        metadata: Additional context (e.g., old and new paths)

    Returns:
        The created audit entry
    """
    entry = AuditEntry(
        timestamp=datetime.now(timezone.utc).isoformat(),
        operation=operation,
        metadata=metadata or {},
    )

    log_path = ensure_audit_dir(vault_path)

    # Append as JSON Lines format (one JSON object per line)
    with log_path.open("a", encoding="utf-8") as f:
        f.write(json.dumps(entry.to_dict(), ensure_ascii=False) + "\n")

    return entry


def read_audit_log(vault_path: Path, last_n: int | None = None) -> list[AuditEntry]:
    """
    Read entries from the audit log.

    Args:
        vault_path: Path to the vault directory
        last_n: If specified, return only the last N entries

    Returns:
        List of audit entries, oldest first
    """
    log_path = get_audit_log_path(vault_path)
    if not log_path.exists():
        return []

    entries = []
    with log_path.open("r", encoding="utf-8") as f:
        for lineno, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                entries.append(AuditEntry.from_dict(json.loads(line)))
            except (json.JSONDecodeError, KeyError):
                logger.warning("Skipping malformed audit line %d in %s", lineno, log_path)

    if last_n is not None:
        return entries[-last_n:] if last_n > 0 else []
    return entries


def format_audit_entry(entry: AuditEntry) -> str:
    """Format an audit entry for human-readable display."""
    meta = entry.metadata
    if entry.operation == "rename" and "old_path" in meta and "new_path" in meta:
        line = f"[{entry.timestamp}] rename {meta['old_path']} -> {meta['new_path']}"
        if "phase" in meta:
            line += f" (phase {meta['phase']})"
        return line

    lines = [f"[{entry.timestamp}] {entry.operation}"]
    for key, value in meta.items():
        lines.append(f"  {key}: {value}")
    return "\n".join(lines)
