"""
Audit trail of committed mutations.

One JSON object per line in `<home>/audit.log`, appended after the document
has been flushed. Deletes record what the cascade removed.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .config import AUDIT_FILE
from .lifecycle.cascade import RemovalSummary
from .util import utc_now_iso

logger = logging.getLogger(__name__)


@dataclass
class AuditEntry:
    """A single audit log entry."""
    timestamp: str
    operation: str
    actor: str | None
    removed: RemovalSummary = field(default_factory=RemovalSummary)
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "operation": self.operation,
            "actor": self.actor,
            "removed": self.removed.to_dict(),
            "metadata": self.metadata,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AuditEntry:
        removed = data.get("removed") or {}
        return cls(
            timestamp=str(data["timestamp"]),
            operation=str(data["operation"]),
            actor=data.get("actor"),
            removed=RemovalSummary(**{k: int(v) for k, v in removed.items() if k in RemovalSummary.__dataclass_fields__}),
            metadata=dict(data.get("metadata") or {}),
        )


def get_audit_log_path(home: Path) -> Path:
    return home / AUDIT_FILE


def log_operation(
    home: Path,
    operation: str,
    actor: str | None,
    removed: RemovalSummary | None = None,
    metadata: dict[str, Any] | None = None,
) -> AuditEntry:
    """
    Append an entry to the audit log.

    Args:
        home: Data directory holding the log
        operation: Operation name (e.g., "users.delete", "requests.respond")
        actor: Id of the user who performed it (None for signup)
        removed: What a delete cascade removed
        metadata: Ids and values needed to read the entry later

    Returns:
        The written entry
    """
    entry = AuditEntry(
        timestamp=utc_now_iso(),
        operation=operation,
        actor=actor,
        removed=removed or RemovalSummary(),
        metadata=metadata or {},
    )

    log_path = get_audit_log_path(home)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    with log_path.open("a", encoding="utf-8") as f:
        f.write(json.dumps(entry.to_dict()) + "\n")

    return entry


def read_audit_log(home: Path, last_n: int | None = None) -> list[AuditEntry]:
    """
    Read entries from the audit log, oldest first.

    Malformed lines are skipped.
    """
    log_path = get_audit_log_path(home)
    if not log_path.exists():
        return []

    entries: list[AuditEntry] = []
    with log_path.open("r", encoding="utf-8") as f:
        for lineno, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                entries.append(AuditEntry.from_dict(json.loads(line)))
            except (ValueError, KeyError, TypeError) as exc:
                logger.warning("Skipping malformed audit line %d in %s: %s", lineno, log_path, exc)

    if last_n is not None:
        return entries[-last_n:] if last_n > 0 else []
    return entries


def format_audit_entry(entry: AuditEntry) -> str:
    """Format an audit entry for human-readable display."""
    lines = [f"[{entry.timestamp}] {entry.operation} by {entry.actor or 'anonymous'}"]

    if entry.removed.total:
        lines.append(f"  Removed: {entry.removed.describe()}")

    for key, value in entry.metadata.items():
        lines.append(f"  {key}: {value}")

    return "\n".join(lines)
