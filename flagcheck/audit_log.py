"""
Audit log of validation passes.

Each pass that corrected or rejected something can be appended as one JSON
Lines entry to `.flagcheck/corrections.log` next to the config file, so the
substitutions made in verify mode stay on record.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .constraints.schema import ValidationReport


@dataclass
class AuditEntry:
    """A single audit log entry."""
    timestamp: str
    operation: str
    mode: str
    corrections: list[dict[str, Any]] = field(default_factory=list)
    violations: list[dict[str, Any]] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "timestamp": self.timestamp,
            "operation": self.operation,
            "mode": self.mode,
            "corrections": self.corrections,
            "violations": self.violations,
            "metadata": self.metadata,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AuditEntry":
        """Create from dictionary."""
        return cls(
            timestamp=data["timestamp"],
            operation=data["operation"],
            mode=data.get("mode", "strict"),
            corrections=data.get("corrections", []),
            violations=data.get("violations", []),
            metadata=data.get("metadata", {}),
        )


def get_audit_log_path(config_path: Path) -> Path:
    """Get the path to the audit log file."""
    return config_path.parent / ".flagcheck" / "corrections.log"


def log_validation(
    config_path: Path,
    operation: str,
    report: ValidationReport,
    metadata: dict[str, Any] | None = None,
) -> AuditEntry:
    """
    Append a validation pass to the audit log.

    Args:
        config_path: Path to the flag configuration that was validated
        operation: Name of the pass (e.g., "startup", "reconfigure")
        report: The pass's validation report
        metadata: Additional context (e.g., platform description)

    Returns:
        The created audit entry
    """
    entry = AuditEntry(
        timestamp=datetime.now(timezone.utc).isoformat(),
        operation=operation,
        mode=report.mode.value,
        corrections=[c.to_dict() for c in report.corrections],
        violations=[v.to_dict() for v in report.violations],
        metadata=metadata or {},
    )

    log_path = get_audit_log_path(config_path)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    with log_path.open("a", encoding="utf-8") as f:
        f.write(json.dumps(entry.to_dict()) + "\n")

    return entry


def read_audit_log(config_path: Path, last_n: int | None = None) -> list[AuditEntry]:
    """
    Read entries from the audit log.

    Args:
        config_path: Path to the flag configuration
        last_n: If specified, return only the last N entries

    Returns:
        List of audit entries, oldest first
    """
    log_path = get_audit_log_path(config_path)
    if not log_path.exists():
        return []

    entries = []
    with log_path.open("r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if line:
                try:
                    data = json.loads(line)
                    entries.append(AuditEntry.from_dict(data))
                except (json.JSONDecodeError, KeyError):
                    continue  # Skip malformed lines

    if last_n is not None:
        return entries[-last_n:]
    return entries


def format_audit_entry(entry: AuditEntry) -> str:
    """Format an audit entry for human-readable display."""
    lines = [f"[{entry.timestamp}] {entry.operation} ({entry.mode})"]

    for c in entry.corrections:
        lines.append(f"  Corrected: {c['flag']} {c['original']} -> {c['corrected']}")

    for v in entry.violations:
        lines.append(f"  Violated: {v['flag']} - {v['message']}")

    if entry.metadata:
        for key, value in entry.metadata.items():
            lines.append(f"  {key}: {value}")

    return "\n".join(lines)
