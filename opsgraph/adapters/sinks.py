"""Audit sinks for gate decisions."""

import logging
from pathlib import Path

from opsgraph.models.audit import AuditEntry

logger = logging.getLogger(__name__)


class AuditSink:
    """Protocol for receiving audit entries."""

    def append(self, entry: AuditEntry) -> None:
        """Append an entry to the sink."""
        raise NotImplementedError


class ListAuditSink(AuditSink):
    """Stores entries in a list."""

    def __init__(self) -> None:
        self.entries: list[AuditEntry] = []

    def append(self, entry: AuditEntry) -> None:
        self.entries.append(entry)

    def clear(self) -> None:
        self.entries.clear()


class FileAuditSink(AuditSink):
    """Writes entries to a JSONL file."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def append(self, entry: AuditEntry) -> None:
        with open(self.path, "a") as f:
            f.write(entry.model_dump_json() + "\n")

    def read(self) -> list[AuditEntry]:
        """Load every entry written so far."""
        if not self.path.exists():
            return []
        with open(self.path) as f:
            return [AuditEntry.model_validate_json(line) for line in f if line.strip()]


def record_audit(sink: AuditSink | None, entry: AuditEntry) -> bool:
    """Hand an entry to the sink without letting sink failures escape.

    Returns True if the sink accepted the entry.
    """
    if sink is None:
        return False
    try:
        sink.append(entry)
    except Exception as e:
        logger.warning(
            "audit sink %s failed for %s %s: %s",
            type(sink).__name__, entry.action.value, entry.entity_id, e,
        )
        return False
    return True
