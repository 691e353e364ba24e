"""Append-only audit log of registry attempts.

One JSON object per line::

    {"attempt": 1, "detail": "", "operation": "submit", "outcome": "accepted",
     "revisionId": "...", "timestamp": "2026-01-01T00:00:00+00:00"}

Writes never raise. A failing disk must not turn an advisory attestation
into a commit-blocking error, so write errors are logged at debug level and
dropped. Each entry is written with a single ``os.write`` on an
``O_APPEND`` descriptor while holding a process-local lock, so concurrent
writers never interleave partial lines.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuditEntry:
    """One line of the audit log."""

    timestamp: str
    operation: str
    revision_id: str
    attempt: int
    outcome: str
    detail: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "operation": self.operation,
            "revisionId": self.revision_id,
            "attempt": self.attempt,
            "outcome": self.outcome,
            "detail": self.detail,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AuditEntry:
        return cls(
            timestamp=str(data.get("timestamp", "")),
            operation=str(data.get("operation", "")),
            revision_id=str(data.get("revisionId", "")),
            attempt=int(data.get("attempt", 0)),
            outcome=str(data.get("outcome", "")),
            detail=str(data.get("detail", "")),
        )


class AuditLog:
    """Line-delimited, append-only log file.

    Example::

        log = AuditLog(Path(".commitproof/audit.log"))
        log.append("submit", "abc123", attempt=1, outcome="accepted")
        for entry in log.entries():
            print(entry.outcome)
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    def append(
        self,
        operation: str,
        revision_id: str,
        *,
        attempt: int,
        outcome: str,
        detail: str = "",
    ) -> None:
        """Record one attempt. Never raises."""
        entry = AuditEntry(
            timestamp=datetime.now(timezone.utc).isoformat(),
            operation=operation,
            revision_id=revision_id,
            attempt=attempt,
            outcome=outcome,
            detail=detail,
        )
        line = json.dumps(entry.to_dict(), sort_keys=True, ensure_ascii=True) + "\n"
        try:
            with self._lock:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                fd = os.open(self.path, os.O_WRONLY | os.O_APPEND | os.O_CREAT, 0o644)
                try:
                    os.write(fd, line.encode("ascii"))
                finally:
                    os.close(fd)
        except OSError as exc:
            logger.debug("Audit log write to %s failed: %s", self.path, exc)

    def entries(self, revision_id: str | None = None) -> list[AuditEntry]:
        """Read back entries, oldest first, optionally for one revision.

        Lines that are not valid JSON objects are skipped.
        """
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        result: list[AuditEntry] = []
        for line in text.splitlines():
            if not line.strip():
                continue
            try:
                data = json.loads(line)
            except ValueError:
                continue
            if not isinstance(data, dict):
                continue
            try:
                entry = AuditEntry.from_dict(data)
            except (TypeError, ValueError):
                continue
            if revision_id is None or entry.revision_id == revision_id:
                result.append(entry)
        return result


class NullAuditLog(AuditLog):
    """Audit log that discards everything (used when no log is configured)."""

    def __init__(self) -> None:
        super().__init__(Path(os.devnull))

    def append(self, operation: str, revision_id: str, *, attempt: int, outcome: str, detail: str = "") -> None:
        return None

    def entries(self, revision_id: str | None = None) -> list[AuditEntry]:
        return []
