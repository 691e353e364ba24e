"""Append-only audit trail of registry attempts and outcomes."""

from __future__ import annotations

from commitproof.audit.log import AuditEntry, AuditLog, NullAuditLog

__all__ = [
    "AuditEntry",
    "AuditLog",
    "NullAuditLog",
]
