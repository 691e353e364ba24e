"""Verification result models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from commitproof.core.record.models import AttestationRecord


class VerificationStatus(Enum):
    """Outcome of comparing a local fingerprint with the registry.

    ``MISMATCH`` is the tamper signal: the codebase for this revision is not
    the one that was attested. ``ERROR`` only appears in bulk audits, for a
    revision that could not be checked at all.
    """

    MATCH = "match"
    MISMATCH = "mismatch"
    NO_RECORD = "no_record"
    ERROR = "error"


@dataclass(frozen=True)
class VerificationResult:
    """Result of verifying one revision.

    Attributes:
        revision_id: The revision that was verified.
        status: MATCH, MISMATCH, NO_RECORD, or ERROR.
        local_fingerprint: Fingerprint computed (or supplied) locally. Empty
            for ERROR results.
        recorded_fingerprint: Fingerprint stored in the registry, or None.
        record: The full stored record, or None.
        error: Why the revision could not be checked (ERROR only).
    """

    revision_id: str
    status: VerificationStatus
    local_fingerprint: str
    recorded_fingerprint: str | None = None
    record: AttestationRecord | None = None
    error: str = ""

    @property
    def is_match(self) -> bool:
        return self.status is VerificationStatus.MATCH

    @property
    def is_tampered(self) -> bool:
        return self.status is VerificationStatus.MISMATCH


@dataclass(frozen=True)
class RevisionComparison:
    """Fingerprints of two revisions side by side."""

    left: str
    right: str
    left_fingerprint: str
    right_fingerprint: str

    @property
    def identical(self) -> bool:
        return self.left_fingerprint == self.right_fingerprint
