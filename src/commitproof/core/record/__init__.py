"""Attestation records and the builder that assembles them from git state."""

from commitproof.core.record.builder import RecordBuilder, utc_now
from commitproof.core.record.models import AttestationRecord

__all__ = [
    "AttestationRecord",
    "RecordBuilder",
    "utc_now",
]
