"""Verification of revisions against their attestation records."""

from commitproof.core.verify.models import (
    RevisionComparison,
    VerificationResult,
    VerificationStatus,
)
from commitproof.core.verify.verifier import (
    Verifier,
    compare_fingerprints,
    compare_revisions,
)

__all__ = [
    "RevisionComparison",
    "VerificationResult",
    "VerificationStatus",
    "Verifier",
    "compare_fingerprints",
    "compare_revisions",
]
