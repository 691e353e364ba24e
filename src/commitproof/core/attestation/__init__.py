"""Commit-time attestation: build the record for a new commit and submit it."""

from commitproof.core.attestation.workflow import (
    AttestationOutcome,
    attest_revision,
    run_post_commit,
    spawn_background,
)

__all__ = [
    "AttestationOutcome",
    "attest_revision",
    "run_post_commit",
    "spawn_background",
]
