"""Commit-time attestation workflow.

``run_post_commit`` is what the post-commit hook runs. It builds the record
for the new commit and submits it, and it never raises a commitproof error:
the commit already exists, so every failure here is reported and logged but
is advisory. ``spawn_background`` detaches the whole thing from the hook so
git returns control to the user immediately.
"""

from __future__ import annotations

import logging
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path

from commitproof.core.record.builder import RecordBuilder
from commitproof.core.record.models import AttestationRecord
from commitproof.exceptions import CommitProofError
from commitproof.registry.client import RegistryClient, SubmissionResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttestationOutcome:
    """Summary of one commit-time attestation.

    Attributes:
        revision: The revision expression that was attested.
        record: The built record, or None if building failed locally.
        submission: The submission result, or None if nothing was sent.
        error: Local error message when building failed.
    """

    revision: str
    record: AttestationRecord | None = None
    submission: SubmissionResult | None = None
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.submission is not None and self.submission.ok


async def attest_revision(
    builder: RecordBuilder, client: RegistryClient, revision: str
) -> SubmissionResult:
    """Build and submit the record for ``revision``.

    Raises:
        RevisionNotFound, MetadataUnavailable, HashToolUnavailable: Local
            failures, raised before anything is sent.
    """
    record = builder.build(revision)
    logger.info("Attesting %s as %s", record.revision_id, record.fingerprint)
    return await client.submit(record)


async def run_post_commit(
    builder: RecordBuilder, client: RegistryClient, revision: str = "HEAD"
) -> AttestationOutcome:
    """Attest ``revision`` without ever failing the enclosing git operation."""
    try:
        record = builder.build(revision)
    except CommitProofError as exc:
        logger.error("Cannot attest %s: %s", revision, exc)
        client.audit_log.append(
            "build", revision, attempt=0, outcome="local_error", detail=str(exc)
        )
        return AttestationOutcome(revision=revision, error=str(exc))

    result = await client.submit(record)
    if not result.ok:
        logger.warning(
            "Attestation of %s deferred (%s): %s",
            record.revision_id, result.status.value, result.reason,
        )
    return AttestationOutcome(revision=revision, record=record, submission=result)


def spawn_background(root: Path, revision: str, config_path: Path | None = None) -> int:
    """Run the attestation in a detached child process.

    Returns:
        PID of the child.
    """
    command = [sys.executable, "-m", "commitproof", "hook", "--foreground",
               "--repo", str(root), "--rev", revision]
    if config_path is not None:
        command.extend(["--config", str(config_path)])
    proc = subprocess.Popen(
        command,
        cwd=str(root),
        stdin=subprocess.DEVNULL,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        start_new_session=True,
    )
    return proc.pid
