"""Verifier: recompute a fingerprint and compare it with the registry.

``compare_fingerprints`` is the whole correctness check, kept as a pure
function so it can be tested without git or a registry. ``Verifier`` wires
it to a ``SnapshotHasher`` and a ``RegistryClient``.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable

from commitproof.core.record.models import AttestationRecord
from commitproof.core.snapshot.hasher import SnapshotHasher
from commitproof.core.verify.models import (
    RevisionComparison,
    VerificationResult,
    VerificationStatus,
)
from commitproof.exceptions import CommitProofError, RecordNotFound
from commitproof.registry.client import RegistryClient

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY: int = 8


def compare_fingerprints(
    revision_id: str,
    local_fingerprint: str,
    record: AttestationRecord | None,
) -> VerificationResult:
    """Compare a locally known fingerprint with a stored record.

    Args:
        revision_id: Revision being verified.
        local_fingerprint: Fingerprint computed from the local codebase.
        record: The registry's record for ``revision_id``, or None if the
            registry holds none.

    Returns:
        MATCH when the fingerprints are equal, MISMATCH when they differ,
        NO_RECORD when ``record`` is None.
    """
    if record is None:
        return VerificationResult(
            revision_id=revision_id,
            status=VerificationStatus.NO_RECORD,
            local_fingerprint=local_fingerprint,
        )
    status = (
        VerificationStatus.MATCH
        if record.fingerprint == local_fingerprint
        else VerificationStatus.MISMATCH
    )
    return VerificationResult(
        revision_id=revision_id,
        status=status,
        local_fingerprint=local_fingerprint,
        recorded_fingerprint=record.fingerprint,
        record=record,
    )


class Verifier:
    """Checks revisions against their attestation records.

    Git work (resolving and hashing) runs in worker threads, leaving the
    event loop free for registry calls on other revisions while a large
    tree is being read.

    Example::

        verifier = Verifier(SnapshotHasher(repo), client)
        result = await verifier.verify("HEAD")
        if result.is_tampered:
            ...
    """

    def __init__(self, hasher: SnapshotHasher, client: RegistryClient) -> None:
        self.hasher = hasher
        self.client = client

    async def verify(
        self, revision: str, fingerprint: str | None = None
    ) -> VerificationResult:
        """Verify one revision.

        Args:
            revision: Any revision expression; resolved to a full commit id
                before the registry lookup.
            fingerprint: Locally known fingerprint to check instead of
                recomputing from the revision (e.g. a working-tree
                fingerprint).

        Raises:
            RevisionNotFound: If the revision does not resolve locally.
            RegistryUnavailable: If the registry could not be reached.
            RegistryRejected: If the registry refused the lookup.
        """
        revision_id = await asyncio.to_thread(self.hasher.repo.resolve, revision)
        if fingerprint is None:
            local = await asyncio.to_thread(self.hasher.fingerprint, revision_id)
        else:
            local = fingerprint
        try:
            record: AttestationRecord | None = await self.client.fetch(revision_id)
        except RecordNotFound:
            record = None

        result = compare_fingerprints(revision_id, local, record)
        if result.is_tampered:
            logger.error(
                "Fingerprint mismatch for %s: local %s, recorded %s",
                revision_id, local, result.recorded_fingerprint,
            )
        return result

    async def verify_many(
        self,
        revisions: Iterable[str],
        *,
        concurrency: int = DEFAULT_CONCURRENCY,
    ) -> list[VerificationResult]:
        """Verify many revisions in parallel, preserving input order.

        A revision that cannot be checked (unknown locally, registry down or
        refusing) yields an ERROR result instead of aborting the run, so
        mismatches found for other revisions are still reported.
        """
        semaphore = asyncio.Semaphore(max(concurrency, 1))

        async def _one(revision: str) -> VerificationResult:
            async with semaphore:
                try:
                    return await self.verify(revision)
                except CommitProofError as exc:
                    logger.warning("Could not verify %s: %s", revision, exc)
                    return VerificationResult(
                        revision_id=revision,
                        status=VerificationStatus.ERROR,
                        local_fingerprint="",
                        error=str(exc),
                    )

        return list(await asyncio.gather(*(_one(r) for r in revisions)))

    def compare_revisions(self, left: str, right: str) -> RevisionComparison:
        """Fingerprint two revisions locally, without touching the registry."""
        return compare_revisions(self.hasher, left, right)


def compare_revisions(hasher: SnapshotHasher, left: str, right: str) -> RevisionComparison:
    """Fingerprint ``left`` and ``right`` with ``hasher`` and pair the results.

    Raises:
        RevisionNotFound: If either revision does not resolve.
    """
    return RevisionComparison(
        left=left,
        right=right,
        left_fingerprint=hasher.fingerprint(left),
        right_fingerprint=hasher.fingerprint(right),
    )
