"""Record builder: assembles an ``AttestationRecord`` for a revision.

Pure aside from two reads of the local repository (the tree, for the
fingerprint, and the commit metadata). Nothing is written anywhere.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone
from typing import Protocol

from commitproof.core.record.models import AttestationRecord
from commitproof.core.snapshot.hasher import SnapshotHasher
from commitproof.core.snapshot.models import CommitMetadata


class MetadataSource(Protocol):
    """The subset of ``GitRepository`` the builder needs."""

    def resolve(self, revision: str) -> str: ...

    def commit_metadata(self, commit: str) -> CommitMetadata: ...

    def branch_for(self, commit: str) -> str: ...


def utc_now() -> str:
    """Current time as ISO-8601 UTC with second precision."""
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


class RecordBuilder:
    """Builds attestation records from local git state.

    Example::

        repo = GitRepository.discover(Path.cwd())
        builder = RecordBuilder(repo, SnapshotHasher(repo), project_label="web")
        record = builder.build("HEAD")
    """

    def __init__(
        self,
        repo: MetadataSource,
        hasher: SnapshotHasher,
        *,
        submitter_identity: str = "",
        project_label: str = "",
        clock: Callable[[], str] = utc_now,
    ) -> None:
        self.repo = repo
        self.hasher = hasher
        self.submitter_identity = submitter_identity
        self.project_label = project_label
        self.clock = clock

    def build(self, revision: str) -> AttestationRecord:
        """Assemble the record for ``revision``.

        Raises:
            RevisionNotFound: If the revision cannot be resolved.
            MetadataUnavailable: If the commit metadata cannot be read.
        """
        commit = self.repo.resolve(revision)
        fingerprint = self.hasher.fingerprint(commit)
        meta = self.repo.commit_metadata(commit)
        return AttestationRecord(
            revision_id=meta.revision_id,
            fingerprint=fingerprint,
            author=meta.author,
            author_contact=meta.author_contact,
            branch_name=self.repo.branch_for(commit),
            message=meta.message,
            timestamp=self.clock(),
            submitter_identity=self.submitter_identity or meta.author_contact,
            project_label=self.project_label,
        )
