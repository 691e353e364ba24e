"""Snapshot hashing: deterministic fingerprints of a tracked-file tree.

The fingerprint of a revision is a SHA-256 digest over a canonical byte
stream built from every tracked entry, sorted by path bytes::

    b"commitproof-snapshot-v1\\0"
    for each entry:
        u64be(len(path)) || path || kind || u64be(len(content)) || content

Length-prefixing every variable field means no choice of path or content
bytes can make two different trees serialize identically. Content is hashed
raw: no line-ending normalization, no text/binary distinction. Timestamps,
ownership, and every mode bit other than executability never enter the
stream, so the result is the same on every host.

SHA-256 availability is probed once at import time. ``SnapshotHasher``
consults the probe result instead of re-checking per call.
"""

from __future__ import annotations

import hashlib
import struct
from collections.abc import Iterable
from typing import Protocol

from commitproof.core.snapshot.git import encode_path
from commitproof.core.snapshot.models import TreeEntry
from commitproof.exceptions import HashToolUnavailable

STREAM_HEADER: bytes = b"commitproof-snapshot-v1\0"
FINGERPRINT_PREFIX: str = "sha256:"

_U64 = struct.Struct(">Q")


def _probe_sha256() -> bool:
    try:
        hashlib.sha256(b"")
    except (ValueError, AttributeError):
        return False
    return True


SHA256_AVAILABLE: bool = _probe_sha256()


def ensure_hash_tool() -> None:
    """Raise ``HashToolUnavailable`` if the import-time probe failed."""
    if not SHA256_AVAILABLE:
        raise HashToolUnavailable("SHA-256 is not available in this Python build")


def _canonical_chunks(entries: Iterable[TreeEntry]) -> Iterable[bytes]:
    keyed = sorted(((encode_path(e.path), e) for e in entries), key=lambda pair: pair[0])
    yield STREAM_HEADER
    previous: bytes | None = None
    for raw_path, entry in keyed:
        if raw_path == previous:
            raise ValueError(f"Duplicate path in snapshot: {entry.path!r}")
        previous = raw_path
        yield _U64.pack(len(raw_path))
        yield raw_path
        yield entry.kind.value
        yield _U64.pack(len(entry.content))
        yield entry.content


def fingerprint_entries(entries: Iterable[TreeEntry]) -> str:
    """Compute the snapshot fingerprint of a set of tree entries.

    Input order does not matter; entries are sorted by path bytes.

    Args:
        entries: Every tracked entry of the snapshot.

    Returns:
        Fingerprint string in ``"sha256:<64-hex-chars>"`` format.

    Raises:
        HashToolUnavailable: If SHA-256 is unavailable.
        ValueError: If two entries share a path.
    """
    ensure_hash_tool()
    digest = hashlib.sha256()
    for chunk in _canonical_chunks(entries):
        digest.update(chunk)
    return FINGERPRINT_PREFIX + digest.hexdigest()


class SnapshotSource(Protocol):
    """The subset of ``GitRepository`` the hasher needs."""

    def resolve(self, revision: str) -> str: ...

    def tree_entries(self, commit: str) -> list[TreeEntry]: ...

    def worktree_entries(self) -> list[TreeEntry]: ...


class SnapshotHasher:
    """Fingerprints revisions of one repository.

    Example::

        hasher = SnapshotHasher(GitRepository.discover(Path.cwd()))
        fp = hasher.fingerprint("HEAD")
    """

    def __init__(self, repo: SnapshotSource) -> None:
        ensure_hash_tool()
        self.repo = repo

    def fingerprint(self, revision: str) -> str:
        """Fingerprint the tracked tree of ``revision``.

        Raises:
            RevisionNotFound: If the revision cannot be resolved locally.
        """
        commit = self.repo.resolve(revision)
        return fingerprint_entries(self.repo.tree_entries(commit))

    def fingerprint_worktree(self) -> str:
        """Fingerprint the tracked files as they currently exist on disk."""
        return fingerprint_entries(self.repo.worktree_entries())
