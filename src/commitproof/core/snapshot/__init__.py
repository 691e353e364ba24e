"""Snapshot hashing of git revisions.

- ``models``: ``TreeEntry``, ``EntryKind``, ``CommitMetadata`` and the
  fingerprint format check.
- ``git``: ``GitRepository``, the command-line git wrapper.
- ``hasher``: ``SnapshotHasher`` and the pure ``fingerprint_entries``.
"""

from commitproof.core.snapshot.git import GitRepository
from commitproof.core.snapshot.hasher import (
    SHA256_AVAILABLE,
    SnapshotHasher,
    ensure_hash_tool,
    fingerprint_entries,
)
from commitproof.core.snapshot.models import (
    FINGERPRINT_RE,
    CommitMetadata,
    EntryKind,
    TreeEntry,
    is_fingerprint,
)

__all__ = [
    "CommitMetadata",
    "EntryKind",
    "FINGERPRINT_RE",
    "GitRepository",
    "SHA256_AVAILABLE",
    "SnapshotHasher",
    "TreeEntry",
    "ensure_hash_tool",
    "fingerprint_entries",
    "is_fingerprint",
]
