"""Snapshot data models: tree entries and commit metadata.

Pure data holders with no git or hashing logic, safe to import anywhere.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

# ---------------------------------------------------------------------------
# Fingerprint format: "sha256:<64-hex-characters>"
# ---------------------------------------------------------------------------

FINGERPRINT_RE = re.compile(r"^sha256:[0-9a-f]{64}$")


def is_fingerprint(value: str) -> bool:
    """Return True if ``value`` is a well-formed snapshot fingerprint."""
    return bool(FINGERPRINT_RE.match(value))


# ---------------------------------------------------------------------------
# Tree entries
# ---------------------------------------------------------------------------


class EntryKind(Enum):
    """What a tracked path points at.

    The value is the single tag byte written into the canonical stream.
    Only executability survives from the file mode; every other permission
    bit is ignored.
    """

    FILE = b"f"
    EXECUTABLE = b"x"
    SYMLINK = b"l"
    GITLINK = b"g"

    @classmethod
    def from_git_mode(cls, mode: str) -> EntryKind:
        """Map a git tree mode string (e.g. ``"100755"``) to an entry kind.

        Raises:
            ValueError: For modes that never appear on a blob or gitlink.
        """
        if mode == "100644" or mode == "100664":
            return cls.FILE
        if mode == "100755":
            return cls.EXECUTABLE
        if mode == "120000":
            return cls.SYMLINK
        if mode == "160000":
            return cls.GITLINK
        raise ValueError(f"Unsupported git mode: {mode!r}")


@dataclass(frozen=True)
class TreeEntry:
    """One tracked path and its raw content at a revision.

    Attributes:
        path: Repository-relative path with forward slashes.
        kind: Regular, executable, symlink, or gitlink.
        content: Raw bytes. For symlinks the link target, for gitlinks the
            ASCII submodule commit id.
    """

    path: str
    kind: EntryKind
    content: bytes


@dataclass(frozen=True)
class CommitMetadata:
    """Introspection data for one commit.

    Attributes:
        revision_id: Full commit id.
        author: Author display name.
        author_contact: Author email.
        authored_at: ISO-8601 author date, as git reports it.
        message: Full commit message without trailing whitespace.
    """

    revision_id: str
    author: str
    author_contact: str
    authored_at: str
    message: str
