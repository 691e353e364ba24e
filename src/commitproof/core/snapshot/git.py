"""Thin wrapper over the ``git`` command line for snapshot introspection.

Every call goes through ``GitRepository._run`` so that failures surface as
``GitCommandError`` and callers can translate them into the domain errors
(``RevisionNotFound``, ``MetadataUnavailable``) that fit their context.

Paths are read with ``-z`` so git never quotes or escapes them. They are
decoded with ``surrogateescape``, which keeps the original bytes recoverable
for hashing even when a path is not valid UTF-8.
"""

from __future__ import annotations

import logging
import os
import stat
import subprocess
from pathlib import Path

from commitproof.core.snapshot.models import CommitMetadata, EntryKind, TreeEntry
from commitproof.exceptions import (
    GitCommandError,
    MetadataUnavailable,
    RevisionNotFound,
)

logger = logging.getLogger(__name__)

GIT_EXECUTABLE: str = "git"

# Field separator for --format strings; NUL never appears in names or emails.
_SEP = "%x00"


def decode_path(raw: bytes) -> str:
    """Decode a git path losslessly."""
    return raw.decode("utf-8", errors="surrogateescape")


def encode_path(path: str) -> bytes:
    """Inverse of ``decode_path``."""
    return path.encode("utf-8", errors="surrogateescape")


class GitRepository:
    """A local git working copy.

    Example::

        repo = GitRepository.discover(Path.cwd())
        commit = repo.resolve("HEAD")
        entries = repo.tree_entries(commit)
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    @classmethod
    def discover(cls, start: Path) -> GitRepository:
        """Find the repository containing ``start``.

        Raises:
            GitCommandError: If ``start`` is not inside a git working copy.
        """
        out = cls(start)._run(["rev-parse", "--show-toplevel"])
        return cls(Path(out.decode("utf-8").strip()))

    # -- Plumbing -----------------------------------------------------------

    def _run(self, args: list[str], *, stdin: bytes | None = None) -> bytes:
        try:
            proc = subprocess.run(
                [GIT_EXECUTABLE, "-C", str(self.root), *args],
                input=stdin,
                capture_output=True,
                check=False,
            )
        except FileNotFoundError as exc:
            raise GitCommandError(args, 127, "git executable not found") from exc
        if proc.returncode != 0:
            raise GitCommandError(
                args, proc.returncode, proc.stderr.decode("utf-8", errors="replace")
            )
        return proc.stdout

    # -- Revisions ----------------------------------------------------------

    def resolve(self, revision: str) -> str:
        """Resolve any revision expression to a full commit id.

        Raises:
            RevisionNotFound: If the expression does not name a commit.
        """
        if not revision or revision.startswith("-"):
            raise RevisionNotFound(revision, "not a revision expression")
        try:
            out = self._run(["rev-parse", "--verify", "--quiet", f"{revision}^{{commit}}"])
        except GitCommandError as exc:
            raise RevisionNotFound(revision, exc.stderr.strip()) from exc
        return out.decode("ascii").strip()

    def list_revisions(self, revision_range: str = "HEAD", max_count: int | None = None) -> list[str]:
        """List commit ids reachable from ``revision_range``, newest first."""
        args = ["rev-list"]
        if max_count is not None:
            args.append(f"--max-count={max_count}")
        args.extend([revision_range, "--"])
        try:
            out = self._run(args)
        except GitCommandError as exc:
            raise RevisionNotFound(revision_range, exc.stderr.strip()) from exc
        return [line for line in out.decode("ascii").splitlines() if line]

    # -- Tree contents ------------------------------------------------------

    def tree_entries(self, commit: str) -> list[TreeEntry]:
        """Return every tracked entry of ``commit`` with its raw content.

        Blob contents are read in a single ``git cat-file --batch`` pass.
        """
        listing = self._run(["ls-tree", "-r", "-z", "--full-tree", commit])
        pending: list[tuple[str, EntryKind, str]] = []
        for record in listing.split(b"\0"):
            if not record:
                continue
            meta, _, raw_path = record.partition(b"\t")
            mode, _type, object_id = meta.decode("ascii").split(" ")
            pending.append((decode_path(raw_path), EntryKind.from_git_mode(mode), object_id))

        blob_ids = [oid for _, kind, oid in pending if kind is not EntryKind.GITLINK]
        blobs = self.read_blobs(blob_ids)

        entries: list[TreeEntry] = []
        for path, kind, object_id in pending:
            if kind is EntryKind.GITLINK:
                content = object_id.encode("ascii")
            else:
                content = blobs[object_id]
            entries.append(TreeEntry(path=path, kind=kind, content=content))
        return entries

    def read_blobs(self, object_ids: list[str]) -> dict[str, bytes]:
        """Read many blobs at once via ``git cat-file --batch``."""
        unique = list(dict.fromkeys(object_ids))
        if not unique:
            return {}
        out = self._run(["cat-file", "--batch"], stdin="\n".join(unique).encode("ascii") + b"\n")

        blobs: dict[str, bytes] = {}
        pos = 0
        for object_id in unique:
            header_end = out.index(b"\n", pos)
            header = out[pos:header_end].decode("ascii").split(" ")
            if len(header) != 3:
                raise GitCommandError(["cat-file", "--batch"], 0, f"missing object {object_id}")
            size = int(header[2])
            start = header_end + 1
            blobs[header[0]] = out[start:start + size]
            # Each object body is followed by a single LF.
            pos = start + size + 1
        return blobs

    def worktree_entries(self) -> list[TreeEntry]:
        """Return the index's tracked paths with their current on-disk content.

        Untracked and ignored files are never listed. Tracked files that
        have been deleted from disk are omitted. Symlinks and gitlinks take
        their kind from the index. Regular files take their executable bit
        from disk unless ``core.filemode`` is false, as git itself does.
        """
        listing = self._run(["ls-files", "-z", "-s"])
        filemode = self._trusts_filemode()
        seen: set[str] = set()
        entries: list[TreeEntry] = []
        for record in listing.split(b"\0"):
            if not record:
                continue
            meta, _, raw_path = record.partition(b"\t")
            mode, object_id, _stage = meta.decode("ascii").split(" ")
            path = decode_path(raw_path)
            if path in seen:
                continue
            seen.add(path)
            kind = EntryKind.from_git_mode(mode)
            disk_path = self.root / path
            if kind is EntryKind.GITLINK:
                content = object_id.encode("ascii")
            elif kind is EntryKind.SYMLINK:
                if not disk_path.is_symlink():
                    continue
                content = encode_path(os.readlink(disk_path))
            else:
                if not disk_path.is_file():
                    continue
                content = disk_path.read_bytes()
                if filemode:
                    executable = bool(disk_path.stat().st_mode & stat.S_IXUSR)
                    kind = EntryKind.EXECUTABLE if executable else EntryKind.FILE
            entries.append(TreeEntry(path=path, kind=kind, content=content))
        return entries

    # -- Metadata -----------------------------------------------------------

    def commit_metadata(self, commit: str) -> CommitMetadata:
        """Read author and message for ``commit``.

        Raises:
            MetadataUnavailable: If git cannot produce the commit's metadata.
        """
        fmt = _SEP.join(["%H", "%an", "%ae", "%aI", "%B"])
        try:
            out = self._run(["log", "-1", f"--format={fmt}", commit, "--"])
        except GitCommandError as exc:
            raise MetadataUnavailable(f"Cannot read metadata for {commit}: {exc}") from exc
        parts = out.decode("utf-8", errors="replace").split("\0")
        if len(parts) != 5 or not parts[0].strip():
            raise MetadataUnavailable(f"Unexpected metadata format for {commit}")
        revision_id, author, email, authored_at, message = parts
        return CommitMetadata(
            revision_id=revision_id.strip(),
            author=author,
            author_contact=email,
            authored_at=authored_at,
            message=message.rstrip(),
        )

    def branch_for(self, commit: str) -> str:
        """Best-effort branch name for ``commit``.

        The checked-out branch wins when it points at ``commit``; otherwise
        the nearest local branch reported by ``git name-rev``. Returns
        ``"HEAD"`` for commits on no branch.
        """
        try:
            current = self._run(["symbolic-ref", "-q", "--short", "HEAD"]).decode("utf-8").strip()
            if current and self.resolve("HEAD") == commit:
                return current
        except (GitCommandError, RevisionNotFound):
            pass
        try:
            name = self._run(
                ["name-rev", "--name-only", "--no-undefined", "--refs=refs/heads/*", commit]
            ).decode("utf-8").strip()
        except GitCommandError:
            return "HEAD"
        for marker in ("~", "^"):
            name = name.split(marker, 1)[0]
        return name.removeprefix("heads/") or "HEAD"

    # -- Local environment --------------------------------------------------

    def _trusts_filemode(self) -> bool:
        """Whether on-disk executable bits are meaningful (``core.filemode``)."""
        try:
            out = self._run(["config", "--bool", "--get", "core.filemode"])
        except GitCommandError:
            return True
        return out.strip() != b"false"

    def user_identity(self) -> str:
        """Return ``"Name <email>"`` from git config, or an empty string."""
        parts: list[str] = []
        for key in ("user.name", "user.email"):
            try:
                parts.append(self._run(["config", "--get", key]).decode("utf-8").strip())
            except GitCommandError:
                parts.append("")
        name, email = parts
        if name and email:
            return f"{name} <{email}>"
        return name or email

    def hooks_dir(self) -> Path:
        """Absolute path of the repository's hooks directory."""
        out = self._run(["rev-parse", "--git-path", "hooks"]).decode("utf-8").strip()
        path = Path(out)
        return path if path.is_absolute() else self.root / path
