"""commitproof exception hierarchy.

All public exceptions inherit from CommitProofError, giving callers a single
base class to catch when they want to handle any commitproof-specific failure
without swallowing unrelated errors.

Two families matter for propagation:

- ``AttestationError`` covers local, non-retryable conditions. The attempt is
  aborted immediately and the operator is told.
- ``RegistryError`` covers the remote side. Transient failures are retried by
  the client before any of these surface.
"""

from __future__ import annotations


class CommitProofError(Exception):
    """Base exception for all commitproof errors."""


class ConfigError(CommitProofError):
    """Raised when the configuration file is missing, unreadable, or invalid."""


# ---------------------------------------------------------------------------
# Local / fatal
# ---------------------------------------------------------------------------


class AttestationError(CommitProofError):
    """Base class for local failures that abort an attestation attempt."""


class RevisionNotFound(AttestationError):
    """Raised when a revision cannot be resolved to a commit locally."""

    def __init__(self, revision: str, detail: str = "") -> None:
        self.revision = revision
        message = f"Revision not found: {revision!r}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class MetadataUnavailable(AttestationError):
    """Raised when a commit's metadata cannot be read (e.g. corrupt history)."""


class HashToolUnavailable(AttestationError):
    """Raised when no SHA-256 implementation is available to this process."""


class GitCommandError(AttestationError):
    """Raised when a git invocation fails or git is not installed."""

    def __init__(self, command: list[str], returncode: int, stderr: str = "") -> None:
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        detail = stderr.strip()
        super().__init__(
            f"git {' '.join(command)} exited with {returncode}"
            + (f": {detail}" if detail else "")
        )


# ---------------------------------------------------------------------------
# Remote
# ---------------------------------------------------------------------------


class RegistryError(CommitProofError):
    """Base class for failures talking to the attestation registry."""


class RecordNotFound(RegistryError):
    """Raised when the registry holds no record for a revision."""

    def __init__(self, revision_id: str) -> None:
        self.revision_id = revision_id
        super().__init__(f"No attestation record for revision {revision_id!r}")


class RegistryUnavailable(RegistryError):
    """Raised when transient failures persist past the retry ceiling on a read."""


class RegistryRejected(RegistryError):
    """Raised when the registry terminally refuses a read request."""


class SubmissionFailed(RegistryError):
    """Raised when a submission exhausted its retry attempts.

    Callers on the commit path must treat this as advisory: the commit
    already happened and is never rolled back.
    """

    def __init__(self, revision_id: str, attempts: int, reason: str = "") -> None:
        self.revision_id = revision_id
        self.attempts = attempts
        self.reason = reason
        super().__init__(
            f"Submission for {revision_id!r} failed after {attempts} attempt(s)"
            + (f": {reason}" if reason else "")
        )


class SubmissionRejected(RegistryError):
    """Raised when the registry refused a submission as malformed or forbidden."""

    def __init__(
        self, revision_id: str, reason: str = "", status_code: int | None = None
    ) -> None:
        self.revision_id = revision_id
        self.reason = reason
        self.status_code = status_code
        detail = f"HTTP {status_code}" if status_code is not None else "rejected"
        super().__init__(
            f"Submission for {revision_id!r} rejected ({detail})"
            + (f": {reason}" if reason else "")
        )
