"""Typed registry outcomes.

Every registry call resolves to one of a closed set of variants, so callers
branch on ``kind``/``status`` instead of inspecting error text. In
particular a duplicate key is its own variant and is never inferred from a
message string.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from commitproof.core.record.models import AttestationRecord


class OutcomeKind(Enum):
    """Result of a single ``Registry.put`` attempt."""

    ACCEPTED = "accepted"
    ALREADY_EXISTS = "already_exists"
    REJECTED = "rejected"
    TRANSIENT_FAILURE = "transient_failure"


@dataclass(frozen=True)
class SubmitOutcome:
    """Outcome of one ``put``.

    Attributes:
        kind: Which variant this is.
        receipt: Registry-assigned receipt id (ACCEPTED only, may be empty).
        reason: Human-readable detail for REJECTED / TRANSIENT_FAILURE.
        status_code: HTTP status when the registry is remote.
    """

    kind: OutcomeKind
    receipt: str = ""
    reason: str = ""
    status_code: int | None = None

    @property
    def is_success(self) -> bool:
        """ACCEPTED and ALREADY_EXISTS both mean "this revision is attested"."""
        return self.kind in (OutcomeKind.ACCEPTED, OutcomeKind.ALREADY_EXISTS)

    @property
    def is_retryable(self) -> bool:
        return self.kind is OutcomeKind.TRANSIENT_FAILURE

    @classmethod
    def accepted(cls, receipt: str = "") -> SubmitOutcome:
        return cls(OutcomeKind.ACCEPTED, receipt=receipt)

    @classmethod
    def already_exists(cls) -> SubmitOutcome:
        return cls(OutcomeKind.ALREADY_EXISTS)

    @classmethod
    def rejected(cls, reason: str, status_code: int | None = None) -> SubmitOutcome:
        return cls(OutcomeKind.REJECTED, reason=reason, status_code=status_code)

    @classmethod
    def transient(cls, reason: str, status_code: int | None = None) -> SubmitOutcome:
        return cls(OutcomeKind.TRANSIENT_FAILURE, reason=reason, status_code=status_code)


class FetchStatus(Enum):
    """Result of a single ``Registry.get`` attempt."""

    FOUND = "found"
    NOT_FOUND = "not_found"
    REJECTED = "rejected"
    TRANSIENT_FAILURE = "transient_failure"


@dataclass(frozen=True)
class FetchOutcome:
    """Outcome of one ``get``. ``record`` is set only when FOUND."""

    status: FetchStatus
    record: AttestationRecord | None = None
    reason: str = ""
    status_code: int | None = None

    @property
    def is_retryable(self) -> bool:
        return self.status is FetchStatus.TRANSIENT_FAILURE

    @classmethod
    def found(cls, record: AttestationRecord) -> FetchOutcome:
        return cls(FetchStatus.FOUND, record=record)

    @classmethod
    def not_found(cls) -> FetchOutcome:
        return cls(FetchStatus.NOT_FOUND)

    @classmethod
    def rejected(cls, reason: str, status_code: int | None = None) -> FetchOutcome:
        return cls(FetchStatus.REJECTED, reason=reason, status_code=status_code)

    @classmethod
    def transient(cls, reason: str, status_code: int | None = None) -> FetchOutcome:
        return cls(FetchStatus.TRANSIENT_FAILURE, reason=reason, status_code=status_code)
