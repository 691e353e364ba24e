"""Registry client: exactly-once attestation over an unreliable registry.

The client owns the retry policy. For every operation it makes up to
``config.retry_attempts`` attempts, each bounded by
``config.timeout_seconds``, sleeping ``retry_delay_seconds * 2**(n-1)``
between attempt *n* and *n+1*.

Outcome policy for ``submit``:

    ACCEPTED           success
    ALREADY_EXISTS     success (the revision is attested; who inserted it
                       does not matter)
    REJECTED           terminal, not retried
    TRANSIENT_FAILURE  retried; after the last attempt the submission is
                       reported as FAILED

``submit`` never raises for remote problems: it returns a
``SubmissionResult`` and the caller decides. ``fetch`` raises, because a
verifier has nothing useful to do with a missing record except report it.

The client holds no locks. Two concurrent submits for the
same revision race at the registry, which accepts one and reports the other
as a duplicate.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import TypeVar

from commitproof.audit.log import AuditLog, NullAuditLog
from commitproof.config import RegistryConfig
from commitproof.core.record.models import AttestationRecord
from commitproof.exceptions import (
    RecordNotFound,
    RegistryRejected,
    RegistryUnavailable,
    SubmissionFailed,
    SubmissionRejected,
)
from commitproof.registry.base import Registry
from commitproof.registry.outcomes import (
    FetchOutcome,
    FetchStatus,
    OutcomeKind,
    SubmitOutcome,
)

logger = logging.getLogger(__name__)

_T = TypeVar("_T", SubmitOutcome, FetchOutcome)

Sleep = Callable[[float], Awaitable[None]]


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


class SubmissionStatus(Enum):
    """Terminal status of a whole ``submit`` call."""

    ACCEPTED = "accepted"
    ALREADY_RECORDED = "already_recorded"
    REJECTED = "rejected"
    FAILED = "failed"


@dataclass(frozen=True)
class SubmissionResult:
    """What happened to one submission.

    Attributes:
        revision_id: The revision that was submitted.
        status: Terminal status.
        attempts: Number of registry attempts made.
        receipt: Registry receipt, when the registry issued one.
        reason: Detail of the last failure, if any.
        status_code: HTTP status of the last failure, if any.
    """

    revision_id: str
    status: SubmissionStatus
    attempts: int
    receipt: str = ""
    reason: str = ""
    status_code: int | None = None

    @property
    def ok(self) -> bool:
        """True when the revision is attested in the registry."""
        return self.status in (SubmissionStatus.ACCEPTED, SubmissionStatus.ALREADY_RECORDED)

    def raise_for_status(self) -> None:
        """Raise the matching exception for a non-ok result.

        Raises:
            SubmissionRejected: For REJECTED.
            SubmissionFailed: For FAILED.
        """
        if self.status is SubmissionStatus.REJECTED:
            raise SubmissionRejected(self.revision_id, self.reason, self.status_code)
        if self.status is SubmissionStatus.FAILED:
            raise SubmissionFailed(self.revision_id, self.attempts, self.reason)


@dataclass
class SubmissionJob:
    """In-flight state of one ``submit`` call. Discarded when it returns."""

    revision_id: str
    attempt: int = 0


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class RegistryClient:
    """Submits and fetches attestation records with retry and backoff.

    Example::

        async with RegistryClient(HttpRegistry(config), config, audit_log=log) as client:
            result = await client.submit(record)
            if not result.ok:
                logger.warning("attestation deferred: %s", result.reason)
    """

    def __init__(
        self,
        registry: Registry,
        config: RegistryConfig,
        *,
        audit_log: AuditLog | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.registry = registry
        self.config = config
        self.audit_log = audit_log if audit_log is not None else NullAuditLog()
        self._sleep = sleep

    async def __aenter__(self) -> RegistryClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.registry.aclose()

    @property
    def max_attempts(self) -> int:
        return max(self.config.retry_attempts, 1)

    def backoff_delay(self, attempt: int) -> float:
        """Delay to sleep after failed attempt number ``attempt`` (1-based)."""
        return self.config.retry_delay_seconds * 2 ** (attempt - 1)

    async def _bounded(
        self, call: Awaitable[_T], on_timeout: Callable[[str], _T]
    ) -> _T:
        """Run one registry call under the per-attempt timeout."""
        try:
            return await asyncio.wait_for(call, timeout=self.config.timeout_seconds)
        except asyncio.TimeoutError:
            return on_timeout(f"timeout after {self.config.timeout_seconds:g}s")
        except OSError as exc:
            return on_timeout(f"connection error: {exc}")

    # -- Submit -------------------------------------------------------------

    async def submit(self, record: AttestationRecord) -> SubmissionResult:
        """Submit ``record`` until it is attested, rejected, or attempts run out.

        Never raises for registry failures. Re-raises
        ``asyncio.CancelledError`` after auditing the cancellation.
        """
        job = SubmissionJob(revision_id=record.revision_id)
        last: SubmitOutcome | None = None
        try:
            while job.attempt < self.max_attempts:
                job.attempt += 1
                outcome = await self._bounded(self.registry.put(record), SubmitOutcome.transient)
                self.audit_log.append(
                    "submit", job.revision_id,
                    attempt=job.attempt, outcome=outcome.kind.value, detail=outcome.reason,
                )

                if outcome.kind is OutcomeKind.ACCEPTED:
                    return self._finish(job, SubmissionStatus.ACCEPTED, receipt=outcome.receipt)
                if outcome.kind is OutcomeKind.ALREADY_EXISTS:
                    return self._finish(job, SubmissionStatus.ALREADY_RECORDED)
                if outcome.kind is OutcomeKind.REJECTED:
                    logger.warning(
                        "Registry rejected %s: %s", job.revision_id, outcome.reason
                    )
                    return self._finish(
                        job, SubmissionStatus.REJECTED,
                        reason=outcome.reason, status_code=outcome.status_code,
                    )

                last = outcome
                if job.attempt < self.max_attempts:
                    delay = self.backoff_delay(job.attempt)
                    logger.info(
                        "Attempt %d for %s failed (%s); retrying in %.1fs",
                        job.attempt, job.revision_id, outcome.reason, delay,
                    )
                    await self._sleep(delay)
        except asyncio.CancelledError:
            self.audit_log.append(
                "submit", job.revision_id, attempt=job.attempt, outcome="cancelled",
            )
            raise

        reason = last.reason if last is not None else ""
        logger.warning(
            "Giving up on %s after %d attempt(s): %s", job.revision_id, job.attempt, reason
        )
        return self._finish(
            job, SubmissionStatus.FAILED,
            reason=reason, status_code=last.status_code if last is not None else None,
        )

    def _finish(
        self,
        job: SubmissionJob,
        status: SubmissionStatus,
        *,
        receipt: str = "",
        reason: str = "",
        status_code: int | None = None,
    ) -> SubmissionResult:
        self.audit_log.append(
            "submit-result", job.revision_id,
            attempt=job.attempt, outcome=status.value, detail=reason or receipt,
        )
        return SubmissionResult(
            revision_id=job.revision_id,
            status=status,
            attempts=job.attempt,
            receipt=receipt,
            reason=reason,
            status_code=status_code,
        )

    # -- Fetch --------------------------------------------------------------

    async def fetch(self, revision_id: str) -> AttestationRecord:
        """Fetch the stored record for ``revision_id``.

        Raises:
            RecordNotFound: If the registry has no record for the revision.
            RegistryRejected: If the registry terminally refused the read.
            RegistryUnavailable: If transient failures outlasted the retries.
        """
        last: FetchOutcome | None = None
        for attempt in range(1, self.max_attempts + 1):
            outcome = await self._bounded(self.registry.get(revision_id), FetchOutcome.transient)
            self.audit_log.append(
                "fetch", revision_id,
                attempt=attempt, outcome=outcome.status.value, detail=outcome.reason,
            )
            if outcome.status is FetchStatus.FOUND and outcome.record is not None:
                return outcome.record
            if outcome.status is FetchStatus.NOT_FOUND:
                raise RecordNotFound(revision_id)
            if outcome.status is FetchStatus.REJECTED:
                raise RegistryRejected(
                    f"Registry refused fetch of {revision_id!r}: {outcome.reason}"
                )
            last = outcome
            if attempt < self.max_attempts:
                await self._sleep(self.backoff_delay(attempt))

        reason = last.reason if last is not None else ""
        raise RegistryUnavailable(
            f"Fetch of {revision_id!r} failed after {self.max_attempts} attempt(s): {reason}"
        )
