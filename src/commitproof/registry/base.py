"""Abstract registry interface and insert events.

A registry is an append-only key-value store keyed by ``revision_id``:

- ``put`` inserts a record at most once per key; a second insert for the
  same key reports ``ALREADY_EXISTS`` and leaves the stored record alone.
- ``get`` returns the stored record or ``NOT_FOUND``.
- ``count``, ``exists`` and ``revision_ids`` expose the key space.

All operations are atomic with respect to a given key. Concrete
implementations live in ``memory`` (in-process) and ``http_registry``
(remote service).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from commitproof.core.record.models import AttestationRecord
from commitproof.exceptions import RegistryUnavailable
from commitproof.registry.outcomes import FetchOutcome, FetchStatus, SubmitOutcome


@dataclass(frozen=True)
class RecordInserted:
    """Event emitted once per successful insert.

    Attributes:
        revision_id: Key of the new record.
        fingerprint: Its fingerprint.
        sequence: 1-based position in insertion order.
    """

    revision_id: str
    fingerprint: str
    sequence: int


class Registry(ABC):
    """Append-only attestation store."""

    @property
    @abstractmethod
    def registry_name(self) -> str:
        """Human-readable name, used in logs and CLI output."""

    @abstractmethod
    async def put(self, record: AttestationRecord) -> SubmitOutcome:
        """Insert ``record`` under ``record.revision_id`` if the key is free."""

    @abstractmethod
    async def get(self, revision_id: str) -> FetchOutcome:
        """Look up the record stored for ``revision_id``."""

    @abstractmethod
    async def count(self) -> int:
        """Number of stored records."""

    async def exists(self, revision_id: str) -> bool:
        """Whether a record is stored for ``revision_id``.

        Raises:
            RegistryUnavailable: If the lookup failed transiently.
        """
        outcome = await self.get(revision_id)
        if outcome.status is FetchStatus.FOUND:
            return True
        if outcome.status is FetchStatus.NOT_FOUND:
            return False
        raise RegistryUnavailable(outcome.reason or f"lookup of {revision_id!r} failed")

    @abstractmethod
    async def revision_ids(self) -> list[str]:
        """All stored keys in insertion order."""

    async def aclose(self) -> None:
        """Release any held resources. No-op by default."""
