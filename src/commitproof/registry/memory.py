"""In-process registry.

Implements the full registry contract in memory: per-key atomic inserts,
duplicate rejection without mutation, insertion-ordered enumeration, and
insert events. Used for local dry runs and as the reference registry in
tests.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from commitproof.core.record.models import AttestationRecord
from commitproof.registry.base import RecordInserted, Registry
from commitproof.registry.outcomes import FetchOutcome, SubmitOutcome

logger = logging.getLogger(__name__)

InsertListener = Callable[[RecordInserted], None]


class InMemoryRegistry(Registry):
    """Thread-safe, append-only registry held in a dict.

    Example::

        registry = InMemoryRegistry()
        registry.subscribe(lambda event: print(event.revision_id))
        outcome = await registry.put(record)
    """

    def __init__(self) -> None:
        self._records: dict[str, AttestationRecord] = {}
        self._order: list[str] = []
        self._listeners: list[InsertListener] = []
        self._lock = threading.Lock()

    @property
    def registry_name(self) -> str:
        return "In-memory registry"

    def subscribe(self, listener: InsertListener) -> None:
        """Register a callback invoked after every successful insert."""
        self._listeners.append(listener)

    async def put(self, record: AttestationRecord) -> SubmitOutcome:
        with self._lock:
            if record.revision_id in self._records:
                return SubmitOutcome.already_exists()
            self._records[record.revision_id] = record
            self._order.append(record.revision_id)
            sequence = len(self._order)

        event = RecordInserted(
            revision_id=record.revision_id,
            fingerprint=record.fingerprint,
            sequence=sequence,
        )
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.warning(
                    "Insert listener failed for %s", record.revision_id, exc_info=True
                )
        return SubmitOutcome.accepted(receipt=f"mem-{sequence}")

    async def get(self, revision_id: str) -> FetchOutcome:
        with self._lock:
            record = self._records.get(revision_id)
        if record is None:
            return FetchOutcome.not_found()
        return FetchOutcome.found(record)

    async def count(self) -> int:
        with self._lock:
            return len(self._records)

    async def exists(self, revision_id: str) -> bool:
        with self._lock:
            return revision_id in self._records

    async def revision_ids(self) -> list[str]:
        with self._lock:
            return list(self._order)
