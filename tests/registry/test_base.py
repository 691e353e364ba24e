"""Tests for the Registry ABC and typed outcomes.

Validates the abstract contract, the default ``exists`` built on ``get``,
and the outcome helpers, using a minimal concrete registry.
"""

from __future__ import annotations

import asyncio
from dataclasses import FrozenInstanceError

import pytest

from commitproof.core.record.models import AttestationRecord
from commitproof.exceptions import RegistryUnavailable
from commitproof.registry.base import RecordInserted, Registry
from commitproof.registry.outcomes import (
    FetchOutcome,
    FetchStatus,
    OutcomeKind,
    SubmitOutcome,
)


# ---------------------------------------------------------------------------
# Concrete test registry (for testing the ABC's default methods)
# ---------------------------------------------------------------------------


class _MockRegistry(Registry):
    """Registry whose ``get`` returns a fixed outcome."""

    def __init__(self, fetch: FetchOutcome) -> None:
        self._fetch = fetch

    @property
    def registry_name(self) -> str:
        return "MockRegistry"

    async def put(self, record: AttestationRecord) -> SubmitOutcome:
        return SubmitOutcome.accepted()

    async def get(self, revision_id: str) -> FetchOutcome:
        return self._fetch

    async def count(self) -> int:
        return 0

    async def revision_ids(self) -> list[str]:
        return []


class TestRegistryABC:
    def test_cannot_instantiate_abstract(self) -> None:
        with pytest.raises(TypeError):
            Registry()  # type: ignore[abstract]

    def test_exists_true_when_found(self, make_record) -> None:
        registry = _MockRegistry(FetchOutcome.found(make_record()))
        assert asyncio.run(registry.exists("abc123")) is True

    def test_exists_false_when_not_found(self) -> None:
        registry = _MockRegistry(FetchOutcome.not_found())
        assert asyncio.run(registry.exists("abc123")) is False

    def test_exists_raises_on_transient(self) -> None:
        registry = _MockRegistry(FetchOutcome.transient("HTTP 503", status_code=503))
        with pytest.raises(RegistryUnavailable, match="503"):
            asyncio.run(registry.exists("abc123"))

    def test_aclose_is_noop(self) -> None:
        asyncio.run(_MockRegistry(FetchOutcome.not_found()).aclose())


class TestOutcomes:
    def test_success_variants(self) -> None:
        assert SubmitOutcome.accepted("r-1").is_success
        assert SubmitOutcome.already_exists().is_success
        assert not SubmitOutcome.rejected("bad").is_success
        assert not SubmitOutcome.transient("down").is_success

    def test_only_transient_is_retryable(self) -> None:
        assert SubmitOutcome.transient("down").is_retryable
        assert not SubmitOutcome.rejected("bad", 400).is_retryable
        assert FetchOutcome.transient("down").is_retryable
        assert not FetchOutcome.not_found().is_retryable

    def test_constructors_set_kind(self) -> None:
        assert SubmitOutcome.accepted("r-1").receipt == "r-1"
        assert SubmitOutcome.rejected("bad", 422).kind is OutcomeKind.REJECTED
        assert SubmitOutcome.rejected("bad", 422).status_code == 422
        assert FetchOutcome.not_found().status is FetchStatus.NOT_FOUND
        assert FetchOutcome.not_found().record is None

    def test_record_inserted_is_frozen(self) -> None:
        event = RecordInserted(revision_id="abc123", fingerprint="sha256:" + "a" * 64, sequence=1)
        with pytest.raises(FrozenInstanceError):
            event.sequence = 2  # type: ignore[misc]
