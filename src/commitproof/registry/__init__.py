"""Attestation registry: interface, implementations, and the retrying client.

Public API::

    from commitproof.registry import Registry, RegistryClient, SubmissionResult
    from commitproof.registry.memory import InMemoryRegistry
    from commitproof.registry.http_registry import HttpRegistry
"""

from __future__ import annotations

from commitproof.registry.base import RecordInserted, Registry
from commitproof.registry.client import (
    RegistryClient,
    SubmissionJob,
    SubmissionResult,
    SubmissionStatus,
)
from commitproof.registry.outcomes import (
    FetchOutcome,
    FetchStatus,
    OutcomeKind,
    SubmitOutcome,
)

__all__ = [
    "FetchOutcome",
    "FetchStatus",
    "OutcomeKind",
    "RecordInserted",
    "Registry",
    "RegistryClient",
    "SubmissionJob",
    "SubmissionResult",
    "SubmissionStatus",
    "SubmitOutcome",
]
