"""Shared fixtures for CLI tests.

Commands build their registry through ``commitproof.cli.context.build_registry``;
these fixtures patch it to return an in-memory registry so no test touches
the network. The registry instance survives across invocations within a
test, like a real remote one would.
"""

from __future__ import annotations

import pytest
from click.testing import CliRunner

from commitproof.config import CONFIG_FILENAME
from commitproof.core.record.models import AttestationRecord
from commitproof.registry.memory import InMemoryRegistry
from commitproof.registry.outcomes import FetchOutcome, SubmitOutcome

CONFIG_TEXT = (
    "endpoint: https://registry.test/api\n"
    "api_key: test-key\n"
    "timeout_seconds: 2\n"
    "retry_attempts: 2\n"
    "retry_delay_seconds: 0\n"
    "project_label: demo\n"
    "submitter: ci-runner-01\n"
)


class DownRegistry(InMemoryRegistry):
    """Registry that never answers successfully."""

    async def put(self, record: AttestationRecord) -> SubmitOutcome:
        return SubmitOutcome.transient("HTTP 503", status_code=503)

    async def get(self, revision_id: str) -> FetchOutcome:
        return FetchOutcome.transient("HTTP 503", status_code=503)


@pytest.fixture
def runner() -> CliRunner:
    """Create a Click CliRunner for invoking commands."""
    return CliRunner()


@pytest.fixture
def memory_registry(monkeypatch: pytest.MonkeyPatch) -> InMemoryRegistry:
    """Route every command's registry to one shared in-memory registry."""
    registry = InMemoryRegistry()
    monkeypatch.setattr("commitproof.cli.context.build_registry", lambda config: registry)
    return registry


@pytest.fixture
def down_registry(monkeypatch: pytest.MonkeyPatch) -> DownRegistry:
    """Route every command's registry to one that always fails transiently."""
    registry = DownRegistry()
    monkeypatch.setattr("commitproof.cli.context.build_registry", lambda config: registry)
    return registry


@pytest.fixture
def configured_repo(scenario_repo):
    """The README/main scenario repository with a ``.commitproof.yaml``.

    The config file stays untracked, so it never enters a fingerprint.
    """
    (scenario_repo.root / CONFIG_FILENAME).write_text(CONFIG_TEXT)
    return scenario_repo
