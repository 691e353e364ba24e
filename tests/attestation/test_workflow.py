"""Tests for the commit-time attestation workflow.

The key property: with the registry completely unreachable, hashing and
record building still complete, the audit log records a terminal failure,
and nothing raises into the caller (the git hook).
"""

from __future__ import annotations

import asyncio
import subprocess
import sys
from pathlib import Path

import httpx
import pytest

from commitproof.audit.log import AuditLog
from commitproof.config import RegistryConfig
from commitproof.core.attestation import workflow
from commitproof.core.attestation.workflow import (
    attest_revision,
    run_post_commit,
    spawn_background,
)
from commitproof.core.record.builder import RecordBuilder
from commitproof.core.snapshot.hasher import SnapshotHasher
from commitproof.exceptions import RevisionNotFound
from commitproof.registry.client import RegistryClient, SubmissionStatus
from commitproof.registry.http_registry import HttpRegistry
from commitproof.registry.memory import InMemoryRegistry

CONFIG = RegistryConfig(
    endpoint="https://registry.test",
    timeout_seconds=1.0,
    retry_attempts=3,
    retry_delay_seconds=0,
)


def _builder(ws) -> RecordBuilder:
    repo = ws.repo
    return RecordBuilder(repo, SnapshotHasher(repo), project_label="demo")


def _offline_registry() -> HttpRegistry:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("network is unreachable", request=request)

    return HttpRegistry(CONFIG, transport=httpx.MockTransport(refuse))


class TestRunPostCommit:
    def test_success(self, scenario_repo, tmp_path: Path) -> None:
        registry = InMemoryRegistry()
        client = RegistryClient(registry, CONFIG, audit_log=AuditLog(tmp_path / "audit.log"))
        outcome = asyncio.run(run_post_commit(_builder(scenario_repo), client))

        assert outcome.ok
        assert outcome.record is not None
        assert outcome.submission.status is SubmissionStatus.ACCEPTED
        assert asyncio.run(registry.count()) == 1

    def test_total_network_outage_is_not_fatal(self, scenario_repo, tmp_path: Path) -> None:
        audit_log = AuditLog(tmp_path / "audit.log")

        async def scenario():
            async with RegistryClient(_offline_registry(), CONFIG, audit_log=audit_log) as client:
                return await run_post_commit(_builder(scenario_repo), client)

        outcome = asyncio.run(scenario())

        assert not outcome.ok
        assert outcome.record is not None
        assert outcome.record.fingerprint.startswith("sha256:")
        assert outcome.submission.status is SubmissionStatus.FAILED
        assert outcome.submission.attempts == 3

        entries = audit_log.entries(outcome.record.revision_id)
        assert [e.operation for e in entries] == ["submit"] * 3 + ["submit-result"]
        assert entries[-1].outcome == "failed"
        assert "connection error" in entries[-1].detail

    def test_local_error_is_reported_not_raised(self, scenario_repo, tmp_path: Path) -> None:
        audit_log = AuditLog(tmp_path / "audit.log")
        client = RegistryClient(InMemoryRegistry(), CONFIG, audit_log=audit_log)
        outcome = asyncio.run(run_post_commit(_builder(scenario_repo), client, "no-such-rev"))

        assert not outcome.ok
        assert outcome.record is None
        assert outcome.submission is None
        assert "no-such-rev" in outcome.error
        (entry,) = audit_log.entries()
        assert entry.operation == "build"
        assert entry.outcome == "local_error"


class TestAttestRevision:
    def test_returns_submission(self, scenario_repo) -> None:
        client = RegistryClient(InMemoryRegistry(), CONFIG)
        result = asyncio.run(attest_revision(_builder(scenario_repo), client, "HEAD"))
        assert result.status is SubmissionStatus.ACCEPTED
        assert result.revision_id == scenario_repo.git("rev-parse", "HEAD")

    def test_local_errors_raise(self, scenario_repo) -> None:
        client = RegistryClient(InMemoryRegistry(), CONFIG)
        with pytest.raises(RevisionNotFound):
            asyncio.run(attest_revision(_builder(scenario_repo), client, "no-such-rev"))


class TestSpawnBackground:
    def test_detached_child_command(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        calls: list[tuple[list[str], dict]] = []

        class _FakeProcess:
            pid = 4242

        def fake_popen(command, **kwargs):
            calls.append((command, kwargs))
            return _FakeProcess()

        monkeypatch.setattr(workflow.subprocess, "Popen", fake_popen)
        pid = spawn_background(tmp_path, "abc123", tmp_path / "cfg.yaml")

        assert pid == 4242
        ((command, kwargs),) = calls
        assert command[:4] == [sys.executable, "-m", "commitproof", "hook"]
        assert "--foreground" in command
        assert command[command.index("--rev") + 1] == "abc123"
        assert command[command.index("--repo") + 1] == str(tmp_path)
        assert command[command.index("--config") + 1] == str(tmp_path / "cfg.yaml")
        assert kwargs["start_new_session"] is True
        assert kwargs["stdin"] is subprocess.DEVNULL
        assert kwargs["stdout"] is subprocess.DEVNULL

    def test_without_config(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        calls: list[list[str]] = []

        class _FakeProcess:
            pid = 1

        monkeypatch.setattr(
            workflow.subprocess, "Popen",
            lambda command, **kwargs: calls.append(command) or _FakeProcess(),
        )
        spawn_background(tmp_path, "HEAD")
        assert "--config" not in calls[0]
