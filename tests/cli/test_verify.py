"""Tests for ``commitproof submit``, ``verify`` and ``audit``.

Verifies:
    - Submitting a revision (exit 0), resubmitting it (still exit 0).
    - Verifying a matching revision (exit 0), a tampered worktree (exit 1),
      an unrecorded revision (exit 2), and local errors (exit 3).
    - Bulk audits over a revision range, including revisions that cannot
      be checked.
    - JSON output format.
"""

from __future__ import annotations

import asyncio
import json

from click.testing import CliRunner

from commitproof.cli.main import cli
from commitproof.registry.memory import InMemoryRegistry
from commitproof.registry.outcomes import FetchOutcome


class _RefusingRegistry(InMemoryRegistry):
    """Refuses reads for the given revision ids."""

    def __init__(self, refused: set[str]) -> None:
        super().__init__()
        self.refused = refused

    async def get(self, revision_id: str) -> FetchOutcome:
        if revision_id in self.refused:
            return FetchOutcome.rejected("malformed record", status_code=422)
        return await super().get(revision_id)


def _args(ws, *args: str) -> list[str]:
    return [*args, "--repo", str(ws.root)]


class TestSubmitCommand:
    def test_submit_head(self, runner: CliRunner, configured_repo, memory_registry) -> None:
        result = runner.invoke(cli, _args(configured_repo, "submit"))
        assert result.exit_code == 0
        assert "ACCEPTED" in result.output
        assert asyncio.run(memory_registry.count()) == 1

        (revision_id,) = asyncio.run(memory_registry.revision_ids())
        assert revision_id == configured_repo.git("rev-parse", "HEAD")
        record = asyncio.run(memory_registry.get(revision_id)).record
        assert record.project_label == "demo"
        assert record.submitter_identity == "ci-runner-01"

    def test_resubmit_is_success(self, runner: CliRunner, configured_repo, memory_registry) -> None:
        runner.invoke(cli, _args(configured_repo, "submit"))
        result = runner.invoke(cli, _args(configured_repo, "submit", "--format", "json"))
        assert result.exit_code == 0
        assert json.loads(result.stdout)["status"] == "already_recorded"
        assert asyncio.run(memory_registry.count()) == 1

    def test_registry_down_exits_1(self, runner: CliRunner, configured_repo, down_registry) -> None:
        result = runner.invoke(cli, _args(configured_repo, "submit", "--format", "json"))
        assert result.exit_code == 1
        data = json.loads(result.stdout)
        assert data["status"] == "failed"
        assert data["attempts"] == 2

    def test_submit_audits_attempts(self, runner: CliRunner, configured_repo, down_registry) -> None:
        runner.invoke(cli, _args(configured_repo, "submit"))
        log_file = configured_repo.root / ".commitproof" / "audit.log"
        operations = [json.loads(line)["operation"] for line in log_file.read_text().splitlines()]
        assert operations == ["submit", "submit", "submit-result"]

    def test_bad_revision_exits_3(self, runner: CliRunner, configured_repo, memory_registry) -> None:
        result = runner.invoke(cli, _args(configured_repo, "submit", "nope"))
        assert result.exit_code == 3
        assert asyncio.run(memory_registry.count()) == 0


class TestVerifyCommand:
    def test_match_exits_0(self, runner: CliRunner, configured_repo, memory_registry) -> None:
        runner.invoke(cli, _args(configured_repo, "submit"))
        result = runner.invoke(cli, _args(configured_repo, "verify"))
        assert result.exit_code == 0
        assert "MATCH" in result.output

    def test_tampered_worktree_exits_1(self, runner: CliRunner, configured_repo, memory_registry) -> None:
        runner.invoke(cli, _args(configured_repo, "submit"))
        configured_repo.write("main", "x=2")
        result = runner.invoke(cli, _args(configured_repo, "verify", "--worktree"))
        assert result.exit_code == 1
        assert "TAMPERING DETECTED" in result.output

    def test_supplied_fingerprint(self, runner: CliRunner, configured_repo, memory_registry) -> None:
        runner.invoke(cli, _args(configured_repo, "submit"))
        other = "sha256:" + "0" * 64
        result = runner.invoke(cli, _args(configured_repo, "verify", "--fingerprint", other,
                                          "--format", "json"))
        assert result.exit_code == 1
        data = json.loads(result.stdout)
        assert data["status"] == "mismatch"
        assert data["local_fingerprint"] == other

    def test_no_record_exits_2(self, runner: CliRunner, configured_repo, memory_registry) -> None:
        result = runner.invoke(cli, _args(configured_repo, "verify", "--format", "json"))
        assert result.exit_code == 2
        data = json.loads(result.stdout)
        assert data["status"] == "no_record"
        assert data["recorded_fingerprint"] is None

    def test_json_match(self, runner: CliRunner, configured_repo, memory_registry) -> None:
        runner.invoke(cli, _args(configured_repo, "submit"))
        result = runner.invoke(cli, _args(configured_repo, "verify", "HEAD", "--format", "json"))
        data = json.loads(result.stdout)
        assert data["status"] == "match"
        assert data["local_fingerprint"] == data["recorded_fingerprint"]
        assert data["record"]["revisionId"] == configured_repo.git("rev-parse", "HEAD")

    def test_unknown_revision_exits_3(self, runner: CliRunner, configured_repo, memory_registry) -> None:
        result = runner.invoke(cli, _args(configured_repo, "verify", "nope"))
        assert result.exit_code == 3

    def test_registry_down_exits_3(self, runner: CliRunner, configured_repo, down_registry) -> None:
        result = runner.invoke(cli, _args(configured_repo, "verify"))
        assert result.exit_code == 3
        assert "failed after 2 attempt" in result.output

    def test_worktree_and_fingerprint_conflict(self, runner: CliRunner, configured_repo, memory_registry) -> None:
        result = runner.invoke(cli, _args(configured_repo, "verify", "--worktree",
                                          "--fingerprint", "sha256:" + "0" * 64))
        assert result.exit_code == 3
        assert "mutually exclusive" in result.output


class TestAuditCommand:
    def test_all_recorded_exits_0(self, runner: CliRunner, configured_repo, memory_registry) -> None:
        runner.invoke(cli, _args(configured_repo, "submit"))
        configured_repo.commit({"main": "x=2"}, "bump")
        runner.invoke(cli, _args(configured_repo, "submit"))

        result = runner.invoke(cli, _args(configured_repo, "audit", "--format", "json"))
        assert result.exit_code == 0
        statuses = [item["status"] for item in json.loads(result.stdout)]
        assert statuses == ["match", "match"]

    def test_unrecorded_revisions_do_not_fail(self, runner: CliRunner, configured_repo, memory_registry) -> None:
        configured_repo.commit({"main": "x=2"}, "bump")
        runner.invoke(cli, _args(configured_repo, "submit"))
        result = runner.invoke(cli, _args(configured_repo, "audit"))
        assert result.exit_code == 0
        assert "1 match" in result.output
        assert "1 unrecorded" in result.output

    def test_mismatch_exits_1(self, runner: CliRunner, configured_repo, memory_registry, make_record) -> None:
        head = configured_repo.git("rev-parse", "HEAD")
        asyncio.run(memory_registry.put(make_record(revision_id=head)))
        result = runner.invoke(cli, _args(configured_repo, "audit", "--format", "json"))
        assert result.exit_code == 1
        assert json.loads(result.stdout)[0]["status"] == "mismatch"

    def test_max_count(self, runner: CliRunner, configured_repo, memory_registry) -> None:
        for n in range(3):
            configured_repo.commit({"main": f"x={n + 10}"}, f"commit {n}")
        result = runner.invoke(cli, _args(configured_repo, "audit", "-n", "2", "--format", "json"))
        assert len(json.loads(result.stdout)) == 2

    def test_bad_range_exits_3(self, runner: CliRunner, configured_repo, memory_registry) -> None:
        result = runner.invoke(cli, _args(configured_repo, "audit", "nope..HEAD"))
        assert result.exit_code == 3

    def test_unreadable_revision_does_not_hide_mismatch(
        self, runner: CliRunner, configured_repo, monkeypatch, make_record
    ) -> None:
        older = configured_repo.git("rev-parse", "HEAD")
        head = configured_repo.commit({"main": "x=2"}, "bump")
        registry = _RefusingRegistry({older})
        asyncio.run(registry.put(make_record(revision_id=head)))
        monkeypatch.setattr("commitproof.cli.context.build_registry", lambda config: registry)

        result = runner.invoke(cli, _args(configured_repo, "audit", "--format", "json"))
        assert result.exit_code == 1
        by_id = {item["revision_id"]: item for item in json.loads(result.stdout)}
        assert by_id[head]["status"] == "mismatch"
        assert by_id[older]["status"] == "error"
        assert "malformed record" in by_id[older]["error"]

    def test_unreadable_revision_without_mismatch_exits_3(
        self, runner: CliRunner, configured_repo, monkeypatch
    ) -> None:
        registry = _RefusingRegistry({configured_repo.git("rev-parse", "HEAD")})
        monkeypatch.setattr("commitproof.cli.context.build_registry", lambda config: registry)

        result = runner.invoke(cli, _args(configured_repo, "audit"))
        assert result.exit_code == 3
        assert "1 error" in result.output
