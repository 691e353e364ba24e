"""Shared fixtures for commitproof tests.

Git-backed fixtures run the real ``git`` binary against throwaway
repositories under ``tmp_path`` and are skipped when git is not installed.
Global and system git config are isolated so the host's settings (hooks
paths, signing, autocrlf) cannot leak into fingerprints.
"""

from __future__ import annotations

import os
import shutil
import subprocess
from pathlib import Path

import pytest

from commitproof.core.record.models import AttestationRecord
from commitproof.core.snapshot.git import GitRepository

FP_A = "sha256:" + "a" * 64
FP_B = "sha256:" + "b" * 64


class GitWorkspace:
    """A scratch git repository with helpers for writing and committing files."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def git(self, *args: str) -> str:
        proc = subprocess.run(
            ["git", *args], cwd=self.root, capture_output=True, text=True, check=True
        )
        return proc.stdout.strip()

    def write(self, path: str, content: str | bytes, *, executable: bool = False) -> Path:
        target = self.root / path
        target.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, str):
            target.write_bytes(content.encode("utf-8"))
        else:
            target.write_bytes(content)
        target.chmod(0o755 if executable else 0o644)
        return target

    def commit(self, files: dict[str, str | bytes] | None = None, message: str = "change") -> str:
        """Write ``files``, stage exactly those paths, commit, return the commit id."""
        for path, content in (files or {}).items():
            self.write(path, content)
        if files:
            self.git("add", "--", *files)
        self.git("commit", "-q", "--allow-empty", "-m", message)
        return self.git("rev-parse", "HEAD")

    @property
    def repo(self) -> GitRepository:
        return GitRepository(self.root)


@pytest.fixture
def git_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate git from the host configuration."""
    if shutil.which("git") is None:
        pytest.skip("git is not installed")
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", os.devnull)
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path))
    for var in ("GIT_DIR", "GIT_WORK_TREE", "GIT_INDEX_FILE", "GIT_AUTHOR_NAME",
                "GIT_AUTHOR_EMAIL", "GIT_COMMITTER_NAME", "GIT_COMMITTER_EMAIL"):
        monkeypatch.delenv(var, raising=False)
    return home


@pytest.fixture
def workspace(git_env: Path, tmp_path: Path) -> GitWorkspace:
    """An empty repository on branch ``main`` with a configured identity."""
    root = tmp_path / "repo"
    root.mkdir()
    ws = GitWorkspace(root)
    ws.git("init", "-q")
    ws.git("symbolic-ref", "HEAD", "refs/heads/main")
    ws.git("config", "user.name", "Ada Lovelace")
    ws.git("config", "user.email", "ada@example.org")
    ws.git("config", "commit.gpgsign", "false")
    ws.git("config", "core.autocrlf", "false")
    ws.git("config", "core.filemode", "true")
    return ws


@pytest.fixture
def scenario_repo(workspace: GitWorkspace) -> GitWorkspace:
    """Repository whose HEAD tracks ``README = "hello"`` and ``main = "x=1"``."""
    workspace.commit({"README": "hello", "main": "x=1"}, "initial")
    return workspace


@pytest.fixture
def make_record():
    """Factory for attestation records with sensible defaults."""

    def _make(revision_id: str = "abc123", fingerprint: str = FP_A, **kwargs: str) -> AttestationRecord:
        defaults = {
            "author": "Ada Lovelace",
            "author_contact": "ada@example.org",
            "branch_name": "main",
            "message": "initial",
            "timestamp": "2026-01-01T00:00:00+00:00",
            "submitter_identity": "ada@example.org",
            "project_label": "demo",
        }
        defaults.update(kwargs)
        return AttestationRecord(revision_id=revision_id, fingerprint=fingerprint, **defaults)

    return _make
