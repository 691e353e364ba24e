"""Shared wiring for CLI commands: repository, config, registry, client.

Commands call these factories instead of constructing collaborators
themselves, so tests can patch ``build_registry`` to swap the HTTP registry
for an in-memory one.
"""

from __future__ import annotations

import asyncio
import sys
from collections.abc import Coroutine
from pathlib import Path
from typing import Any, NoReturn, TypeVar

import click

from commitproof.audit.log import AuditLog
from commitproof.config import RegistryConfig, find_config, load_config
from commitproof.core.record.builder import RecordBuilder
from commitproof.core.snapshot.git import GitRepository
from commitproof.core.snapshot.hasher import SnapshotHasher
from commitproof.exceptions import CommitProofError, GitCommandError
from commitproof.registry.base import Registry
from commitproof.registry.client import RegistryClient
from commitproof.registry.http_registry import HttpRegistry

_T = TypeVar("_T")

# Exit code for local failures (bad revision, not a repository, bad config).
EXIT_LOCAL_ERROR: int = 3

repo_option = click.option(
    "--repo", "repo_path",
    type=click.Path(exists=True, file_okay=False),
    default=".",
    help="Path inside the git repository (default: current directory).",
)

config_option = click.option(
    "--config", "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Config file (default: <repo>/.commitproof.yaml).",
)

format_option = click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format (default: text).",
)


def run_async(coro: Coroutine[Any, Any, _T]) -> _T:
    """Run an async coroutine in a synchronous context."""
    return asyncio.run(coro)


def fail(message: str, code: int = EXIT_LOCAL_ERROR) -> NoReturn:
    """Print an error to stderr and exit."""
    click.echo(f"Error: {message}", err=True)
    sys.exit(code)


def open_repo(repo_path: str) -> GitRepository:
    try:
        return GitRepository.discover(Path(repo_path))
    except GitCommandError as exc:
        fail(f"Not a git repository: {repo_path} ({exc.stderr.strip() or exc})")


def resolve_config_path(repo: GitRepository, config_path: str | None) -> Path | None:
    if config_path is not None:
        return Path(config_path)
    return find_config(repo.root)


def load_repo_config(
    repo: GitRepository, config_path: str | None, *, required: bool = True
) -> RegistryConfig:
    """Load the repository's config, validating it when ``required``."""
    path = resolve_config_path(repo, config_path)
    if path is None:
        if required:
            fail(f"No config found; create {repo.root / '.commitproof.yaml'} or pass --config")
        return RegistryConfig()
    try:
        config = load_config(path)
    except CommitProofError as exc:
        fail(str(exc))
    if required:
        report = config.validate()
        if not report.ok:
            fail("Invalid config: " + "; ".join(report.errors))
    return config


def build_registry(config: RegistryConfig) -> Registry:
    """Create the registry backend named by ``config``."""
    return HttpRegistry(config)


def build_client(repo: GitRepository, config: RegistryConfig) -> RegistryClient:
    audit_log = AuditLog(config.audit_log_path(repo.root))
    return RegistryClient(build_registry(config), config, audit_log=audit_log)


def build_builder(repo: GitRepository, config: RegistryConfig) -> RecordBuilder:
    return RecordBuilder(
        repo,
        SnapshotHasher(repo),
        submitter_identity=config.submitter or repo.user_identity(),
        project_label=config.project_label,
    )
