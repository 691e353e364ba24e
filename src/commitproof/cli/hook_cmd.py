"""Post-commit hook commands.

``commitproof hook`` is what the installed git hook runs. By default it
resolves the new commit, detaches a background ``hook --foreground`` child
to do the attestation, and returns immediately. It always exits 0: the
commit already exists, and nothing that goes wrong here may fail it.

``install-hook`` and ``uninstall-hook`` manage the hook script itself.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from commitproof.cli.context import (
    build_builder,
    build_client,
    config_option,
    open_repo,
    repo_option,
    resolve_config_path,
    run_async,
)
from commitproof.cli.output import console, print_steps
from commitproof.config import RegistryConfig, load_config
from commitproof.core.attestation.workflow import run_post_commit, spawn_background
from commitproof.core.hooks.installer import install_hook, uninstall_hook
from commitproof.core.snapshot.git import GitRepository
from commitproof.exceptions import CommitProofError, RevisionNotFound

logger = logging.getLogger(__name__)


def _hook_config(repo: GitRepository, config_path: str | None) -> RegistryConfig | None:
    """Load and validate config for the hook; None means skip attestation."""
    path = resolve_config_path(repo, config_path)
    if path is None:
        logger.info("No commitproof config in %s; skipping attestation", repo.root)
        return None
    try:
        config = load_config(path)
    except CommitProofError as exc:
        logger.warning("Skipping attestation: %s", exc)
        return None
    report = config.validate()
    if not report.ok:
        logger.warning("Skipping attestation, invalid config: %s", "; ".join(report.errors))
        return None
    return config


@click.command("hook")
@click.option("--rev", "revision", default="HEAD", help="Revision to attest (default: HEAD).")
@click.option(
    "--foreground", is_flag=True,
    help="Attest inline instead of in a detached background process.",
)
@repo_option
@config_option
def hook_command(revision: str, foreground: bool, repo_path: str, config_path: str | None) -> None:
    """Attest a freshly created commit. Never fails the commit."""
    try:
        repo = GitRepository.discover(Path(repo_path))
    except CommitProofError as exc:
        logger.warning("commitproof hook outside a repository: %s", exc)
        sys.exit(0)

    config = _hook_config(repo, config_path)
    if config is None:
        sys.exit(0)

    if not foreground:
        # Pin the commit id now; HEAD may move before the child runs.
        try:
            revision = repo.resolve(revision)
        except RevisionNotFound as exc:
            logger.warning("Cannot resolve %s: %s", revision, exc)
        pid = spawn_background(repo.root, revision, resolve_config_path(repo, config_path))
        logger.info("Attestation of %s running in background (pid %d)", revision, pid)
        sys.exit(0)

    async def _attest():
        async with build_client(repo, config) as client:
            return await run_post_commit(build_builder(repo, config), client, revision)

    try:
        outcome = run_async(_attest())
    except CommitProofError as exc:
        logger.error("Attestation of %s aborted: %s", revision, exc)
        sys.exit(0)

    if outcome.ok:
        click.echo(f"commitproof: attested {outcome.record.revision_id[:12]}")
    else:
        click.echo(f"commitproof: attestation deferred ({outcome.error or outcome.submission.reason})")
    sys.exit(0)


@click.command("install-hook")
@click.option("--force", is_flag=True, help="Replace an existing foreign hook (a backup is kept).")
@click.option("--endpoint", default=None, help="Write a config file with this registry endpoint.")
@click.option("--api-key", default="", help="Access credential for the new config file.")
@click.option("--project-label", default="", help="Project label for the new config file.")
@repo_option
def install_hook_command(
    force: bool,
    endpoint: str | None,
    api_key: str,
    project_label: str,
    repo_path: str,
) -> None:
    """Install the commitproof post-commit hook."""
    repo = open_repo(repo_path)
    config = None
    if endpoint:
        config = RegistryConfig(
            endpoint=endpoint.rstrip("/"), api_key=api_key, project_label=project_label,
        )
    steps = install_hook(repo, config=config, force=force)
    print_steps(steps)
    if all(step.ok for step in steps):
        console.print("[green]Post-commit hook installed.[/green]")
        sys.exit(0)
    console.print("[red]Hook installation failed.[/red]")
    sys.exit(1)


@click.command("uninstall-hook")
@repo_option
def uninstall_hook_command(repo_path: str) -> None:
    """Remove the commitproof post-commit hook."""
    repo = open_repo(repo_path)
    steps = uninstall_hook(repo)
    print_steps(steps)
    sys.exit(0 if all(step.ok for step in steps) else 1)
