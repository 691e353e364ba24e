"""``commitproof hash`` and ``commitproof compare``: local fingerprints only.

Neither command talks to the registry.

Exit Codes:
    0 - Fingerprint(s) computed.
    3 - Revision not found or not a git repository.
"""

from __future__ import annotations

import json

import click

from commitproof.cli.context import fail, format_option, open_repo, repo_option
from commitproof.cli.output import print_comparison
from commitproof.core.snapshot.hasher import SnapshotHasher
from commitproof.core.verify.verifier import compare_revisions
from commitproof.exceptions import AttestationError


@click.command("hash")
@click.argument("revision", default="HEAD")
@click.option(
    "--worktree", is_flag=True,
    help="Hash tracked files as they are on disk instead of REVISION.",
)
@repo_option
@format_option
def hash_command(revision: str, worktree: bool, repo_path: str, output_format: str) -> None:
    """Print the snapshot fingerprint of REVISION (default: HEAD)."""
    repo = open_repo(repo_path)
    try:
        hasher = SnapshotHasher(repo)
        if worktree:
            fingerprint = hasher.fingerprint_worktree()
            subject = "worktree"
        else:
            subject = repo.resolve(revision)
            fingerprint = hasher.fingerprint(subject)
    except AttestationError as exc:
        fail(str(exc))

    if output_format == "json":
        click.echo(json.dumps({"revision": subject, "fingerprint": fingerprint}, indent=2))
    else:
        click.echo(fingerprint)


@click.command("compare")
@click.argument("left")
@click.argument("right")
@repo_option
@format_option
def compare_command(left: str, right: str, repo_path: str, output_format: str) -> None:
    """Compare the fingerprints of two revisions."""
    repo = open_repo(repo_path)
    try:
        comparison = compare_revisions(SnapshotHasher(repo), left, right)
    except AttestationError as exc:
        fail(str(exc))

    if output_format == "json":
        click.echo(json.dumps({
            "left": {"revision": left, "fingerprint": comparison.left_fingerprint},
            "right": {"revision": right, "fingerprint": comparison.right_fingerprint},
            "identical": comparison.identical,
        }, indent=2))
    else:
        print_comparison(comparison)
