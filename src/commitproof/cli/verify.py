"""``commitproof verify`` and ``commitproof audit``: check revisions
against their attestation records.

Exit Codes (verify):
    0 - Local fingerprint matches the recorded one.
    1 - Fingerprints differ (tampering).
    2 - The registry holds no record for the revision.
    3 - Local error, or the registry could not be reached.

Exit Codes (audit):
    0 - Every revision was checked and none mismatch (unrecorded revisions
        are reported, not failed).
    1 - At least one revision does not match its record. Takes precedence
        over revisions that could not be checked.
    3 - No mismatch, but some revision could not be checked (local error or
        registry unreachable), or the revision range is invalid.
"""

from __future__ import annotations

import json
import sys

import click

from commitproof.cli.context import (
    build_client,
    config_option,
    fail,
    format_option,
    load_repo_config,
    open_repo,
    repo_option,
    run_async,
)
from commitproof.cli.output import (
    print_verification,
    print_verification_table,
    verification_to_json,
)
from commitproof.core.snapshot.hasher import SnapshotHasher
from commitproof.core.verify.models import VerificationStatus
from commitproof.core.verify.verifier import DEFAULT_CONCURRENCY, Verifier
from commitproof.exceptions import CommitProofError

_EXIT_CODES: dict[VerificationStatus, int] = {
    VerificationStatus.MATCH: 0,
    VerificationStatus.MISMATCH: 1,
    VerificationStatus.NO_RECORD: 2,
    VerificationStatus.ERROR: 3,
}


@click.command("verify")
@click.argument("revision", default="HEAD")
@click.option(
    "--worktree", is_flag=True,
    help="Check the files on disk against REVISION's record.",
)
@click.option(
    "--fingerprint", "fingerprint", default=None,
    help="Check this fingerprint against REVISION's record instead of recomputing.",
)
@repo_option
@config_option
@format_option
def verify_command(
    revision: str,
    worktree: bool,
    fingerprint: str | None,
    repo_path: str,
    config_path: str | None,
    output_format: str,
) -> None:
    """Verify REVISION (default: HEAD) against the registry.

    Recomputes the snapshot fingerprint locally and compares it with the
    fingerprint recorded at commit time.
    """
    if worktree and fingerprint:
        fail("--worktree and --fingerprint are mutually exclusive")

    repo = open_repo(repo_path)
    config = load_repo_config(repo, config_path)

    async def _verify():
        hasher = SnapshotHasher(repo)
        local = hasher.fingerprint_worktree() if worktree else fingerprint
        async with build_client(repo, config) as client:
            return await Verifier(hasher, client).verify(revision, local)

    try:
        result = run_async(_verify())
    except CommitProofError as exc:
        fail(str(exc))

    if output_format == "json":
        click.echo(json.dumps(verification_to_json(result), indent=2))
    else:
        print_verification(result)

    sys.exit(_EXIT_CODES[result.status])


@click.command("audit")
@click.argument("revision_range", default="HEAD")
@click.option(
    "--max-count", "-n", type=int, default=None,
    help="Verify at most this many revisions.",
)
@click.option(
    "--concurrency", type=click.IntRange(min=1), default=DEFAULT_CONCURRENCY,
    show_default=True, help="Registry lookups in flight at once.",
)
@repo_option
@config_option
@format_option
def audit_command(
    revision_range: str,
    max_count: int | None,
    concurrency: int,
    repo_path: str,
    config_path: str | None,
    output_format: str,
) -> None:
    """Verify every revision in REVISION_RANGE (default: all of HEAD's history)."""
    repo = open_repo(repo_path)
    config = load_repo_config(repo, config_path)

    async def _audit():
        revisions = repo.list_revisions(revision_range, max_count=max_count)
        async with build_client(repo, config) as client:
            verifier = Verifier(SnapshotHasher(repo), client)
            return await verifier.verify_many(revisions, concurrency=concurrency)

    try:
        results = run_async(_audit())
    except CommitProofError as exc:
        fail(str(exc))

    if output_format == "json":
        click.echo(json.dumps([verification_to_json(r) for r in results], indent=2))
    else:
        print_verification_table(results)

    statuses = {r.status for r in results}
    if VerificationStatus.MISMATCH in statuses:
        sys.exit(1)
    sys.exit(3 if VerificationStatus.ERROR in statuses else 0)
