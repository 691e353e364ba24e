"""``commitproof submit``: attest a revision now, in the foreground.

Exit Codes:
    0 - Revision attested (accepted, or already recorded).
    1 - Registry rejected the record, or retries were exhausted.
    3 - Local error (bad revision, missing config).
"""

from __future__ import annotations

import json
import sys

import click

from commitproof.cli.context import (
    build_builder,
    build_client,
    config_option,
    fail,
    format_option,
    load_repo_config,
    open_repo,
    repo_option,
    run_async,
)
from commitproof.cli.output import print_submission, submission_to_json
from commitproof.core.attestation.workflow import attest_revision
from commitproof.exceptions import AttestationError


@click.command("submit")
@click.argument("revision", default="HEAD")
@repo_option
@config_option
@format_option
def submit_command(
    revision: str, repo_path: str, config_path: str | None, output_format: str
) -> None:
    """Build the record for REVISION and submit it to the registry."""
    repo = open_repo(repo_path)
    config = load_repo_config(repo, config_path)
    builder = build_builder(repo, config)

    async def _submit():
        async with build_client(repo, config) as client:
            return await attest_revision(builder, client, revision)

    try:
        result = run_async(_submit())
    except AttestationError as exc:
        fail(str(exc))

    if output_format == "json":
        click.echo(json.dumps(submission_to_json(result), indent=2))
    else:
        print_submission(result)

    sys.exit(0 if result.ok else 1)
