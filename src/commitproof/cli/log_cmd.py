"""``commitproof log``: show the local audit log of registry attempts."""

from __future__ import annotations

import json

import click

from commitproof.audit.log import AuditLog
from commitproof.cli.context import (
    config_option,
    format_option,
    load_repo_config,
    open_repo,
    repo_option,
)
from commitproof.cli.output import print_audit_entries
from commitproof.exceptions import RevisionNotFound


@click.command("log")
@click.argument("revision", required=False)
@click.option(
    "--tail", type=click.IntRange(min=1), default=None,
    help="Show only the last N entries.",
)
@repo_option
@config_option
@format_option
def log_command(
    revision: str | None,
    tail: int | None,
    repo_path: str,
    config_path: str | None,
    output_format: str,
) -> None:
    """Show audit log entries, optionally only those for REVISION.

    REVISION is resolved to a full commit id when it names one; otherwise it
    is matched literally (build failures are logged under the expression
    that failed to resolve).
    """
    repo = open_repo(repo_path)
    config = load_repo_config(repo, config_path, required=False)
    audit_log = AuditLog(config.audit_log_path(repo.root))

    revision_id = None
    if revision:
        try:
            revision_id = repo.resolve(revision)
        except RevisionNotFound:
            revision_id = revision

    entries = audit_log.entries(revision_id)
    if tail is not None:
        entries = entries[-tail:]

    if output_format == "json":
        click.echo(json.dumps([e.to_dict() for e in entries], indent=2))
    else:
        print_audit_entries(entries)
