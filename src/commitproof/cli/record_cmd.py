"""``commitproof record``: build an attestation record without sending it."""

from __future__ import annotations

import json

import click

from commitproof.cli.context import (
    build_builder,
    config_option,
    fail,
    format_option,
    load_repo_config,
    open_repo,
    repo_option,
)
from commitproof.cli.output import print_record
from commitproof.exceptions import AttestationError


@click.command("record")
@click.argument("revision", default="HEAD")
@repo_option
@config_option
@format_option
def record_command(
    revision: str, repo_path: str, config_path: str | None, output_format: str
) -> None:
    """Show the attestation record that would be submitted for REVISION.

    Uses the config file for the submitter and project label when one
    exists, but does not require it.
    """
    repo = open_repo(repo_path)
    config = load_repo_config(repo, config_path, required=False)
    try:
        record = build_builder(repo, config).build(revision)
    except AttestationError as exc:
        fail(str(exc))

    if output_format == "json":
        click.echo(json.dumps(record.to_payload(), indent=2))
    else:
        print_record(record)
