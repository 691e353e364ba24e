"""``commitproof config-check``: validate the registry configuration.

Exit Codes:
    0 - Configuration is usable (warnings allowed).
    1 - Configuration has errors.
    3 - No config file, or the file cannot be parsed.
"""

from __future__ import annotations

import json
import sys

import click

from commitproof.cli.context import (
    config_option,
    fail,
    format_option,
    open_repo,
    repo_option,
    resolve_config_path,
)
from commitproof.cli.output import print_config_report
from commitproof.config import load_config
from commitproof.exceptions import ConfigError


@click.command("config-check")
@repo_option
@config_option
@format_option
def config_check_command(repo_path: str, config_path: str | None, output_format: str) -> None:
    """Check the config file for errors and risky settings."""
    repo = open_repo(repo_path)
    path = resolve_config_path(repo, config_path)
    if path is None:
        fail(f"No config found under {repo.root}")
    try:
        config = load_config(path)
    except ConfigError as exc:
        fail(str(exc))

    report = config.validate()
    if output_format == "json":
        click.echo(json.dumps({
            "path": str(path),
            "ok": report.ok,
            "errors": report.errors,
            "warnings": report.warnings,
            "worst_case_seconds": config.worst_case_seconds,
        }, indent=2))
    else:
        click.echo(f"Config: {path}")
        print_config_report(config, report)

    sys.exit(0 if report.ok else 1)
