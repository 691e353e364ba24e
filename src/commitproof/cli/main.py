"""commitproof CLI: attest commits to a registry and verify them later.

Entry point for the ``commitproof`` command-line tool. Registers all
subcommands under a single Click group.

Commands:
    hash           - Print the snapshot fingerprint of a revision.
    record         - Show the attestation record for a revision.
    submit         - Submit a revision's record to the registry.
    verify         - Check a revision against its record.
    audit          - Check every revision in a range.
    compare        - Compare the fingerprints of two revisions.
    log            - Show the local audit log.
    config-check   - Validate .commitproof.yaml.
    hook           - Run commit-time attestation (used by the git hook).
    install-hook   - Install the post-commit hook.
    uninstall-hook - Remove the post-commit hook.

Usage::

    commitproof install-hook --endpoint https://registry.example.org/api
    commitproof hash HEAD
    commitproof submit HEAD~1
    commitproof verify                   # HEAD against its record
    commitproof verify --worktree        # files on disk against HEAD's record
    commitproof audit main -n 50
"""

from __future__ import annotations

import logging

import click
from rich.logging import RichHandler

from commitproof import __version__
from commitproof.cli.config_cmd import config_check_command
from commitproof.cli.hash_cmd import compare_command, hash_command
from commitproof.cli.hook_cmd import (
    hook_command,
    install_hook_command,
    uninstall_hook_command,
)
from commitproof.cli.log_cmd import log_command
from commitproof.cli.output import console
from commitproof.cli.record_cmd import record_command
from commitproof.cli.submit_cmd import submit_command
from commitproof.cli.verify import audit_command, verify_command


def _configure_logging(verbose: int) -> None:
    if not verbose:
        return
    level = logging.DEBUG if verbose > 1 else logging.INFO
    handler = RichHandler(console=console, show_path=False, rich_tracebacks=True)
    package_logger = logging.getLogger("commitproof")
    package_logger.setLevel(level)
    package_logger.addHandler(handler)


@click.group()
@click.version_option(version=__version__)
@click.option(
    "-v", "--verbose", count=True,
    help="Log progress (-v) or debug detail (-vv) to the console.",
)
def cli(verbose: int) -> None:
    """commitproof: tamper-evident attestation of git commits.

    Fingerprints every commit's tracked content, records the fingerprint
    with a remote registry at commit time, and verifies codebases against
    those records later.
    """
    _configure_logging(verbose)


# Register all subcommands
cli.add_command(hash_command)
cli.add_command(record_command)
cli.add_command(submit_command)
cli.add_command(verify_command)
cli.add_command(audit_command)
cli.add_command(compare_command)
cli.add_command(log_command)
cli.add_command(config_check_command)
cli.add_command(hook_command)
cli.add_command(install_hook_command)
cli.add_command(uninstall_hook_command)
