"""Allow ``python -m commitproof`` (used by the detached post-commit submitter)."""

from commitproof.cli.main import cli

if __name__ == "__main__":
    cli()
