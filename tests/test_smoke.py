from click.testing import CliRunner

from commitproof import __version__
from commitproof.cli.main import cli


def test_version():
    assert __version__ == "0.1.0"


def test_cli_help():
    runner = CliRunner()
    result = runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "tamper-evident attestation" in result.output


def test_cli_lists_all_commands():
    runner = CliRunner()
    result = runner.invoke(cli, ["--help"])
    for command in ("hash", "record", "submit", "verify", "audit", "compare", "log",
                    "config-check", "hook", "install-hook", "uninstall-hook"):
        assert command in result.output


def test_cli_version():
    runner = CliRunner()
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "0.1.0" in result.output
