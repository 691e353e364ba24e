"""Post-commit hook installation as a fixed sequence of named steps.

Each step reports its own success or failure; the sequence stops at the
first failure so the repository is never left half-configured without the
caller knowing which step broke.
"""

from __future__ import annotations

import logging
import shlex
import stat
import sys
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from commitproof.config import CONFIG_FILENAME, RegistryConfig, dump_config
from commitproof.core.snapshot.git import GitRepository
from commitproof.exceptions import GitCommandError

logger = logging.getLogger(__name__)

HOOK_NAME: str = "post-commit"
HOOK_MARKER: str = "# managed by commitproof"
BACKUP_SUFFIX: str = ".commitproof-backup"


@dataclass(frozen=True)
class StepResult:
    """Outcome of one setup step."""

    name: str
    ok: bool
    detail: str = ""


def render_hook(python: str | None = None) -> str:
    """Return the post-commit hook script.

    The hook hands off to ``commitproof hook``, which detaches the
    submission and returns at once. It always exits 0.
    """
    interpreter = shlex.quote(python or sys.executable)
    return (
        "#!/bin/sh\n"
        f"{HOOK_MARKER}\n"
        f"{interpreter} -m commitproof hook >/dev/null 2>&1 || true\n"
        "exit 0\n"
    )


def _is_managed(path: Path) -> bool:
    try:
        return HOOK_MARKER in path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return False


def install_hook(
    repo: GitRepository,
    *,
    config: RegistryConfig | None = None,
    force: bool = False,
) -> list[StepResult]:
    """Install the post-commit hook (and optionally a config file).

    Args:
        repo: Target repository.
        config: If given and no config file exists yet, written to
            ``.commitproof.yaml`` at the repository root.
        force: Replace a foreign post-commit hook, keeping a backup.

    Returns:
        Results for the steps that ran, in order.
    """
    results: list[StepResult] = []
    state: dict[str, Path] = {}

    def locate_hooks() -> str:
        hooks = repo.hooks_dir()
        hooks.mkdir(parents=True, exist_ok=True)
        state["hook"] = hooks / HOOK_NAME
        return str(hooks)

    def preserve_existing() -> str:
        hook = state["hook"]
        if not hook.exists():
            return "no existing hook"
        if _is_managed(hook):
            return "replacing previous commitproof hook"
        if not force:
            raise FileExistsError(f"{hook} exists and is not managed by commitproof (use --force)")
        backup = hook.with_name(HOOK_NAME + BACKUP_SUFFIX)
        hook.replace(backup)
        return f"backed up to {backup.name}"

    def write_hook() -> str:
        state["hook"].write_text(render_hook(), encoding="utf-8")
        return str(state["hook"])

    def make_executable() -> str:
        hook = state["hook"]
        hook.chmod(hook.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return oct(hook.stat().st_mode & 0o777)

    def write_config() -> str:
        target = repo.root / CONFIG_FILENAME
        if config is None:
            return "skipped (no config given)"
        if target.exists():
            return f"kept existing {CONFIG_FILENAME}"
        target.write_text(dump_config(config), encoding="utf-8")
        return str(target)

    steps: list[tuple[str, Callable[[], str]]] = [
        ("locate hooks directory", locate_hooks),
        ("preserve existing hook", preserve_existing),
        ("write hook script", write_hook),
        ("make hook executable", make_executable),
        ("write configuration", write_config),
    ]
    for name, step in steps:
        try:
            detail = step()
        except (OSError, GitCommandError) as exc:
            logger.warning("Setup step %r failed: %s", name, exc)
            results.append(StepResult(name=name, ok=False, detail=str(exc)))
            break
        results.append(StepResult(name=name, ok=True, detail=detail))
    return results


def uninstall_hook(repo: GitRepository) -> list[StepResult]:
    """Remove the managed hook and restore any backed-up hook."""
    results: list[StepResult] = []
    try:
        hook = repo.hooks_dir() / HOOK_NAME
    except GitCommandError as exc:
        return [StepResult("locate hooks directory", False, str(exc))]
    results.append(StepResult("locate hooks directory", True, str(hook.parent)))

    if not hook.exists():
        results.append(StepResult("remove hook", True, "no hook installed"))
    elif not _is_managed(hook):
        results.append(StepResult("remove hook", False, f"{hook} is not managed by commitproof"))
        return results
    else:
        hook.unlink()
        results.append(StepResult("remove hook", True, str(hook)))

    backup = hook.with_name(HOOK_NAME + BACKUP_SUFFIX)
    if backup.exists():
        backup.replace(hook)
        results.append(StepResult("restore previous hook", True, str(hook)))
    return results
