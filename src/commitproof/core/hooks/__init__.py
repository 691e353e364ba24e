"""Git hook installation."""

from commitproof.core.hooks.installer import (
    HOOK_MARKER,
    StepResult,
    install_hook,
    render_hook,
    uninstall_hook,
)

__all__ = [
    "HOOK_MARKER",
    "StepResult",
    "install_hook",
    "render_hook",
    "uninstall_hook",
]
