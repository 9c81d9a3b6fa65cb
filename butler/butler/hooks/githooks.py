"""Links versioned git hooks from ``git_hooks/`` into ``.git/hooks``."""

from __future__ import annotations

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

GIT_HOOKS = (
    "applypatch-msg",
    "commit-msg",
    "post-commit",
    "post-receive",
    "post-update",
    "pre-applypatch",
    "pre-commit",
    "prepare-commit-msg",
    "pre-rebase",
    "update",
)

REPO_HOOK_DIR = "git_hooks"


def install_git_hooks(project_root: Path, hooks: tuple[str, ...] = GIT_HOOKS) -> list[str]:
    """Hard-link every available hook template into the git hooks directory.

    Existing hooks are replaced. Nothing happens when the project ships no
    ``git_hooks`` directory.

    Returns:
        Names of installed hooks
    """
    source_dir = project_root / REPO_HOOK_DIR
    if not source_dir.is_dir():
        logger.debug(f"No {REPO_HOOK_DIR}/ directory in {project_root}")
        return []

    target_dir = project_root / ".git" / "hooks"
    installed: list[str] = []

    for name in hooks:
        source = source_dir / name
        if not source.is_file():
            logger.debug(f"Hook template {name!r} not found in {source_dir}")
            continue

        target_dir.mkdir(parents=True, exist_ok=True)
        target = target_dir / name
        if target.exists() or target.is_symlink():
            target.unlink()

        try:
            os.link(source, target)
        except OSError as e:
            logger.error(f"Could not link hook {name!r}: {e}")
            continue
        logger.info(f"Hook {name!r} installed")
        installed.append(name)

    return installed
