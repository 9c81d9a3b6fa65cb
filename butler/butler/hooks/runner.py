"""Sequential execution of a template's after-hooks."""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path
from typing import Sequence

from ..core.errors import HookError
from ..core.models import ErrorRecord, Hook
from ..core.process import run_logged
from ..rendering import TemplateEvaluator

logger = logging.getLogger(__name__)

ENV_PREFIX = "BUTLER"


class HookRunner:
    """Runs hooks in declaration order inside the project directory.

    Required hooks that fail raise :class:`HookError`; other failures are
    logged and returned as records.
    """

    def __init__(self, evaluator: TemplateEvaluator, project_root: Path) -> None:
        self.evaluator = evaluator
        self.project_root = project_root

    def environment(self) -> dict[str, str]:
        env = dict(os.environ)
        env.update(self.evaluator.context.env_answers(ENV_PREFIX))
        return env

    def is_enabled(self, hook: Hook) -> bool:
        if not hook.enabled.strip():
            return True
        # malformed conditions propagate as TemplateError
        return self.evaluator.render_condition(f"hook {hook.name}", hook.enabled)

    def command(self, hook: Hook) -> list[str]:
        cmd = hook.cmd
        if hook.relative:
            cmd = str(self.project_root / cmd)
        return [cmd, *hook.args]

    def run_hook(self, hook: Hook, env: dict[str, str]) -> None:
        cmd = self.command(hook)
        logger.info(f"Running hook {hook.name!r}: {' '.join(cmd)}")
        try:
            run_logged(
                cmd,
                cwd=self.project_root,
                env=env,
                capture_output=not hook.verbose,
            )
        except subprocess.CalledProcessError as e:
            raise HookError(hook.name, f"exit status {e.returncode}") from e
        except OSError as e:
            raise HookError(hook.name, str(e)) from e

    def run(self, hooks: Sequence[Hook]) -> list[ErrorRecord]:
        """Run every enabled hook.

        Args:
            hooks: Hooks in declaration order

        Returns:
            Records of failed optional hooks
        """
        env = self.environment()
        errors: list[ErrorRecord] = []

        for hook in hooks:
            if not self.is_enabled(hook):
                logger.debug(f"Hook {hook.name!r} skipped, condition is false")
                continue
            try:
                self.run_hook(hook, env)
            except HookError as e:
                if hook.required:
                    logger.error(str(e))
                    raise
                logger.warning(f"{e} (not required, continuing)")
                errors.append(ErrorRecord(self.project_root, "hook", str(e)))

        return errors
