"""Subprocess helper shared by template unpacking and hooks."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Mapping, Sequence

logger = logging.getLogger(__name__)


def _log_stream(stream: str | None, level: int) -> None:
    for line in (stream or "").splitlines():
        logger.log(level, f"  {line}")


def run_logged(
    cmd: Sequence[str],
    *,
    cwd: Path | None = None,
    env: Mapping[str, str] | None = None,
    capture_output: bool = False,
    check: bool = True,
) -> subprocess.CompletedProcess[str]:
    """Run ``cmd`` and mirror captured output to the log.

    Captured lines go to DEBUG when the command succeeds and to ERROR when it
    fails, so a failing hook or clone always shows its output.

    Raises:
        subprocess.CalledProcessError: on a non-zero exit status when ``check`` is set
        OSError: when the executable cannot be started
    """
    logger.debug(f"$ {' '.join(cmd)}" + (f" (in {cwd})" if cwd else ""))
    result = subprocess.run(
        list(cmd),
        cwd=cwd,
        env=None if env is None else dict(env),
        capture_output=capture_output,
        text=True,
    )
    if capture_output:
        level = logging.DEBUG if result.returncode == 0 else logging.ERROR
        _log_stream(result.stdout, level)
        _log_stream(result.stderr, level)
    if check and result.returncode:
        raise subprocess.CalledProcessError(
            result.returncode, result.args, output=result.stdout, stderr=result.stderr
        )
    return result
