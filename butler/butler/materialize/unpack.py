"""Populates the staging directory from a template source."""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path

from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..core.errors import UnpackError
from ..core.process import run_logged

logger = logging.getLogger(__name__)

CLONE_ATTEMPTS = 3
VCS_DIRS = (".git", ".hg", ".svn")


def is_remote(url: str) -> bool:
    return "://" in url or url.startswith("git@")


def _log_clone_retry(retry_state: RetryCallState) -> None:
    attempt = retry_state.attempt_number
    sleep_for = (
        f"; waiting {retry_state.next_action.sleep:.0f}s"
        if retry_state.next_action and retry_state.next_action.sleep is not None
        else ""
    )
    logger.warning(
        f"git clone failed, retrying (attempt {attempt}/{CLONE_ATTEMPTS}){sleep_for}"
    )


@retry(
    retry=retry_if_exception_type(subprocess.CalledProcessError),
    stop=stop_after_attempt(CLONE_ATTEMPTS),
    wait=wait_exponential(multiplier=1, min=1, max=8),
    before_sleep=_log_clone_retry,
    reraise=True,
)
def _clone(url: str, destination: Path) -> None:
    if destination.exists():
        shutil.rmtree(destination)
    run_logged(
        ["git", "clone", "--depth", "1", "--quiet", url, str(destination)],
        capture_output=True,
    )


def strip_vcs_metadata(root: Path) -> None:
    for name in VCS_DIRS:
        path = root / name
        if path.is_dir():
            shutil.rmtree(path)
            logger.debug(f"Removed {path}")


def unpack(url: str, destination: Path) -> None:
    """Copy or clone the template at ``url`` into ``destination``.

    Args:
        url: Local directory or git URL
        destination: Staging root, must not exist yet
    """
    if is_remote(url):
        logger.info(f"Cloning {url}")
        try:
            _clone(url, destination)
        except subprocess.CalledProcessError as e:
            raise UnpackError(f"could not clone {url} (exit status {e.returncode})") from e
        except OSError as e:
            raise UnpackError(f"could not run git: {e}") from e
    else:
        source = Path(url).expanduser()
        if not source.is_dir():
            raise UnpackError(f"template directory {source} does not exist")
        logger.info(f"Copying {source}")
        try:
            shutil.copytree(
                source, destination, symlinks=True, ignore=shutil.ignore_patterns(*VCS_DIRS)
            )
        except OSError as e:
            raise UnpackError(f"could not copy {source}: {e}") from e

    strip_vcs_metadata(destination)
