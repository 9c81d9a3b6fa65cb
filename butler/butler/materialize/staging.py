"""Temporary staging tree and its promotion to the destination."""

from __future__ import annotations

import errno
import logging
import os
import shutil
import tempfile
from pathlib import Path

from ..core.errors import CommitError

logger = logging.getLogger(__name__)


def confirmation_message(error_count: int, destination: Path) -> str:
    """Wording of the commit prompt for zero, one or many errors."""
    if error_count == 0:
        return f"Templating finished without errors. Create the project in {destination}?"
    if error_count == 1:
        return (
            f"Templating finished with 1 error. "
            f"Create the project in {destination} anyway?"
        )
    return (
        f"Templating finished with {error_count} errors. "
        f"Create the project in {destination} anyway?"
    )


class StagingArea:
    """A disposable directory holding the template while it is materialized.

    Used as a context manager: whatever is left of the staging directory is
    removed on exit, on every exit path, unless ``keep`` is set.
    """

    def __init__(self, staging_root: Path | None = None, keep: bool = False) -> None:
        self.staging_root = staging_root
        self.keep = keep
        self.base: Path | None = None

    @property
    def root(self) -> Path:
        if self.base is None:
            raise RuntimeError("staging area has not been created")
        return self.base / "project"

    def __enter__(self) -> StagingArea:
        if self.staging_root is not None:
            self.staging_root.mkdir(parents=True, exist_ok=True)
        self.base = Path(
            tempfile.mkdtemp(
                prefix="butler-",
                dir=str(self.staging_root) if self.staging_root else None,
            )
        )
        logger.debug(f"Created staging area {self.base}")
        return self

    def __exit__(self, *exc_info: object) -> None:
        if self.keep:
            logger.info(f"Keeping staging area {self.base}")
            return
        self.discard()

    def discard(self) -> None:
        if self.base is not None and self.base.exists():
            shutil.rmtree(self.base)
            logger.debug(f"Removed staging area {self.base}")

    def commit(self, destination: Path, survey_file: str | None = None) -> Path:
        """Move the staged tree to ``destination``.

        Args:
            destination: Final project directory, must be absent or empty
            survey_file: Descriptor file name to strip from the tree root

        Returns:
            The destination path
        """
        source = self.root
        if survey_file:
            descriptor = source / survey_file
            if descriptor.is_file():
                descriptor.unlink()
                logger.debug(f"Removed survey file {descriptor}")

        if destination.exists():
            if not destination.is_dir() or any(destination.iterdir()):
                raise CommitError(source, destination, "destination is not empty")
            destination.rmdir()
        destination.parent.mkdir(parents=True, exist_ok=True)

        try:
            os.rename(source, destination)
        except OSError as e:
            if e.errno != errno.EXDEV:
                raise CommitError(source, destination, str(e)) from e
            self._copy(source, destination)

        logger.info(f"Project created in {destination}")
        self.discard()
        return destination

    def _copy(self, source: Path, destination: Path) -> None:
        logger.debug(f"Cross-device move, copying {source} to {destination}")
        try:
            shutil.copytree(source, destination, symlinks=True)
        except (OSError, shutil.Error) as e:
            if destination.exists():
                shutil.rmtree(destination, ignore_errors=True)
            raise CommitError(source, destination, str(e)) from e
        shutil.rmtree(source)
