"""File pass: render names and contents of every staged file."""

from __future__ import annotations

import logging
import stat
from functools import partial
from pathlib import Path
from typing import Iterator

from ..core.errors import TemplateError
from ..core.models import ErrorRecord, MaterializationJob
from ..rendering import TemplateEvaluator
from ..rendering.io import replace_text
from .exclusion import ExclusionFilter
from .pool import WorkerPool

logger = logging.getLogger(__name__)


class FileMaterializer:
    """Renders staged files in place.

    Every failure of a job becomes exactly one :class:`ErrorRecord`; nothing
    is raised out of :meth:`materialize`.
    """

    def __init__(self, evaluator: TemplateEvaluator, exclusion: ExclusionFilter) -> None:
        self.evaluator = evaluator
        self.exclusion = exclusion

    def iter_jobs(self, root: Path) -> Iterator[MaterializationJob]:
        """Discover one job per non-excluded file below ``root``."""
        for dirpath, _, filenames in self.exclusion.walk(root):
            for name in filenames:
                yield MaterializationJob(source=Path(dirpath) / name, base_name=name)

    def materialize(self, job: MaterializationJob) -> ErrorRecord | None:
        source = job.source

        try:
            new_name = self.evaluator.render_name(str(source), job.base_name)
        except TemplateError as e:
            logger.error(f"File name could not be rendered: {source}: {e}")
            return ErrorRecord(source, "render", str(e))

        if not new_name.strip():
            try:
                source.unlink()
            except (OSError, ValueError) as e:
                logger.error(f"File could not be deleted: {source}: {e}")
                return ErrorRecord(source, "delete", str(e))
            logger.debug(f"Removed {source} (name rendered empty)")
            return None

        destination = source.parent / new_name

        try:
            text = source.read_text(encoding="utf-8")
            mode = stat.S_IMODE(source.stat().st_mode)
        except (OSError, ValueError) as e:
            logger.error(f"File could not be read: {source}: {e}")
            return ErrorRecord(source, "read", str(e))

        try:
            rendered = self.evaluator.render_content(str(destination), text)
        except TemplateError as e:
            logger.error(f"File content could not be rendered: {source}: {e}")
            return ErrorRecord(source, "render", str(e))

        if not rendered.strip() and text.strip():
            # content evaluated to nothing: the file is conditional
            return self._delete(source, "content rendered empty")

        try:
            replace_text(destination, rendered, mode)
        except (OSError, ValueError) as e:
            logger.error(f"File could not be written: {destination}: {e}")
            return ErrorRecord(destination, "write", str(e))

        if destination != source:
            return self._delete(source, f"renamed to {destination.name}")
        return None

    def _delete(self, path: Path, reason: str) -> ErrorRecord | None:
        try:
            path.unlink()
        except (OSError, ValueError) as e:
            logger.error(f"File could not be deleted: {path}: {e}")
            return ErrorRecord(path, "delete", str(e))
        logger.debug(f"Removed {path} ({reason})")
        return None

    def run(self, root: Path, workers: int | None = None) -> tuple[int, list[ErrorRecord]]:
        """Materialize every file below ``root`` on a worker pool.

        Returns:
            Number of jobs submitted and the error records of failed jobs
        """
        with WorkerPool(workers) as pool:
            for job in self.iter_jobs(root):
                pool.submit(partial(self.materialize, job), job.source)
            errors = pool.close()
        return pool.submitted, errors
