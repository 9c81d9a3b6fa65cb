"""Fixed-size worker pool for per-file materialization jobs."""

from __future__ import annotations

import logging
import os
import queue
import threading
from pathlib import Path
from typing import Callable, Optional

from ..core.models import ErrorRecord

logger = logging.getLogger(__name__)

Job = Callable[[], Optional[ErrorRecord]]

_STOP = object()


class WorkerPool:
    """Runs jobs on ``workers`` threads fed from a bounded queue.

    The walk submitting jobs is the only producer; ``submit`` blocks while the
    queue is full. Jobs report failures by returning an :class:`ErrorRecord`;
    an exception escaping a job is turned into one as well, so a worker never
    dies with jobs still queued.
    ``close`` is the join barrier: it returns every record once all workers
    have drained the queue and exited.
    """

    def __init__(self, workers: int | None = None) -> None:
        self.size = workers or os.cpu_count() or 1
        if self.size < 1:
            raise ValueError(f"worker count must be positive, got {self.size}")
        self._jobs: queue.Queue[object] = queue.Queue(maxsize=self.size)
        self._errors: queue.Queue[ErrorRecord] = queue.Queue()
        self._threads: list[threading.Thread] = []
        self._closed = False
        self.submitted = 0

    def __enter__(self) -> WorkerPool:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        if not self._closed:
            self.close()

    def start(self) -> None:
        for i in range(self.size):
            thread = threading.Thread(
                target=self._work, name=f"butler-worker-{i}", daemon=True
            )
            thread.start()
            self._threads.append(thread)
        logger.debug(f"Started {self.size} worker(s)")

    def _work(self) -> None:
        while True:
            item = self._jobs.get()
            if item is _STOP:
                return
            path, job = item  # type: ignore[misc]
            try:
                record = job()
            except Exception as e:
                logger.error(f"Job for {path} failed: {type(e).__name__}: {e}")
                record = ErrorRecord(path, "job", f"{type(e).__name__}: {e}")
            if record is not None:
                self._errors.put(record)

    def submit(self, job: Job, path: Path | None = None) -> None:
        """Queue ``job``; ``path`` names it in the record of an unexpected failure."""
        if self._closed:
            raise RuntimeError("worker pool is closed")
        self._jobs.put((path or Path("."), job))
        self.submitted += 1

    def close(self) -> list[ErrorRecord]:
        """Stop accepting jobs, wait for all workers and drain the errors."""
        self._closed = True
        for _ in self._threads:
            self._jobs.put(_STOP)
        for thread in self._threads:
            thread.join()

        records: list[ErrorRecord] = []
        while True:
            try:
                records.append(self._errors.get_nowait())
            except queue.Empty:
                break
        logger.debug(
            f"Workers finished {self.submitted} job(s) with {len(records)} error(s)"
        )
        return records
