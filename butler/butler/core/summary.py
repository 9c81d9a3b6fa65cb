"""Phase timings and outcome of a run."""

from __future__ import annotations

import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator

from .models import ErrorRecord


@dataclass
class RunSummary:
    destination: Path | None = None
    durations: dict[str, float] = field(default_factory=dict)
    errors: list[ErrorRecord] = field(default_factory=list)
    hook_errors: list[ErrorRecord] = field(default_factory=list)
    jobs: int = 0

    @contextmanager
    def track(self, phase: str) -> Iterator[None]:
        start = time.perf_counter()
        try:
            yield
        finally:
            self.durations[phase] = time.perf_counter() - start

    @property
    def total(self) -> float:
        return sum(self.durations.values())

    def format(self) -> str:
        """Two aligned rows: phase names and their durations in seconds."""
        headers = [name.capitalize() for name in self.durations] + ["Total"]
        values = [f"{d:.2f} sec" for d in self.durations.values()] + [
            f"{self.total:.2f} sec"
        ]
        widths = [max(len(h), len(v)) for h, v in zip(headers, values)]
        head = "  ".join(h.ljust(w) for h, w in zip(headers, widths))
        row = "  ".join(v.ljust(w) for v, w in zip(values, widths))
        return f"{head.rstrip()}\n{row.rstrip()}"
