"""Directory pass: decide every rename and removal, then apply them."""

from __future__ import annotations

import logging
import os
import shutil
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from ..core.errors import RenameConflictError, TemplateError
from ..core.models import ErrorRecord
from ..rendering import TemplateEvaluator
from .exclusion import ExclusionFilter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlanOperation:
    kind: Literal["remove", "rename"]
    source: Path
    target: Path | None = None


def _is_within(path: Path, parent: Path) -> bool:
    return path != parent and parent in path.parents


@dataclass
class RenamePlan:
    """Ordered directory operations recorded against the original tree."""

    removals: list[Path] = field(default_factory=list)
    renames: list[tuple[Path, Path]] = field(default_factory=list)

    def remove(self, path: Path) -> None:
        self.removals.append(path)

    def rename(self, source: Path, target: Path) -> None:
        self.renames.append((source, target))

    def __len__(self) -> int:
        return len(self.removals) + len(self.renames)

    def check_conflicts(self) -> None:
        """Reject renames whose targets collide with each other or with a
        directory that is itself scheduled to move."""
        counts = Counter(target for _, target in self.renames)
        sources = {source for source, _ in self.renames}
        for target, count in counts.items():
            if count > 1 or target in sources:
                colliding = [s for s, t in self.renames if t == target]
                if target in sources:
                    colliding.append(target)
                raise RenameConflictError(target, colliding)

    def operations(self) -> list[PlanOperation]:
        """Operations in application order.

        Removals come first. Anything below a removed directory is dropped.
        Renames run deepest first so every source path is still valid when
        it is reached.
        """
        self.check_conflicts()
        removals = [
            path
            for path in self.removals
            if not any(_is_within(path, other) for other in self.removals)
        ]
        ops = [PlanOperation("remove", path) for path in removals]
        renames = [
            (source, target)
            for source, target in self.renames
            if not any(
                source == removed or _is_within(source, removed)
                for removed in removals
            )
        ]
        renames.sort(key=lambda item: (-len(item[0].parts), str(item[0])))
        ops.extend(PlanOperation("rename", source, target) for source, target in renames)
        return ops


class DirectoryRenamer:
    """Evaluates templated directory names without mutating during the walk."""

    def __init__(self, evaluator: TemplateEvaluator, exclusion: ExclusionFilter) -> None:
        self.evaluator = evaluator
        self.exclusion = exclusion

    def plan(self, root: Path) -> tuple[RenamePlan, list[ErrorRecord]]:
        """Walk ``root`` and record what should happen to each directory.

        Args:
            root: Staging tree root (never renamed itself)

        Returns:
            The plan and the render failures met on the way
        """
        plan = RenamePlan()
        errors: list[ErrorRecord] = []

        for dirpath, dirnames, _ in self.exclusion.walk(root):
            parent = Path(dirpath)
            removed: list[str] = []
            for name in dirnames:
                path = parent / name
                try:
                    rendered = self.evaluator.render_name(str(path), name)
                except TemplateError as e:
                    logger.error(f"Directory name could not be rendered: {path}: {e}")
                    errors.append(ErrorRecord(path, "render", str(e)))
                    continue

                if not rendered.strip():
                    logger.debug(f"Directory scheduled for removal: {path}")
                    plan.remove(path)
                    removed.append(name)
                elif rendered != name:
                    plan.rename(path, parent / rendered)

            # removal wins for the whole subtree
            dirnames[:] = [d for d in dirnames if d not in removed]

        return plan, errors

    def apply(self, plan: RenamePlan) -> list[ErrorRecord]:
        """Apply a plan to the filesystem.

        Returns:
            One record per operation that failed at the OS level
        """
        errors: list[ErrorRecord] = []
        for op in plan.operations():
            if op.target is None:
                record = self._remove(op.source)
            else:
                record = self._rename(op.source, op.target)
            if record is not None:
                errors.append(record)
        return errors

    def _remove(self, path: Path) -> ErrorRecord | None:
        try:
            shutil.rmtree(path)
        except OSError as e:
            logger.error(f"Directory could not be removed: {path}: {e}")
            return ErrorRecord(path, "delete", str(e))
        return None

    def _rename(self, source: Path, target: Path) -> ErrorRecord | None:
        if target.exists():
            raise RenameConflictError(target, [source])
        try:
            os.rename(source, target)
        except OSError as e:
            logger.error(f"Directory could not be renamed: {source}: {e}")
            return ErrorRecord(source, "rename", str(e))
        logger.debug(f"Renamed directory {source} → {target}")
        return None

    def run(self, root: Path) -> list[ErrorRecord]:
        plan, errors = self.plan(root)
        logger.debug(f"Directory plan: {len(plan)} operation(s)")
        return errors + self.apply(plan)
