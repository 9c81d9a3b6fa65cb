"""Error taxonomy for a materialization run."""

from __future__ import annotations

from pathlib import Path


class ButlerError(Exception):
    """Base class for every failure that aborts a run."""


class SetupError(ButlerError):
    """Raised before any file of the destination is touched."""


class TemplateNotFoundError(SetupError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"template {name!r} could not be found")


class IncompatibleVersionError(SetupError):
    def __init__(self, required: str, current: str) -> None:
        self.required = required
        self.current = current
        super().__init__(
            f"template requires butler {required}, but this is butler {current}"
        )


class DescriptorError(SetupError):
    """Raised when a configuration or survey descriptor is malformed."""


class DestinationExistsError(SetupError):
    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"destination {path} already exists and is not empty")


class UnpackError(ButlerError):
    """Raised when the template source cannot be unpacked into staging."""


class TemplateError(ButlerError):
    """Raised when a name, content or condition template cannot be rendered."""

    def __init__(self, name: str, message: str) -> None:
        self.name = name
        super().__init__(f"{name}: {message}")


class RenameConflictError(ButlerError):
    def __init__(self, target: Path, sources: list[Path]) -> None:
        self.target = target
        self.sources = sources
        joined = ", ".join(str(s) for s in sources)
        super().__init__(f"directory rename conflict on {target} (from {joined})")


class HookError(ButlerError):
    def __init__(self, hook_name: str, reason: str) -> None:
        self.hook_name = hook_name
        super().__init__(f"hook {hook_name!r} failed: {reason}")


class CommitError(ButlerError):
    def __init__(self, source: Path, destination: Path, reason: str) -> None:
        self.source = source
        self.destination = destination
        super().__init__(
            f"could not move staged project {source} to {destination}: {reason}"
        )


class UserCancelled(Exception):
    """The user declined to commit the project. Not a failure."""
