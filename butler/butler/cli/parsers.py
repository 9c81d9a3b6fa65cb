"""CLI argument parsers and validators."""

from __future__ import annotations

from pathlib import Path

import typer

from ..core.context import normalize_project_name


def parse_variable(value: str) -> tuple[str, str]:
    """Parse a variable argument in format KEY=VALUE."""
    if "=" not in value:
        raise typer.BadParameter(f"Must be KEY=VALUE, got: {value!r}")
    key, val = value.split("=", 1)
    if not key.strip():
        raise typer.BadParameter(f"Empty variable name in {value!r}")
    return key.strip(), val


def parse_project_name(value: str) -> str:
    """Normalize a project name, rejecting names with no usable character."""
    name = normalize_project_name(value)
    if not name:
        raise typer.BadParameter(
            f"Project name {value!r} has no allowed characters (0-9, A-Z, a-z, -)"
        )
    return name


def parse_workers(value: int | None) -> int | None:
    if value is not None and value < 1:
        raise typer.BadParameter(f"Worker count must be positive, got: {value}")
    return value


def parse_answers_file(value: Path | None) -> Path | None:
    if value is not None and not value.is_file():
        raise typer.BadParameter(f"Answers file not found: {value}")
    return value
