"""Loading and checking the survey descriptor shipped with a template."""

from __future__ import annotations

import logging
import re
from pathlib import Path

import yaml
from packaging.specifiers import InvalidSpecifier, SpecifierSet
from packaging.version import InvalidVersion, Version
from pydantic import ValidationError

from ..core.errors import DescriptorError, IncompatibleVersionError
from ..core.models import TemplateDescriptor

logger = logging.getLogger(__name__)

_OPERATOR_GAP = re.compile(r"(===|<=|>=|==|!=|~=|<|>)\s+")


def load_descriptor(path: Path) -> TemplateDescriptor | None:
    """Parse the survey descriptor at ``path``.

    Args:
        path: Descriptor location inside the staging tree

    Returns:
        The descriptor, or None when the template ships none
    """
    if not path.is_file():
        logger.info(f"No survey file found at {path}, using static variables only")
        return None

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise DescriptorError(f"survey file {path} is not valid YAML: {e}") from e

    if not isinstance(data, dict):
        raise DescriptorError(f"survey file {path} must contain a mapping")

    try:
        descriptor = TemplateDescriptor.model_validate(data)
    except ValidationError as e:
        raise DescriptorError(f"invalid survey file {path}: {e}") from e

    logger.debug(
        f"Survey file {path}: {len(descriptor.questions)} question(s), "
        f"{len(descriptor.after_hooks)} hook(s)"
    )
    return descriptor


def parse_version_range(expression: str) -> SpecifierSet:
    """Parse a version range such as ``>=1.0.0 <2.0.0`` or ``>=1.0,<2``."""
    normalized = _OPERATOR_GAP.sub(r"\1", expression.strip())
    parts = [part for part in re.split(r"[,\s]+", normalized) if part]
    try:
        return SpecifierSet(",".join(parts))
    except InvalidSpecifier as e:
        raise DescriptorError(f"invalid butlerVersion range {expression!r}") from e


def check_compatibility(descriptor: TemplateDescriptor, current: str) -> None:
    """Fail when the running version is outside the template's declared range."""
    if descriptor.deprecated:
        logger.warning("This template is deprecated and may be removed in the future")

    if not descriptor.butler_version.strip():
        return

    specifier = parse_version_range(descriptor.butler_version)
    try:
        version = Version(current)
    except InvalidVersion as e:
        raise DescriptorError(f"invalid butler version {current!r}") from e

    if not specifier.contains(version, prereleases=True):
        raise IncompatibleVersionError(descriptor.butler_version, current)
    logger.debug(f"butler {current} satisfies {descriptor.butler_version}")
