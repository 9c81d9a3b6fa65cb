"""Process settings and the static ``butler.yml`` configuration."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import DescriptorError, SetupError
from .models import ButlerConfig

logger = logging.getLogger(__name__)


def _default_workers() -> int:
    return os.cpu_count() or 1


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="BUTLER_", case_sensitive=False)

    config_file: Path = Path("butler.yml")
    survey_file: str = "butler-survey.yml"
    workers: int = Field(default_factory=_default_workers, ge=1)
    staging_root: Path | None = None
    keep_staging: bool = False
    log_level: str = "INFO"


def load_config(path: Path) -> ButlerConfig:
    """Load the static configuration file.

    Args:
        path: Path to ``butler.yml``

    Returns:
        Parsed configuration
    """
    if not path.exists():
        raise SetupError(f"{path} could not be found")

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise DescriptorError(f"{path} is not valid YAML: {e}") from e

    if not isinstance(data, dict):
        raise DescriptorError(f"{path} must contain a mapping")

    try:
        config = ButlerConfig.model_validate(data)
    except ValidationError as e:
        raise DescriptorError(f"invalid configuration {path}: {e}") from e

    logger.debug(
        f"Loaded {len(config.templates)} template(s) and "
        f"{len(config.variables)} variable(s) from {path}"
    )
    return config
