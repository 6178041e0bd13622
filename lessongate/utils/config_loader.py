"""
Settings loader for LessonGate.

Loads engine settings from a YAML file, with environment overrides.
"""

import logging
import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from lessongate.schemas import CompletionPolicy, DEFAULT_PASS_THRESHOLD

logger = logging.getLogger(__name__)

# Default config file (relative to project root)
CONFIG_PATH = Path(__file__).parent.parent.parent / "config" / "engine.yaml"

DEFAULT_DB_PATH = Path.home() / ".lessongate" / "lessongate.db"

ENV_PREFIX = "LESSONGATE_"


class EngineSettings(BaseModel):
    default_pass_threshold: float = Field(default=DEFAULT_PASS_THRESHOLD, ge=0, le=100)
    completion_policy: CompletionPolicy = CompletionPolicy.EVER_PASSED
    db_path: Path = DEFAULT_DB_PATH
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def log_level_known(cls, v):
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("db_path")
    @classmethod
    def expand_db_path(cls, v):
        return v.expanduser()


def _env_overrides() -> dict[str, Any]:
    overrides = {}
    mapping = {
        "DB": "db_path",
        "PASS_THRESHOLD": "default_pass_threshold",
        "COMPLETION_POLICY": "completion_policy",
        "LOG_LEVEL": "log_level",
    }
    for suffix, field in mapping.items():
        value = os.environ.get(ENV_PREFIX + suffix)
        if value:
            overrides[field] = value
    return overrides


def load_settings(config_path: Optional[Path] = None) -> EngineSettings:
    """
    Load engine settings.

    Args:
        config_path: Optional YAML file. Falls back to $LESSONGATE_CONFIG,
            then to config/engine.yaml at the project root.

    Returns:
        EngineSettings with LESSONGATE_* environment variables applied on top
        of the file values.

    Raises:
        FileNotFoundError: If an explicitly requested file doesn't exist
        yaml.YAMLError: If YAML parsing fails
    """
    explicit = config_path or os.environ.get(ENV_PREFIX + "CONFIG")
    file_path = Path(explicit) if explicit else CONFIG_PATH

    data: dict[str, Any] = {}
    if file_path.exists():
        with open(file_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        logger.debug(f"Loaded settings from {file_path}")
    elif explicit:
        raise FileNotFoundError(f"Settings file not found: {file_path}")

    data.update(_env_overrides())
    return EngineSettings.model_validate(data)
