"""LessonGate utilities."""

from .config_loader import load_settings, EngineSettings, CONFIG_PATH, DEFAULT_DB_PATH

__all__ = ["load_settings", "EngineSettings", "CONFIG_PATH", "DEFAULT_DB_PATH"]
