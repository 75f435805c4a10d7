"""Module de configuration."""

from cli_tool_utils.config.loader import ConfigLoader, FileConfigLoader
from cli_tool_utils.config.settings import (ENV_PREFIX, RunnerSettings,
                                            SettingsResolver)

__all__ = [
    "ConfigLoader",
    "FileConfigLoader",
    "RunnerSettings",
    "SettingsResolver",
    "ENV_PREFIX",
]
