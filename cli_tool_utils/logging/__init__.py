"""Module de logging."""

from cli_tool_utils.logging.base import Logger
from cli_tool_utils.logging.debug import DebugTracer, debug_enabled
from cli_tool_utils.logging.file_logger import FileLogger

__all__ = [
    "Logger",
    "FileLogger",
    "DebugTracer",
    "debug_enabled",
]
