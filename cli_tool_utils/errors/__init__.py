"""Module de gestion des erreurs."""

from cli_tool_utils.errors.base import ErrorHandler, ErrorHandlerChain
from cli_tool_utils.errors.exceptions import (ApplicationError,
                                              ConfigurationError,
                                              FileConfigurationError,
                                              UnsupportedPlatformError,
                                              UnknownShellError,
                                              ValidationError,
                                              ExecutableNotFoundError,
                                              ExecutionTimeoutError,
                                              ExecutionError,
                                              VersionDetectionError)
from cli_tool_utils.errors.console_handler import ConsoleErrorHandler
from cli_tool_utils.errors.logger_handler import LoggerErrorHandler


__all__ = [
    "ApplicationError",
    "ConfigurationError",
    "FileConfigurationError",
    "UnsupportedPlatformError",
    "UnknownShellError",
    "ValidationError",
    "ExecutableNotFoundError",
    "ExecutionTimeoutError",
    "ExecutionError",
    "VersionDetectionError",
    "ErrorHandler",
    "ConsoleErrorHandler",
    "LoggerErrorHandler",
    "ErrorHandlerChain",
]
