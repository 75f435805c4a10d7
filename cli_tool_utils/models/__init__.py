"""Modèles de données : définitions de commandes, résultats, versions."""

from cli_tool_utils.models.definitions import (
    ArgumentDefinition,
    CommandDefinition,
    EnvVarDefinition,
    FlagDefinition,
    FormatStyle,
    OptionDefinition,
    PARAMETER_TYPES,
)
from cli_tool_utils.models.executable_info import (
    ExecutableInfo,
    ExecutableSource,
    LocatedExecutable,
)
from cli_tool_utils.models.result import ExecutionResult
from cli_tool_utils.models.version import (
    CompatibilityResult,
    UNKNOWN_VERSION,
    VersionDetectionMethod,
    VersionInfo,
)

__all__ = [
    "ArgumentDefinition",
    "CommandDefinition",
    "EnvVarDefinition",
    "FlagDefinition",
    "FormatStyle",
    "OptionDefinition",
    "PARAMETER_TYPES",
    "ExecutableInfo",
    "ExecutableSource",
    "LocatedExecutable",
    "ExecutionResult",
    "CompatibilityResult",
    "UNKNOWN_VERSION",
    "VersionDetectionMethod",
    "VersionInfo",
]
