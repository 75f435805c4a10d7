"""
CLI Tool Utils - Exécution d'outils en ligne de commande à travers les shells.

Modules disponibles:
- shell: Adaptateurs de shell (bash, zsh, fish, sh, dash, tcsh,
  powershell, cmd), registre et détection de plateforme
- commands: Construction des arguments (CommandArgumentBuilder) et
  exécution (ProcessExecutor)
- discovery: Localisation des exécutables (ExecutableLocator) et
  détection de version (VersionDetector, VersionCompatibility)
- models: Définitions de commandes, résultats, versions
- validation: Validation des paramètres typés
- cache: Cache LRU borné avec expiration (TTLCache)
- config: Chargement de configuration (TOML, JSON) et réglages
- logging: Gestion des logs (Logger, FileLogger, DebugTracer)
- errors: Exceptions et gestionnaires d'erreurs
"""

__version__ = "1.0.0"

from cli_tool_utils.logging import Logger, FileLogger, DebugTracer
from cli_tool_utils.config import (
    ConfigLoader,
    FileConfigLoader,
    RunnerSettings,
    SettingsResolver,
)
from cli_tool_utils.cache import TTLCache
from cli_tool_utils.models import (
    ArgumentDefinition,
    CommandDefinition,
    EnvVarDefinition,
    FlagDefinition,
    FormatStyle,
    OptionDefinition,
    ExecutableInfo,
    LocatedExecutable,
    ExecutionResult,
    CompatibilityResult,
    VersionDetectionMethod,
    VersionInfo,
)
from cli_tool_utils.shell import (
    ShellAdapter,
    BashAdapter,
    ZshAdapter,
    FishAdapter,
    ShAdapter,
    DashAdapter,
    TcshAdapter,
    PowerShellAdapter,
    CmdAdapter,
    ShellRegistry,
    detect_platform,
    detect_shell,
)
from cli_tool_utils.commands import (
    CommandExecutor,
    CommandArgumentBuilder,
    CommandFormatter,
    PlainCommandFormatter,
    AnsiCommandFormatter,
    ProcessExecutor,
)
from cli_tool_utils.discovery import (
    ExecutableLocator,
    VersionDetector,
    VersionCompatibility,
    compare_versions,
)
from cli_tool_utils.validation import Validator, ParameterValidator
from cli_tool_utils.errors import (
    ApplicationError,
    ConfigurationError,
    UnsupportedPlatformError,
    UnknownShellError,
    ValidationError,
    ExecutableNotFoundError,
    ExecutionTimeoutError,
    ExecutionError,
    ErrorHandlerChain,
    ConsoleErrorHandler,
    LoggerErrorHandler,
)
from cli_tool_utils.context import ExecutionContext

__all__ = [
    # Logging
    "Logger",
    "FileLogger",
    "DebugTracer",
    # Config
    "ConfigLoader",
    "FileConfigLoader",
    "RunnerSettings",
    "SettingsResolver",
    # Cache
    "TTLCache",
    # Modèles
    "ArgumentDefinition",
    "CommandDefinition",
    "EnvVarDefinition",
    "FlagDefinition",
    "FormatStyle",
    "OptionDefinition",
    "ExecutableInfo",
    "LocatedExecutable",
    "ExecutionResult",
    "CompatibilityResult",
    "VersionDetectionMethod",
    "VersionInfo",
    # Shells
    "ShellAdapter",
    "BashAdapter",
    "ZshAdapter",
    "FishAdapter",
    "ShAdapter",
    "DashAdapter",
    "TcshAdapter",
    "PowerShellAdapter",
    "CmdAdapter",
    "ShellRegistry",
    "detect_platform",
    "detect_shell",
    # Commandes
    "CommandExecutor",
    "CommandArgumentBuilder",
    "CommandFormatter",
    "PlainCommandFormatter",
    "AnsiCommandFormatter",
    "ProcessExecutor",
    # Découverte
    "ExecutableLocator",
    "VersionDetector",
    "VersionCompatibility",
    "compare_versions",
    # Validation
    "Validator",
    "ParameterValidator",
    # Erreurs
    "ApplicationError",
    "ConfigurationError",
    "UnsupportedPlatformError",
    "UnknownShellError",
    "ValidationError",
    "ExecutableNotFoundError",
    "ExecutionTimeoutError",
    "ExecutionError",
    "ErrorHandlerChain",
    "ConsoleErrorHandler",
    "LoggerErrorHandler",
    # Contexte
    "ExecutionContext",
]
