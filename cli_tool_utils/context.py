"""Contexte d'exécution : assemble réglages, shell, caches et services.

ExecutionContext possède les caches (exécutables, versions) et les
transmet explicitement aux composants qu'il crée ; aucun état global
n'est partagé entre deux contextes.

Example:
    Conversion d'une image avec détection automatique du shell :

        from cli_tool_utils import ExecutionContext
        from cli_tool_utils.models import CommandDefinition

        context = ExecutionContext.from_config("outils.toml")
        convert = CommandDefinition.from_dict(convert_spec)
        result = context.run(
            convert,
            {"inputs": ["a.png"], "output": "b.jpg"},
            tool_name="magick",
            aliases=["convert"],
        )
        print(result)
"""

from pathlib import Path
from typing import (Any, Dict, List, Mapping, Optional, Sequence, Tuple,
                    Union)

from cli_tool_utils.cache.ttl_cache import TTLCache
from cli_tool_utils.commands.builder import CommandArgumentBuilder
from cli_tool_utils.commands.formatter import CommandFormatter
from cli_tool_utils.commands.runner import ProcessExecutor
from cli_tool_utils.config.settings import RunnerSettings, SettingsResolver
from cli_tool_utils.discovery.locator import ExecutableLocator, SearchPaths
from cli_tool_utils.discovery.version import (VersionCompatibility,
                                              VersionDetector)
from cli_tool_utils.errors.exceptions import VersionDetectionError
from cli_tool_utils.logging.base import Logger
from cli_tool_utils.logging.debug import DebugTracer
from cli_tool_utils.models.definitions import CommandDefinition
from cli_tool_utils.models.executable_info import LocatedExecutable
from cli_tool_utils.models.result import ExecutionResult
from cli_tool_utils.models.version import (CompatibilityResult,
                                           VersionDetectionMethod,
                                           VersionInfo)
from cli_tool_utils.shell.detection import detect_platform, detect_shell
from cli_tool_utils.shell.registry import ShellRegistry

DEFAULT_VERSION_METHODS = (VersionDetectionMethod(),)


class ExecutionContext:
    """Point d'entrée : localise, construit et exécute des commandes.

    Attributes:
        settings: Réglages résolus.
        platform: Plateforme effective.
        registry: Registre des adaptateurs de shell.
        shell: Adaptateur du shell effectif.
        executable_cache: Cache des exécutables localisés.
        version_cache: Cache des versions détectées.
    """

    def __init__(
        self,
        settings: Optional[RunnerSettings] = None,
        logger: Optional[Logger] = None,
        registry: Optional[ShellRegistry] = None,
        executable_cache: Optional[TTLCache] = None,
        version_cache: Optional[TTLCache] = None,
        console_formatter: Optional[CommandFormatter] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        """Initialise le contexte.

        Args:
            settings: Réglages (défaut: RunnerSettings()).
            logger: Logger transmis à tous les composants.
            registry: Registre de shells (défaut: huit adaptateurs).
            executable_cache: Cache des exécutables (défaut: selon
                cache_size et cache_ttl).
            version_cache: Cache des versions (idem).
            console_formatter: Formateur console de l'exécuteur.
            environ: Environnement lu pour la détection du shell et PATH.

        Raises:
            UnsupportedPlatformError: Si la plateforme n'est pas reconnue.
            UnknownShellError: Si le shell ne peut être déterminé.
        """
        self.settings = settings or RunnerSettings()
        self.platform = self.settings.platform or detect_platform()
        self.registry = registry or ShellRegistry.with_defaults()
        shell_name = self.settings.shell or detect_shell(
            self.platform, environ
        )
        self.shell = self.registry.get(shell_name)
        self.tracer = DebugTracer(
            enabled=True if self.settings.debug else None
        )

        # un TTLCache vide est falsy : tester None explicitement
        self.executable_cache = (
            self._new_cache() if executable_cache is None
            else executable_cache
        )
        self.version_cache = (
            self._new_cache() if version_cache is None else version_cache
        )

        self.executor = ProcessExecutor(
            logger=logger,
            default_timeout=self.settings.timeout,
            headless=self.settings.headless,
            platform=self.platform,
            console_formatter=console_formatter,
            tracer=self.tracer,
        )
        self.locator = ExecutableLocator(
            self.shell,
            platform=self.platform,
            cache=self.executable_cache,
            logger=logger,
            environ=environ,
            tracer=self.tracer,
        )
        self.version_detector = VersionDetector(
            self.shell,
            executor=self.executor,
            platform=self.platform,
            logger=logger,
            tracer=self.tracer,
        )
        self.builder = CommandArgumentBuilder(
            self.shell, platform=self.platform, tracer=self.tracer
        )

    @classmethod
    def from_config(
        cls,
        config_path: Optional[Union[str, Path]] = None,
        logger: Optional[Logger] = None,
        environ: Optional[Mapping[str, str]] = None,
        **overrides: Any,
    ) -> "ExecutionContext":
        """Crée un contexte depuis fichier, environnement et surcharges.

        Raises:
            ConfigurationError: Si une source est invalide.
        """
        settings = SettingsResolver(config_path, environ=environ).resolve(
            **overrides
        )
        return cls(settings, logger=logger, environ=environ)

    def _new_cache(self) -> TTLCache:
        return TTLCache(
            max_size=self.settings.cache_size, ttl=self.settings.cache_ttl
        )

    def locate(
        self,
        tool_name: str,
        aliases: Sequence[str] = (),
        version: Optional[str] = None,
        search_paths: Optional[SearchPaths] = None,
    ) -> LocatedExecutable:
        """Résout un outil ; lève ExecutableNotFoundError s'il manque."""
        return self.locator.require(
            tool_name, aliases, platform=self.platform, version=version,
            search_paths=search_paths,
        )

    def detect_version(
        self,
        executable: str,
        methods: Optional[Sequence[VersionDetectionMethod]] = None,
        timeout: Optional[float] = None,
    ) -> VersionInfo:
        """Version d'un exécutable, mise en cache quand elle est connue."""
        methods = tuple(methods or DEFAULT_VERSION_METHODS)
        key: Tuple[Any, ...] = (executable, self.shell.name, methods)
        cached = self.version_cache.get(key)
        if cached is not None:
            return cached
        kwargs: Dict[str, Any] = {}
        if timeout is not None:
            kwargs["timeout"] = timeout
        info = self.version_detector.detect_with_methods(
            executable, methods, **kwargs
        )
        if info.is_known:
            self.version_cache.set(key, info)
        return info

    def check_version(
        self,
        executable: str,
        requirement: Optional[str],
        methods: Optional[Sequence[VersionDetectionMethod]] = None,
    ) -> CompatibilityResult:
        """Compare la version détectée à une exigence (``>= 7.0, < 8``)."""
        info = self.detect_version(executable, methods)
        return VersionCompatibility.check(info.value, requirement)

    def require_version(
        self,
        executable: str,
        requirement: str,
        methods: Optional[Sequence[VersionDetectionMethod]] = None,
    ) -> VersionInfo:
        """Comme check_version, mais lève si l'exigence n'est pas tenue.

        Raises:
            VersionDetectionError: Version inconnue ou incompatible.
        """
        info = self.detect_version(executable, methods)
        result = VersionCompatibility.check(info.value, requirement)
        if not result.compatible:
            raise VersionDetectionError(
                f"{executable} : {result.status_message}"
            )
        return info

    def build(
        self, command: CommandDefinition, params: Mapping[str, Any]
    ) -> List[str]:
        return self.builder.build(command, params)

    def run(
        self,
        command: CommandDefinition,
        params: Mapping[str, Any],
        tool_name: str,
        aliases: Sequence[str] = (),
        stdin: Optional[Any] = None,
        allow_failure: bool = False,
        timeout: Optional[float] = None,
        cwd: Optional[str] = None,
        env: Optional[Dict[str, str]] = None,
        search_paths: Optional[SearchPaths] = None,
    ) -> ExecutionResult:
        """Valide les paramètres, localise l'outil et exécute la commande.

        Les paramètres sont validés avant toute recherche ou lancement.

        Args:
            command: Définition de la commande.
            params: Valeurs des paramètres.
            tool_name: Nom de l'outil à localiser.
            aliases: Noms alternatifs de l'outil.
            stdin: Données pour l'entrée standard.
            allow_failure: Retourner le résultat d'un code non nul.
            timeout: Délai (défaut: settings.timeout).
            cwd: Répertoire de travail.
            env: Variables ajoutées après celles de la définition.
            search_paths: Motifs glob par plateforme, essayés avant le
                PATH.

        Returns:
            ExecutionResult.

        Raises:
            ValidationError: Paramètre invalide.
            ExecutableNotFoundError: Outil introuvable.
            ExecutionTimeoutError: Délai dépassé.
            ExecutionError: Lancement impossible ou code non nul.
        """
        args = self.builder.build(command, params)
        child_env = self.builder.build_env_vars(command, params)
        if env:
            child_env.update(env)
        located = self.locate(tool_name, aliases, search_paths=search_paths)
        return self.executor.run(
            located.path,
            args,
            self.shell,
            env=child_env,
            cwd=cwd,
            timeout=timeout,
            stdin=stdin,
            allow_failure=allow_failure,
        )
