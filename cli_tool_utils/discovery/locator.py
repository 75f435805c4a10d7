"""Résolution d'un nom d'outil en exécutable lançable.

La recherche applique une liste ordonnée de stratégies, chacune
retournant un LocatedExecutable ou None :

    1. AliasDiscovery : alias défini dans le shell actif ;
    2. SearchPathDiscovery : motifs glob propres à la plateforme
       (installations hors PATH, fréquentes sous Windows et macOS) ;
    3. PathDiscovery : parcours du PATH (et de PATHEXT sous Windows).

Le nom de l'outil est essayé en premier, puis chacun de ses alias.

Example:
    Localisation de Ghostscript, installé hors PATH sous Windows :

        from cli_tool_utils.cache import TTLCache
        from cli_tool_utils.discovery import ExecutableLocator
        from cli_tool_utils.shell import BashAdapter

        locator = ExecutableLocator(BashAdapter(), cache=TTLCache())
        windows_gs = "C:/Program Files/gs/*/bin/gswin64c.exe"
        located = locator.require(
            "gs",
            aliases=["gswin64c"],
            search_paths={"windows": [windows_gs]},
        )
        print(located.info.description)
"""

import glob
import os
from abc import ABC, abstractmethod
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from cli_tool_utils.cache.ttl_cache import TTLCache
from cli_tool_utils.errors.exceptions import ExecutableNotFoundError
from cli_tool_utils.logging.base import Logger
from cli_tool_utils.logging.debug import DebugTracer
from cli_tool_utils.models.executable_info import (ExecutableInfo,
                                                   ExecutableSource,
                                                   LocatedExecutable)
from cli_tool_utils.shell.base import ShellAdapter
from cli_tool_utils.shell.detection import detect_platform

DEFAULT_PATHEXT = ".COM;.EXE;.BAT;.CMD"

SearchPaths = Mapping[str, Sequence[str]]


def platform_search_paths(
    search_paths: Optional[SearchPaths], platform: str
) -> Tuple[str, ...]:
    """Motifs déclarés pour la plateforme (``{"windows": [...]}``)."""
    if not search_paths:
        return ()
    return tuple(search_paths.get(platform) or ())


class PathScanner:
    """Recherche d'un fichier exécutable dans le PATH ou par motifs glob.

    Attributes:
        platform: Plateforme cible (séparateur et extensions).
        patterns: Motifs glob visant directement l'exécutable.
    """

    def __init__(
        self,
        platform: str,
        environ: Optional[Mapping[str, str]] = None,
        patterns: Sequence[str] = (),
    ) -> None:
        self.platform = platform
        self._environ = os.environ if environ is None else environ
        self.patterns = tuple(patterns)

    @property
    def separator(self) -> str:
        return ";" if self.platform == "windows" else ":"

    def search_paths(self) -> List[str]:
        """Répertoires du PATH, dans l'ordre, sans doublons ni vides."""
        raw = self._environ.get("PATH", "")
        paths: List[str] = []
        for entry in raw.split(self.separator):
            entry = entry.strip()
            if entry and entry not in paths:
                paths.append(entry)
        return paths

    def extensions(self) -> List[str]:
        """Suffixes essayés : ``.exe`` d'abord sous Windows."""
        if self.platform != "windows":
            return [""]
        pathext = self._environ.get("PATHEXT") or DEFAULT_PATHEXT
        exts = [e for e in pathext.split(";") if e]
        exe = [e for e in exts if e.lower() == ".exe"]
        return exe[:1] + [e for e in exts if e.lower() != ".exe"]

    @staticmethod
    def is_executable(path: str) -> bool:
        return os.path.isfile(path) and os.access(path, os.X_OK)

    def _candidates(self, command: str) -> List[str]:
        exts = self.extensions()
        _, current_ext = os.path.splitext(command)
        if current_ext and current_ext.lower() in (e.lower() for e in exts):
            return [command]
        return [command + ext for ext in exts]

    def find_by_pattern(self) -> Optional[str]:
        """Premier exécutable désigné par les motifs, dans leur ordre."""
        for pattern in self.patterns:
            for path in sorted(glob.glob(os.path.expanduser(pattern))):
                if self.is_executable(path):
                    return path
        return None

    def find(self, command: str) -> Optional[str]:
        """Chemin complet de la commande, ou None.

        Un nom contenant un séparateur de répertoire est vérifié tel quel.
        """
        if not command:
            return None
        if os.sep in command or "/" in command:
            for candidate in self._candidates(command):
                if self.is_executable(candidate):
                    return candidate
            return None

        for directory in self.search_paths():
            for candidate in self._candidates(command):
                full_path = os.path.join(directory, candidate)
                if self.is_executable(full_path):
                    return full_path
        return None


class DiscoveryStrategy(ABC):
    """Stratégie de découverte d'un exécutable."""

    @abstractmethod
    def discover(
        self, command: str, shell: ShellAdapter, scanner: PathScanner
    ) -> Optional[LocatedExecutable]:
        """Tente de résoudre ``command`` ; None si non trouvé."""
        pass


class AliasDiscovery(DiscoveryStrategy):
    """Résolution via un alias du shell actif.

    La cible de l'alias (premier mot) est cherchée dans le PATH, puis
    à défaut le nom de la commande elle-même.
    """

    def discover(
        self, command: str, shell: ShellAdapter, scanner: PathScanner
    ) -> Optional[LocatedExecutable]:
        alias = shell.detect_alias(command)
        if alias is None:
            return None
        path = scanner.find(alias.target) or scanner.find(command)
        if path is None:
            return None
        info = ExecutableInfo(
            path=path,
            source=ExecutableSource.ALIAS,
            shell=shell.name,
            alias_definition=alias.definition,
        )
        return LocatedExecutable(path=path, info=info, matched_name=command)


class SearchPathDiscovery(DiscoveryStrategy):
    """Résolution par les motifs de recherche de la plateforme.

    Les motifs désignent l'exécutable de l'outil lui-même : le premier
    fichier exécutable trouvé l'emporte, quel que soit le nom essayé.
    """

    def discover(
        self, command: str, shell: ShellAdapter, scanner: PathScanner
    ) -> Optional[LocatedExecutable]:
        path = scanner.find_by_pattern()
        if path is None:
            return None
        info = ExecutableInfo(
            path=path, source=ExecutableSource.SEARCH_PATH, shell=shell.name
        )
        return LocatedExecutable(path=path, info=info, matched_name=command)


class PathDiscovery(DiscoveryStrategy):
    """Résolution par parcours du PATH."""

    def discover(
        self, command: str, shell: ShellAdapter, scanner: PathScanner
    ) -> Optional[LocatedExecutable]:
        path = scanner.find(command)
        if path is None:
            return None
        info = ExecutableInfo(
            path=path, source=ExecutableSource.PATH, shell=shell.name
        )
        return LocatedExecutable(path=path, info=info, matched_name=command)


DEFAULT_STRATEGIES = (
    AliasDiscovery(), SearchPathDiscovery(), PathDiscovery(),
)


class ExecutableLocator:
    """Localise les exécutables d'un outil pour un shell donné.

    Attributes:
        shell: Adaptateur du shell actif.
        platform: Plateforme par défaut des recherches.
    """

    def __init__(
        self,
        shell: ShellAdapter,
        platform: Optional[str] = None,
        cache: Optional[TTLCache] = None,
        strategies: Optional[Sequence[DiscoveryStrategy]] = None,
        logger: Optional[Logger] = None,
        environ: Optional[Mapping[str, str]] = None,
        tracer: Optional[DebugTracer] = None,
    ) -> None:
        """Initialise le localisateur.

        Args:
            shell: Adaptateur du shell actif.
            platform: Plateforme (défaut: détectée).
            cache: Cache des résultats ; None désactive la mise en cache.
            strategies: Stratégies ordonnées (défaut: alias, motifs de
                recherche puis PATH).
            logger: Logger optionnel.
            environ: Environnement lu pour PATH et PATHEXT.
            tracer: Traceur de diagnostic.
        """
        self.shell = shell
        self.platform = platform or detect_platform()
        self._cache = cache
        self._strategies = list(strategies or DEFAULT_STRATEGIES)
        self._logger = logger
        self._environ = environ
        self._tracer = tracer or DebugTracer()

    def _scanner(
        self, platform: str, patterns: Sequence[str] = ()
    ) -> PathScanner:
        return PathScanner(platform, environ=self._environ, patterns=patterns)

    def find_with_info(
        self,
        tool_name: str,
        aliases: Sequence[str] = (),
        platform: Optional[str] = None,
        version: Optional[str] = None,
        search_paths: Optional[SearchPaths] = None,
    ) -> Optional[LocatedExecutable]:
        """Résout un outil par son nom puis par ses alias.

        Args:
            tool_name: Nom principal de l'outil.
            aliases: Noms alternatifs, essayés dans l'ordre.
            platform: Plateforme (défaut: celle du localisateur).
            version: Version visée, incluse dans la clé de cache.
            search_paths: Motifs glob par plateforme, essayés avant le
                PATH (``{"macos": ["/opt/homebrew/bin/gs"]}``).

        Returns:
            LocatedExecutable, ou None si rien n'est trouvé.
        """
        platform = platform or self.platform
        patterns = platform_search_paths(search_paths, platform)
        key = (
            tool_name, platform, self.shell.name, version, tuple(aliases),
            patterns,
        )
        if self._cache is not None:
            return self._cache.get_or_set(
                key,
                lambda: self._search(tool_name, aliases, platform, patterns),
            )
        return self._search(tool_name, aliases, platform, patterns)

    def _search(
        self,
        tool_name: str,
        aliases: Sequence[str],
        platform: str,
        patterns: Sequence[str] = (),
    ) -> Optional[LocatedExecutable]:
        scanner = self._scanner(platform, patterns)
        for name in [tool_name, *aliases]:
            for strategy in self._strategies:
                located = strategy.discover(name, self.shell, scanner)
                if located is not None:
                    self._tracer.section(
                        f"découverte de {tool_name}",
                        name=name,
                        strategy=type(strategy).__name__,
                        path=located.path,
                    )
                    if self._logger:
                        self._logger.log_info(
                            f"{tool_name} : {located.info.description}"
                        )
                    return located
        self._tracer.trace(
            f"{tool_name} introuvable (noms : {[tool_name, *aliases]})"
        )
        return None

    def find(
        self,
        tool_name: str,
        aliases: Sequence[str] = (),
        platform: Optional[str] = None,
        search_paths: Optional[SearchPaths] = None,
    ) -> Optional[str]:
        """Chemin de l'exécutable, ou None."""
        located = self.find_with_info(
            tool_name, aliases, platform, search_paths=search_paths
        )
        return located.path if located else None

    def require(
        self,
        tool_name: str,
        aliases: Sequence[str] = (),
        platform: Optional[str] = None,
        version: Optional[str] = None,
        search_paths: Optional[SearchPaths] = None,
    ) -> LocatedExecutable:
        """Comme find_with_info, mais lève si l'outil est introuvable.

        Raises:
            ExecutableNotFoundError: Si aucun nom n'est résolu.
        """
        located = self.find_with_info(
            tool_name, aliases, platform, version, search_paths
        )
        if located is None:
            if self._logger:
                self._logger.log_error(f"Exécutable introuvable : {tool_name}")
            raise ExecutableNotFoundError(tool_name, [tool_name, *aliases])
        return located

    def cache_stats(self) -> Dict[str, object]:
        return self._cache.stats() if self._cache is not None else {}
