"""Détection de la version installée d'un outil et contrôle d'exigences.

Classes :
    VersionDetector : Sondes ``--version`` et pages de manuel.
    VersionCompatibility : Vérifie une exigence (``>= 7.0, < 8``).

Fonctions :
    compare_versions : Comparaison composante par composante.

Example:
    Vérifier qu'ImageMagick 7 est installé :

        detector = VersionDetector(BashAdapter())
        version = detector.detect(
            "/usr/bin/magick", pattern=r"(\\d+\\.\\d+\\.\\d+)"
        )
        result = VersionCompatibility.check(version, ">= 7.0, < 8")
        print(result.status_message)
"""

import re
from typing import List, Optional, Sequence, Tuple, Union

from cli_tool_utils.commands.runner import ProcessExecutor
from cli_tool_utils.discovery.man_page import ManPageParser
from cli_tool_utils.errors.exceptions import ApplicationError, ValidationError
from cli_tool_utils.logging.base import Logger
from cli_tool_utils.logging.debug import DebugTracer
from cli_tool_utils.models.version import (DEFAULT_VERSION_PATTERN,
                                           UNKNOWN_VERSION, CompatibilityResult,
                                           VersionDetectionMethod, VersionInfo)
from cli_tool_utils.shell.base import ShellAdapter
from cli_tool_utils.shell.detection import detect_platform

VERSION_COMMAND_TIMEOUT = 30
MAN_OUTPUT_TAIL = 500

_LEADING_DIGITS = re.compile(r"^(\d+)")
_REQUIREMENT = re.compile(r"^([><=!~]+)\s*(.+)$")
OPERATORS = (">=", ">", "<=", "<", "==", "=", "!=", "~>")


def _components(version: str) -> List[int]:
    parts = []
    for piece in str(version).strip().split("."):
        match = _LEADING_DIGITS.match(piece.strip())
        parts.append(int(match.group(1)) if match else 0)
    return parts


def compare_versions(a: str, b: str) -> int:
    """Compare deux versions pointées.

    Les composantes sont comparées comme des entiers (``10.0 > 9.5``),
    la plus courte étant complétée par des zéros. Une composante non
    numérique vaut ses chiffres de tête, ou 0.

    Returns:
        Négatif si a < b, 0 si égales, positif si a > b.
    """
    left, right = _components(a), _components(b)
    width = max(len(left), len(right))
    left += [0] * (width - len(left))
    right += [0] * (width - len(right))
    return (left > right) - (left < right)


class VersionDetector:
    """Détermine la version d'un exécutable.

    Les sondes ``command`` lancent l'exécutable via le shell avec
    ``allow_failure`` ; la première correspondance de la regex dans
    stdout, puis dans stderr, donne la version. Un échec de toutes les
    sondes produit ``unknown``.
    """

    def __init__(
        self,
        shell: ShellAdapter,
        executor: Optional[ProcessExecutor] = None,
        platform: Optional[str] = None,
        man_page_parser: Optional[ManPageParser] = None,
        logger: Optional[Logger] = None,
        tracer: Optional[DebugTracer] = None,
    ) -> None:
        self.shell = shell
        self._executor = executor or ProcessExecutor(logger=logger)
        self._platform = platform
        self._man_pages = man_page_parser or ManPageParser()
        self._logger = logger
        self._tracer = tracer or DebugTracer()

    @property
    def platform(self) -> str:
        if self._platform is None:
            self._platform = detect_platform()
        return self._platform

    def detect(
        self,
        executable: str,
        command: Union[str, Sequence[str]] = "--version",
        pattern: str = DEFAULT_VERSION_PATTERN,
        timeout: float = VERSION_COMMAND_TIMEOUT,
        source: str = "command",
    ) -> str:
        """Sonde unique : lance ``executable command`` et applique la regex.

        Args:
            executable: Exécutable résolu.
            command: Argument(s) de la sonde.
            pattern: Regex dont le premier groupe est la version.
            timeout: Délai de la sonde en secondes.
            source: ``man`` pour ne chercher que dans la fin de la sortie
                (sortie de ``man``), ``command`` sinon.

        Returns:
            La version, ou ``unknown``.
        """
        info = self._try_command(executable, command, pattern, timeout, source)
        return info.value if info else UNKNOWN_VERSION

    def detect_with_methods(
        self,
        executable: str,
        methods: Sequence[VersionDetectionMethod],
        timeout: float = VERSION_COMMAND_TIMEOUT,
    ) -> VersionInfo:
        """Essaie les méthodes dans l'ordre ; la première qui répond gagne.

        Returns:
            VersionInfo ; ``value`` vaut ``unknown`` si aucune n'aboutit.
        """
        available = self._method_types(methods)
        for method in methods:
            if method.type == "command":
                info = self._try_command(
                    executable, method.command, method.pattern, timeout
                )
                if info:
                    return VersionInfo(info.value, "command", available)
            elif method.type == "man_page":
                found = self._man_pages.parse_date(method.path_for(self.platform))
                if found:
                    return VersionInfo(found, "man_page", available)

        if self._logger:
            self._logger.log_warning(
                f"Version de {executable} indéterminée "
                f"(méthodes : {', '.join(available) or 'aucune'})"
            )
        return VersionInfo(UNKNOWN_VERSION, None, available)

    @staticmethod
    def _method_types(
        methods: Sequence[VersionDetectionMethod],
    ) -> Tuple[str, ...]:
        seen: List[str] = []
        for method in methods:
            if method.type not in seen:
                seen.append(method.type)
        return tuple(seen)

    def _try_command(
        self,
        executable: str,
        command: Union[str, Sequence[str]],
        pattern: str,
        timeout: float,
        source: str = "command",
    ) -> Optional[VersionInfo]:
        if not executable:
            return None
        args = [command] if isinstance(command, str) else list(command)
        try:
            result = self._executor.run(
                executable, args, self.shell, timeout=timeout,
                allow_failure=True,
            )
        except ApplicationError as e:
            self._tracer.trace(f"sonde de version en échec : {e}")
            return None
        if not result.success:
            self._tracer.trace(
                f"sonde de version {executable} : code {result.exit_status}"
            )
            return None

        regex = re.compile(pattern)
        if source == "man":
            output = result.stdout + result.stderr
            match = regex.search(output[-MAN_OUTPUT_TAIL:])
            if match:
                return VersionInfo(match.group(1), "man_page", ("man_page",))

        match = regex.search(result.stdout) or regex.search(result.stderr)
        if not match:
            return None
        self._tracer.trace(f"version de {executable} : {match.group(1)}")
        return VersionInfo(match.group(1), "command", ("command",))


class VersionCompatibility:
    """Contrôle d'une version installée contre une exigence.

    Une exigence est une liste de contraintes séparées par des virgules,
    toutes obligatoires. Opérateurs : ``>=``, ``>``, ``<=``, ``<``,
    ``==`` (ou ``=``), ``!=`` et ``~>`` ; sans opérateur, ``==``.
    """

    @staticmethod
    def parse(requirement: str) -> List[Tuple[str, str]]:
        """Découpe une exigence en couples (opérateur, version).

        Raises:
            ValidationError: Si un opérateur est inconnu.
        """
        constraints = []
        for part in requirement.split(","):
            part = part.strip()
            if not part:
                continue
            match = _REQUIREMENT.match(part)
            if match:
                operator, version = match.group(1), match.group(2).strip()
                if operator not in OPERATORS:
                    raise ValidationError(
                        f"opérateur de version inconnu {operator!r}",
                        parameter_name="requirement",
                        constraint=" | ".join(OPERATORS),
                    )
            else:
                operator, version = "==", part
            constraints.append((operator, version))
        return constraints

    @staticmethod
    def satisfies(installed: str, operator: str, version: str) -> bool:
        """Vérifie une contrainte unique."""
        cmp = compare_versions(installed, version)
        if operator == ">=":
            return cmp >= 0
        if operator == ">":
            return cmp > 0
        if operator == "<=":
            return cmp <= 0
        if operator == "<":
            return cmp < 0
        if operator in ("==", "="):
            return cmp == 0
        if operator == "!=":
            return cmp != 0
        # ~> : borne haute = avant-dernière composante incrémentée
        parts = _components(version)
        if len(parts) >= 2:
            bound = parts[:-2] + [parts[-2] + 1]
        else:
            bound = [parts[0] + 1]
        ceiling = ".".join(str(part) for part in bound)
        return cmp >= 0 and compare_versions(installed, ceiling) < 0

    @classmethod
    def check(
        cls, installed: str, requirement: Optional[str]
    ) -> CompatibilityResult:
        """Évalue ``installed`` contre ``requirement``.

        Une exigence vide est toujours satisfaite ; une version
        ``unknown`` ne satisfait aucune exigence.
        """
        requirement = (requirement or "").strip()
        if not requirement:
            return CompatibilityResult(
                True, installed, requirement, "Aucune exigence"
            )
        if not installed or installed == UNKNOWN_VERSION:
            return CompatibilityResult(
                False, installed, requirement,
                f"Version installée inconnue (exigence : {requirement})",
            )

        for operator, version in cls.parse(requirement):
            if not cls.satisfies(installed, operator, version):
                return CompatibilityResult(
                    False, installed, requirement,
                    f"La version {installed} ne respecte pas "
                    f"{operator} {version} (exigence : {requirement})",
                )
        return CompatibilityResult(
            True, installed, requirement,
            f"La version {installed} respecte {requirement}",
        )
